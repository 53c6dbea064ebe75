#!/usr/bin/env python3
"""
Faceflow
Live webcam face mesh overlay with optional 3D point cloud
"""

import argparse
import signal
import sys

from loguru import logger

from faceflow.config.settings import SystemConfig, BACKENDS
from faceflow.core.errors import FaceflowError
from faceflow.core.session import FaceflowSession
from faceflow.utils.logger import init_logger, log_system_info, log_config, log_error_with_context


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Live face mesh overlay',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file path (JSON)')
    parser.add_argument('--camera', type=int, default=None,
                        help='Camera device index')
    parser.add_argument('--backend', type=str, default=None, choices=BACKENDS,
                        help='Inference backend')
    parser.add_argument('--max-faces', type=int, default=None,
                        help='Maximum number of faces to track')
    parser.add_argument('--no-triangulate', action='store_true',
                        help='Draw landmark dots instead of mesh triangles')
    parser.add_argument('--no-pointcloud', action='store_true',
                        help='Disable the 3D point cloud window')
    parser.add_argument('--user-agent', type=str, default=None,
                        help='Override runtime detection (mobile user agents disable the point cloud)')
    parser.add_argument('--triangulation', type=str, default=None,
                        help='JSON file with a flat triangle index table')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--log-dir', type=str, default=None,
                        help='Directory for log files')
    parser.add_argument('--save-config', type=str, default=None,
                        help='Write the effective configuration to this path and exit')
    return parser


def config_from_args(args: argparse.Namespace) -> SystemConfig:
    """Load the config file and apply command line overrides"""
    config = SystemConfig.load_from_file(args.config) if args.config else SystemConfig()

    if args.camera is not None:
        config.camera.camera_index = args.camera
    if args.backend is not None:
        config.model.backend = args.backend
    if args.max_faces is not None:
        config.model.max_faces = args.max_faces
    if args.no_triangulate:
        config.render.triangulate_mesh = False
    if args.no_pointcloud:
        config.render.render_pointcloud = False
    if args.user_agent is not None:
        config.user_agent = args.user_agent
    if args.triangulation is not None:
        config.triangulation_path = args.triangulation
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_dir is not None:
        config.logs_dir = args.log_dir

    config.validate()
    return config


def setup_signal_handlers(session: FaceflowSession):
    """Stop the render loop on SIGINT/SIGTERM"""
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        session.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
    except (ValueError, TypeError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    if args.save_config:
        config.save_to_file(args.save_config)
        print(f"Configuration written to {args.save_config}")
        return 0

    init_logger(log_dir=config.logs_dir, log_level=config.log_level, console_output=True)
    log_system_info()
    log_config("configuration", {
        'camera_index': config.camera.camera_index,
        'backend': config.model.backend,
        'max_faces': config.model.max_faces,
        'triangulate_mesh': config.render.triangulate_mesh,
        'render_pointcloud': config.render.render_pointcloud
    })

    session = FaceflowSession(config)
    setup_signal_handlers(session)

    print("Controls: 'q'/Esc quit, 't' toggle mesh triangles, 'p' toggle point cloud")

    try:
        session.initialize()
        session.run()
    except FaceflowError as e:
        log_error_with_context(e, {'component': 'session', 'state': session.state.value})
        return 1
    except (ValueError, OSError) as e:
        # Bad triangulation file or a table that does not fit the model's landmarks
        log_error_with_context(e, {'component': 'configuration', 'state': session.state.value})
        return 1
    finally:
        session.close()

    logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
