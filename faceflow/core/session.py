# core/session.py
"""
Capture and render loop: camera -> face landmark model -> mesh overlay
"""
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import cv2
import numpy as np
from loguru import logger

from faceflow.config.settings import SystemConfig
from faceflow.core.camera_manager import WebcamStream, build_constraints
from faceflow.core.device import is_mobile, point_cloud_allowed, runtime_user_agent
from faceflow.core.face_mesh import FaceMeshDetector, Prediction
from faceflow.core.triangulation import load_triangulation
from faceflow.utils.logger import log_performance_stats
from faceflow.utils.performance import PerformanceMonitor, FrameDropCounter
from faceflow.visualization.drawing import DrawingStyle, draw_mesh, draw_keypoints
from faceflow.visualization.hud_overlay import StatsOverlay
from faceflow.visualization.point_cloud import PointCloudVisualizer, flatten_point_cloud


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class RenderState:
    """User-adjustable rendering options for the session"""
    backend: str = "gpu"
    max_faces: int = 1
    triangulate_mesh: bool = True
    render_pointcloud: Optional[bool] = None  # None on mobile, the option does not exist there

    @classmethod
    def from_config(cls, config: SystemConfig, mobile: bool) -> "RenderState":
        state = cls(
            backend=config.model.backend,
            max_faces=config.model.max_faces,
            triangulate_mesh=config.render.triangulate_mesh
        )
        if point_cloud_allowed(mobile):
            state.render_pointcloud = config.render.render_pointcloud
        return state


class FaceflowSession:
    """Owns the camera, model, canvas and visualizer for one run"""

    def __init__(self, config: SystemConfig,
                 camera: Optional[WebcamStream] = None,
                 detector: Optional[FaceMeshDetector] = None,
                 visualizer: Optional[PointCloudVisualizer] = None,
                 triangulation: Optional[Sequence[int]] = None,
                 stop_event: Optional[threading.Event] = None):
        config.validate()
        self.config = config
        self.camera = camera
        self.detector = detector
        self.visualizer = visualizer
        self.triangulation = triangulation
        self.stop_event = stop_event or threading.Event()
        self.state = SessionState.UNINITIALIZED

        self.user_agent = config.user_agent or runtime_user_agent()
        self.mobile = is_mobile(self.user_agent)
        self.pointcloud_allowed = point_cloud_allowed(self.mobile)
        self.render_state = RenderState.from_config(config, self.mobile)

        self.style = DrawingStyle.from_render_config(config.render)
        self.stats_overlay = StatsOverlay()
        self.canvas_width = 0
        self.canvas_height = 0

        self.perf_monitor = PerformanceMonitor(window_size=config.performance.fps_window)
        self.drop_counter = FrameDropCounter()
        self.last_heartbeat = time.monotonic()
        self.window_shown = False

    @property
    def running(self) -> bool:
        return self.state is SessionState.RUNNING

    def initialize(self):
        """Open the camera, set up the canvas, load the model"""
        if self.state is not SessionState.UNINITIALIZED:
            raise RuntimeError(f"Cannot initialize a session in state {self.state.value}")

        logger.info(f"Initializing session (mobile={self.mobile}, backend={self.render_state.backend})")
        try:
            constraints = build_constraints(
                self.mobile, self.config.camera.video_size, self.config.camera.facing_mode
            )
            if self.camera is None:
                self.camera = WebcamStream(self.config.camera)
            self.camera.open(constraints)

            self.canvas_width = self.camera.video_width
            self.canvas_height = self.camera.video_height
            self.drop_counter.camera_fps = self.camera.fps

            if self.triangulation is None:
                self.triangulation = load_triangulation(self.config.triangulation_path)

            if self.detector is None:
                self.detector = FaceMeshDetector(self.config.model, self.config.resolved_model_path)
            self.detector.load()

            if self.pointcloud_allowed and self.render_state.render_pointcloud:
                self._setup_visualizer()
            else:
                self.visualizer = None
        except Exception:
            self._release()
            raise

        self.state = SessionState.RUNNING
        logger.info(f"✓ Session running, canvas {self.canvas_width}x{self.canvas_height}")

    def _setup_visualizer(self):
        if self.visualizer is None:
            self.visualizer = PointCloudVisualizer(window_name=f"{self.config.render.window_name} point cloud")
        if not self.visualizer.initialize():
            self.visualizer = None

    def render_frame(self) -> np.ndarray:
        """Run one display tick and return the rendered canvas"""
        if self.state is not SessionState.RUNNING:
            raise RuntimeError("Session is not running")

        frame = self.camera.read()

        started = time.perf_counter()
        predictions = self.detector.estimate_faces(frame)
        inference_time = time.perf_counter() - started

        canvas, scale = self._draw_frame(frame)

        for prediction in predictions:
            keypoints = prediction.scaled_mesh[:, :2] * scale if scale is not None else prediction.scaled_mesh
            if self.render_state.triangulate_mesh:
                draw_mesh(canvas, keypoints, self.triangulation, self.style)
            else:
                draw_keypoints(canvas, keypoints, self.style)

        if predictions:
            self._update_point_cloud(predictions)
        self._pump_visualizer()

        self.perf_monitor.log_inference_time(inference_time, len(predictions))
        self.drop_counter.record(inference_time)
        self.perf_monitor.update_fps()

        if self.config.camera.mirror:
            canvas = cv2.flip(canvas, 1)
        if self.config.render.show_stats:
            self.stats_overlay.render(canvas, self.perf_monitor.get_current_stats())
        return canvas

    def _draw_frame(self, frame: np.ndarray):
        height, width = frame.shape[:2]
        if (width, height) == (self.canvas_width, self.canvas_height):
            return frame.copy(), None
        canvas = cv2.resize(frame, (self.canvas_width, self.canvas_height))
        return canvas, np.array([self.canvas_width / width, self.canvas_height / height], dtype=np.float32)

    def _update_point_cloud(self, predictions: List[Prediction]):
        if not (self.pointcloud_allowed and self.render_state.render_pointcloud and self.visualizer is not None):
            return

        dataset = flatten_point_cloud(predictions)
        if not self.visualizer.has_initialized:
            self.visualizer.render(dataset)
        else:
            self.visualizer.update_dataset(dataset)

    def _pump_visualizer(self):
        # The viewer window needs servicing every tick, faces or not
        if self.visualizer is None:
            return
        if not self.visualizer.pump():
            logger.info("Point cloud window closed")
            self._close_visualizer()
            self.render_state.render_pointcloud = False

    def _close_visualizer(self):
        if self.visualizer is not None:
            self.visualizer.close()
            self.visualizer = None

    def toggle_triangulation(self) -> bool:
        self.render_state.triangulate_mesh = not self.render_state.triangulate_mesh
        logger.info(f"Mesh triangulation {'on' if self.render_state.triangulate_mesh else 'off'}")
        return self.render_state.triangulate_mesh

    def toggle_pointcloud(self) -> Optional[bool]:
        if not self.pointcloud_allowed:
            logger.info("Point cloud is not available on mobile")
            return None
        self.render_state.render_pointcloud = not self.render_state.render_pointcloud
        if not self.render_state.render_pointcloud:
            self._close_visualizer()
        elif self.visualizer is None:
            self._setup_visualizer()
        logger.info(f"Point cloud {'on' if self.render_state.render_pointcloud else 'off'}")
        return self.render_state.render_pointcloud

    def run(self, stop_event: Optional[threading.Event] = None):
        """Render until the stop token is set or the user quits.

        Inference failures propagate to the caller; resources are released
        either way.
        """
        if self.state is not SessionState.RUNNING:
            raise RuntimeError("initialize() must succeed before run()")
        if stop_event is not None:
            self.stop_event = stop_event

        logger.info("Starting render loop")
        try:
            while not self.stop_event.is_set():
                canvas = self.render_frame()
                self._display(canvas)
                self._heartbeat()
                if not self._handle_keyboard_input():
                    break
        finally:
            self.close()

    def _display(self, canvas: np.ndarray):
        cv2.imshow(self.config.render.window_name, canvas)
        self.window_shown = True

    def _handle_keyboard_input(self) -> bool:
        """Handle keyboard input, return False to quit"""
        key = cv2.waitKey(1) & 0xFF

        if key in (ord('q'), 27):
            logger.info("Quit command received")
            return False
        elif key == ord('t'):
            self.toggle_triangulation()
        elif key == ord('p'):
            self.toggle_pointcloud()

        if cv2.getWindowProperty(self.config.render.window_name, cv2.WND_PROP_VISIBLE) < 1:
            logger.info("Display window closed")
            return False
        return True

    def _heartbeat(self):
        now = time.monotonic()
        if now - self.last_heartbeat < self.config.performance.heartbeat_interval_s:
            return
        self.last_heartbeat = now
        self.perf_monitor.update_system_stats()
        stats = {**self.perf_monitor.get_current_stats(), **self.drop_counter.get_stats()}
        logger.info(
            f"Heartbeat - FPS: {stats['fps']:.1f}, inference: {stats['inference_ms']:.1f} ms, "
            f"dropped frames: {stats['dropped_frames']}"
        )
        log_performance_stats(stats)

    def stop(self):
        """Request the render loop to finish its current tick and exit"""
        self.stop_event.set()

    def _release(self):
        self._close_visualizer()
        if self.detector is not None:
            self.detector.close()
        if self.camera is not None:
            self.camera.release()

    def close(self):
        """Release every resource the session holds"""
        if self.state is SessionState.STOPPED:
            return
        self.stop_event.set()
        self._release()
        if self.window_shown:
            cv2.destroyAllWindows()

        was_running = self.state is SessionState.RUNNING
        self.state = SessionState.STOPPED
        if was_running:
            stats = {**self.perf_monitor.get_current_stats(), **self.drop_counter.get_stats()}
            logger.info(
                f"Session stopped after {stats['frame_count']} frames "
                f"({stats['dropped_frames']} dropped during inference)"
            )
            log_performance_stats(stats)
