"""
Logging setup for the face mesh demo
Console output plus rotating main, error and performance logs
"""

import json
import platform
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import psutil
from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> - <cyan>{name}</cyan> - "
    "<level>{level}</level> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} - {name} - {level} - {function}:{line} - {message}"

perf_logger = logger.bind(perf=True)


def _is_perf(record) -> bool:
    return record["extra"].get("perf", False)


def init_logger(log_dir: Optional[str] = "logs",
                log_level: str = "INFO",
                console_output: bool = True,
                max_file_size: str = "10 MB",
                backup_count: int = 5):
    """Replace loguru's default sink with the application sinks"""
    logger.remove()
    level = log_level.upper()

    if console_output:
        logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT, colorize=True,
                   filter=lambda record: not _is_perf(record))

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        logger.add(path / "faceflow.log", level=level, format=FILE_FORMAT,
                   rotation=max_file_size, retention=backup_count,
                   filter=lambda record: not _is_perf(record))
        logger.add(path / "errors.log", level="ERROR", format=FILE_FORMAT,
                   rotation=max_file_size, retention=backup_count, backtrace=True)
        logger.add(path / "performance.log", level="INFO",
                   format="{time:YYYY-MM-DD HH:mm:ss} - PERF - {message}",
                   rotation=max_file_size, retention=backup_count, filter=_is_perf)

    logger.debug(f"Logger initialized (level={level}, dir={log_dir})")
    return logger


def log_system_info():
    """Log platform and host resources"""
    logger.info("=== SYSTEM INFORMATION ===")
    logger.info(f"Platform: {platform.platform()}")
    logger.info(f"Python: {platform.python_version()}")
    logger.info(f"CPU Cores: {psutil.cpu_count()}")
    logger.info(f"RAM: {psutil.virtual_memory().total / (1024**3):.1f} GB")
    logger.info("=== SYSTEM INFORMATION END ===")


def log_config(name: str, config: Dict[str, Any]):
    logger.info(f"=== {name.upper()} ===")
    for key, value in config.items():
        logger.info(f"{key}: {value}")


def log_performance_stats(stats: Dict[str, Any]):
    """Write a stats snapshot to the performance log and warn on low frame rate"""
    perf_logger.info(json.dumps(stats, default=float))
    fps = stats.get('fps', 0.0)
    if 0 < fps < 10:
        logger.warning(f"Low frame rate: {fps:.1f} FPS")


def log_error_with_context(error: BaseException, context: Optional[Dict[str, Any]] = None):
    """Log error with context and traceback"""
    message = f"Exception occurred: {type(error).__name__}: {error}"
    if context:
        message += f"\nContext: {json.dumps(context, indent=2, default=str)}"
    logger.opt(exception=error).error(message)
