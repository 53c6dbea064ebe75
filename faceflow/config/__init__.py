"""
Configuration module for the face mesh demo.
Handles camera, model, rendering and telemetry settings.
"""

from .settings import (
    SystemConfig,
    CameraConfig,
    ModelConfig,
    RenderConfig,
    PerformanceConfig,
    BACKENDS,
)

__all__ = [
    "SystemConfig",
    "CameraConfig",
    "ModelConfig",
    "RenderConfig",
    "PerformanceConfig",
    "BACKENDS",
]
