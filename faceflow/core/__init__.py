# core/__init__.py
"""
Core modules: camera capture, face landmark model, triangulation and the
capture/render session.
"""

from .errors import FaceflowError, CameraUnavailable, ModelLoadError, InferenceFailure
from .device import is_mobile, runtime_user_agent

__all__ = [
    "FaceflowError",
    "CameraUnavailable",
    "ModelLoadError",
    "InferenceFailure",
    "is_mobile",
    "runtime_user_agent",
]
