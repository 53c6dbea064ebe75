# core/errors.py
"""
Error taxonomy for the capture and render loop
"""


class FaceflowError(Exception):
    """Base class for session failures"""


class CameraUnavailable(FaceflowError):
    """Camera permission denied, no device, or the stream stopped delivering"""


class ModelLoadError(FaceflowError):
    """The landmark model could not be fetched or instantiated"""


class InferenceFailure(FaceflowError):
    """Per-frame prediction failed"""
