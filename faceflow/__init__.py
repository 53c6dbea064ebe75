# Root __init__.py for faceflow package
"""
Live webcam face mesh overlay.

Features:
- Webcam capture with browser-style constraints
- MediaPipe Face Landmarker inference (GPU or CPU delegate)
- Mesh triangle or landmark dot overlay drawn with OpenCV
- Optional Open3D point cloud of the detected landmarks
- Frame rate, inference latency and frame-drop telemetry
"""

__version__ = "1.0.0"
__description__ = "Live webcam face mesh overlay"
