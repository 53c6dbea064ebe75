# core/camera_manager.py
"""
Webcam stream acquisition with browser-style constraints
"""
import cv2
import numpy as np
import time
from typing import Optional, Dict, Any
from loguru import logger
from faceflow.config.settings import CameraConfig
from faceflow.core.errors import CameraUnavailable


def build_constraints(mobile: bool, video_size: int = 500, facing_mode: str = "user") -> Dict[str, Any]:
    """Media constraints for the capture request.

    Only non-mobile runtimes request a fixed size so the point cloud has room;
    mobile devices keep their native resolution.
    """
    video: Dict[str, Any] = {'facingMode': facing_mode}
    if not mobile:
        video['width'] = video_size
        video['height'] = video_size
    return {'audio': False, 'video': video}


class WebcamStream:
    """Local webcam handler"""

    def __init__(self, config: CameraConfig):
        self.config = config
        self.cap = None
        self.video_width = 0
        self.video_height = 0
        self.fps = 0.0
        self.frames_read = 0
        self._pending_frame: Optional[np.ndarray] = None

    def open(self, constraints: Dict[str, Any]) -> "WebcamStream":
        """Open the device and wait for the first frame.

        Raises CameraUnavailable when the device cannot be opened or never
        delivers a frame.
        """
        if constraints.get('audio'):
            raise ValueError("Audio capture is not supported")

        try:
            self.cap = cv2.VideoCapture(self.config.camera_index)
        except cv2.error as e:
            raise CameraUnavailable(f"Camera {self.config.camera_index} could not be opened: {e}") from e

        if self.cap is None or not self.cap.isOpened():
            self.release()
            raise CameraUnavailable(
                f"Camera {self.config.camera_index} is not available (permission denied or no device)"
            )

        video = constraints.get('video') or {}
        if video.get('width') is not None:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, video['width'])
        if video.get('height') is not None:
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, video['height'])
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        frame = self._wait_for_first_frame()
        self.video_height, self.video_width = frame.shape[:2]
        self.fps = float(self.cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self._pending_frame = frame

        logger.info(
            f"✓ Camera {self.config.camera_index} opened: "
            f"{self.video_width}x{self.video_height} @ {self.fps:.0f} fps"
        )
        return self

    def _wait_for_first_frame(self) -> np.ndarray:
        deadline = time.monotonic() + self.config.first_frame_timeout_s
        while True:
            ret, frame = self.cap.read()
            if ret and frame is not None and frame.size > 0:
                return frame
            if time.monotonic() >= deadline:
                self.release()
                raise CameraUnavailable(
                    f"Camera {self.config.camera_index} delivered no frames within "
                    f"{self.config.first_frame_timeout_s:.1f}s"
                )
            time.sleep(0.05)

    def read(self) -> np.ndarray:
        """Return the current frame"""
        if self._pending_frame is not None:
            frame, self._pending_frame = self._pending_frame, None
            self.frames_read += 1
            return frame

        if self.cap is None:
            raise CameraUnavailable("Camera is not open")

        ret, frame = self.cap.read()
        if not ret or frame is None:
            raise CameraUnavailable(f"Camera {self.config.camera_index} stopped delivering frames")
        self.frames_read += 1
        return frame

    def release(self):
        """Release the device"""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Camera {self.config.camera_index} released")
