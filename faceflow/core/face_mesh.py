# core/face_mesh.py
"""
Face landmark inference using the MediaPipe Face Landmarker
"""
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import List

import cv2
import numpy as np
import mediapipe as mp
import requests
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision
from loguru import logger

from faceflow.config.settings import ModelConfig
from faceflow.core.errors import ModelLoadError, InferenceFailure


class Backend(str, Enum):
    """Compute target for inference"""
    GPU = "gpu"
    CPU = "cpu"

    def delegate(self):
        if self is Backend.GPU:
            return mp_tasks.BaseOptions.Delegate.GPU
        return mp_tasks.BaseOptions.Delegate.CPU


@dataclass
class Prediction:
    """One detected face for one frame"""
    scaled_mesh: np.ndarray  # (N, 3) landmarks in video pixel space


def ensure_model_asset(path: str, url: str, timeout: float = 30.0) -> str:
    """Download the model bundle unless it already exists locally"""
    if os.path.isfile(path):
        return path

    logger.info(f"Downloading face landmark model from {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ModelLoadError(f"Failed to download model from {url}: {e}") from e

    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(response.content)
    except OSError as e:
        raise ModelLoadError(f"Failed to store model at {path}: {e}") from e

    logger.info(f"✓ Model saved to {path} ({len(response.content) / 1024:.0f} KiB)")
    return path


def landmarks_to_mesh(landmarks, width: int, height: int) -> np.ndarray:
    """Scale normalized landmarks to pixel coordinates (z follows x scale)"""
    mesh = np.array([[lm.x, lm.y, lm.z] for lm in landmarks], dtype=np.float32).reshape(-1, 3)
    mesh[:, 0] *= width
    mesh[:, 1] *= height
    mesh[:, 2] *= width
    return mesh


class FaceMeshDetector:
    """Face mesh estimation over a live video stream"""

    def __init__(self, config: ModelConfig, model_path: str):
        self.config = config
        self.model_path = model_path
        self.backend = Backend(config.backend)
        self.landmarker = None
        self._last_timestamp_ms = -1

    def load(self) -> "FaceMeshDetector":
        """Fetch the model bundle and create the landmarker"""
        path = ensure_model_asset(self.model_path, self.config.model_url, self.config.download_timeout_s)

        try:
            options = vision.FaceLandmarkerOptions(
                base_options=mp_tasks.BaseOptions(
                    model_asset_path=path,
                    delegate=self.backend.delegate()
                ),
                running_mode=vision.RunningMode.VIDEO,
                num_faces=self.config.max_faces,
                min_face_detection_confidence=self.config.min_detection_confidence,
                min_face_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence
            )
            self.landmarker = vision.FaceLandmarker.create_from_options(options)
        except Exception as e:
            raise ModelLoadError(f"Failed to load face landmarker from {path}: {e}") from e

        logger.info(f"✓ Face landmarker loaded (backend={self.backend.value}, max_faces={self.config.max_faces})")
        return self

    def _next_timestamp_ms(self) -> int:
        # VIDEO mode requires strictly increasing timestamps
        timestamp = max(int(time.monotonic() * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp
        return timestamp

    def estimate_faces(self, frame: np.ndarray) -> List[Prediction]:
        """Run the model on one BGR frame"""
        if self.landmarker is None:
            raise InferenceFailure("Model is not loaded")

        try:
            height, width = frame.shape[:2]
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
            result = self.landmarker.detect_for_video(image, self._next_timestamp_ms())
        except Exception as e:
            raise InferenceFailure(f"Face landmark inference failed: {e}") from e

        return [
            Prediction(scaled_mesh=landmarks_to_mesh(face, width, height))
            for face in (result.face_landmarks or [])
        ]

    def close(self):
        if self.landmarker is not None:
            self.landmarker.close()
            self.landmarker = None
