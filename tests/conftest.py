import numpy as np
import pytest
from loguru import logger

import faceflow.core.session as session_mod
from faceflow.config.settings import SystemConfig
from faceflow.core.face_mesh import Prediction

DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"


class FakeCamera:
    def __init__(self, width=64, height=48, fps=30.0, fail=None):
        self.video_width = width
        self.video_height = height
        self.fps = fps
        self.fail = fail
        self.constraints = None
        self.reads = 0
        self.released = False

    def open(self, constraints):
        self.constraints = constraints
        if self.fail is not None:
            raise self.fail
        return self

    def read(self):
        self.reads += 1
        return np.zeros((self.video_height, self.video_width, 3), dtype=np.uint8)

    def release(self):
        self.released = True


class FakeDetector:
    def __init__(self, predictions=None, load_error=None, inference_error=None):
        self.predictions = predictions if predictions is not None else []
        self.load_error = load_error
        self.inference_error = inference_error
        self.loaded = False
        self.closed = False
        self.calls = 0

    def load(self):
        if self.load_error is not None:
            raise self.load_error
        self.loaded = True
        return self

    def estimate_faces(self, frame):
        self.calls += 1
        if self.inference_error is not None:
            raise self.inference_error
        return self.predictions

    def close(self):
        self.closed = True


class FakeVisualizer:
    def __init__(self, ok=True, window_open=True):
        self.ok = ok
        self.window_open = window_open
        self.calls = []
        self.pumps = 0
        self.has_initialized = False
        self.closed = False

    def initialize(self):
        return self.ok

    def render(self, points):
        self.calls.append(("render", points))
        self.has_initialized = True

    def update_dataset(self, points):
        self.calls.append(("update", points))

    def pump(self):
        self.pumps += 1
        return self.window_open

    def close(self):
        self.closed = True


def make_prediction(points):
    return Prediction(scaled_mesh=np.asarray(points, dtype=np.float32))


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added by init_logger so they do not outlive the test"""
    yield
    logger.remove()


@pytest.fixture
def desktop_config():
    cfg = SystemConfig(user_agent=DESKTOP_UA)
    cfg.render.show_stats = False
    cfg.camera.mirror = False
    return cfg


@pytest.fixture
def no_display(monkeypatch):
    """Replace the OpenCV window calls used by the render loop"""
    shown = []
    monkeypatch.setattr(session_mod.cv2, 'imshow', lambda name, img: shown.append(name))
    monkeypatch.setattr(session_mod.cv2, 'waitKey', lambda delay: -1)
    monkeypatch.setattr(session_mod.cv2, 'getWindowProperty', lambda name, prop: 1.0)
    monkeypatch.setattr(session_mod.cv2, 'destroyAllWindows', lambda: None)
    return shown
