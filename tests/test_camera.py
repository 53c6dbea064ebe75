import numpy as np
import pytest

import faceflow.core.camera_manager as camera_manager
from faceflow.config.settings import CameraConfig
from faceflow.core.camera_manager import WebcamStream, build_constraints
from faceflow.core.errors import CameraUnavailable


class DummyCap:
    def __init__(self, opened=True, frames=5, shape=(48, 64, 3)):
        self.opened = opened
        self.frames = frames
        self.shape = shape
        self.props = {}
        self.released = False
    def isOpened(self): return self.opened
    def set(self, prop, value):
        self.props[prop] = value
        return True
    def get(self, prop): return 30.0
    def read(self):
        if self.frames <= 0:
            return False, None
        self.frames -= 1
        return True, np.zeros(self.shape, dtype=np.uint8)
    def release(self): self.released = True


def test_constraints_desktop():
    assert build_constraints(False, 500) == {
        'audio': False,
        'video': {'facingMode': 'user', 'width': 500, 'height': 500}
    }

def test_constraints_mobile():
    assert build_constraints(True, 500) == {'audio': False, 'video': {'facingMode': 'user'}}

def test_open_denied(monkeypatch):
    cap = DummyCap(opened=False)
    monkeypatch.setattr(camera_manager.cv2, 'VideoCapture', lambda idx: cap)
    with pytest.raises(CameraUnavailable):
        WebcamStream(CameraConfig()).open(build_constraints(False))
    assert cap.released

def test_open_without_frames(monkeypatch):
    monkeypatch.setattr(camera_manager.cv2, 'VideoCapture', lambda idx: DummyCap(frames=0))
    stream = WebcamStream(CameraConfig(first_frame_timeout_s=0.0))
    with pytest.raises(CameraUnavailable):
        stream.open(build_constraints(False))
    assert stream.cap is None

def test_open_reads_dimensions_and_applies_size(monkeypatch):
    cap = DummyCap(frames=3, shape=(480, 640, 3))
    monkeypatch.setattr(camera_manager.cv2, 'VideoCapture', lambda idx: cap)
    stream = WebcamStream(CameraConfig()).open(build_constraints(False, 500))

    assert (stream.video_width, stream.video_height) == (640, 480)
    assert cap.props[camera_manager.cv2.CAP_PROP_FRAME_WIDTH] == 500
    assert stream.fps == 30.0
    # first frame is served from the one read while opening
    assert stream.read().shape == (480, 640, 3)
    assert cap.frames == 2

def test_mobile_keeps_native_size(monkeypatch):
    cap = DummyCap()
    monkeypatch.setattr(camera_manager.cv2, 'VideoCapture', lambda idx: cap)
    WebcamStream(CameraConfig()).open(build_constraints(True))
    assert camera_manager.cv2.CAP_PROP_FRAME_WIDTH not in cap.props

def test_read_after_stream_ends(monkeypatch):
    monkeypatch.setattr(camera_manager.cv2, 'VideoCapture', lambda idx: DummyCap(frames=1))
    stream = WebcamStream(CameraConfig()).open(build_constraints(False))
    stream.read()
    with pytest.raises(CameraUnavailable):
        stream.read()
    stream.release()
    assert stream.cap is None
