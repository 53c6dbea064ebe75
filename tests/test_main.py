import json

import faceflow.main as main_mod
from faceflow.core.errors import CameraUnavailable
from faceflow.core.session import SessionState

def test_save_config(tmp_path):
    path = tmp_path / "faceflow.json"
    code = main_mod.main(["--backend", "cpu", "--max-faces", "2", "--no-pointcloud",
                          "--save-config", str(path)])
    assert code == 0
    data = json.loads(path.read_text())
    assert data["model"]["backend"] == "cpu"
    assert data["model"]["max_faces"] == 2
    assert data["render"]["render_pointcloud"] is False

def test_invalid_max_faces():
    assert main_mod.main(["--max-faces", "0"]) == 2

def test_camera_failure_exit_code(tmp_path, monkeypatch):
    created = []

    class FailingSession:
        def __init__(self, config):
            self.config = config
            self.state = SessionState.UNINITIALIZED
            self.closed = False
            created.append(self)
        def initialize(self):
            raise CameraUnavailable("denied")
        def run(self):
            raise AssertionError("loop must not start")
        def stop(self):
            pass
        def close(self):
            self.closed = True

    monkeypatch.setattr(main_mod, 'FaceflowSession', FailingSession)
    monkeypatch.setattr(main_mod, 'setup_signal_handlers', lambda session: None)
    code = main_mod.main(["--log-dir", str(tmp_path / "logs"), "--user-agent", "desktop"])
    assert code == 1
    assert created[0].closed
    assert (tmp_path / "logs" / "faceflow.log").exists()

def test_bad_triangulation_file_exit_code(tmp_path, monkeypatch):
    created = []

    class BadTableSession:
        def __init__(self, config):
            self.config = config
            self.state = SessionState.UNINITIALIZED
            self.closed = False
            created.append(self)
        def initialize(self):
            open(self.config.triangulation_path)
        def run(self):
            raise AssertionError("loop must not start")
        def stop(self):
            pass
        def close(self):
            self.closed = True

    monkeypatch.setattr(main_mod, 'FaceflowSession', BadTableSession)
    monkeypatch.setattr(main_mod, 'setup_signal_handlers', lambda session: None)
    code = main_mod.main(["--log-dir", str(tmp_path / "logs"),
                          "--triangulation", str(tmp_path / "missing.json")])
    assert code == 1
    assert created[0].closed

def test_mesh_mismatch_exit_code(tmp_path, monkeypatch):
    class MismatchSession:
        def __init__(self, config):
            self.state = SessionState.RUNNING
        def initialize(self):
            pass
        def run(self):
            raise ValueError("Triangulation references landmark 477 but the prediction has 10 points")
        def stop(self):
            pass
        def close(self):
            pass

    monkeypatch.setattr(main_mod, 'FaceflowSession', MismatchSession)
    monkeypatch.setattr(main_mod, 'setup_signal_handlers', lambda session: None)
    assert main_mod.main(["--log-dir", str(tmp_path / "logs")]) == 1
