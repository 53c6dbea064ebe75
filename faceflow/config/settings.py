# config/settings.py
"""
Core configuration settings for the face mesh demo
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple
import json
import os

BACKENDS = ("gpu", "cpu")

# Landmarker bundle published with the MediaPipe model zoo
DEFAULT_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/1/face_landmarker.task"
)

@dataclass
class CameraConfig:
    """Webcam capture parameters"""
    camera_index: int = 0
    video_size: int = 500  # Fixed width/height requested on non-mobile runtimes
    facing_mode: str = "user"
    mirror: bool = True  # Selfie view
    first_frame_timeout_s: float = 5.0

@dataclass
class ModelConfig:
    """Face landmark model configuration"""
    backend: str = "gpu"  # "gpu" or "cpu"
    max_faces: int = 1
    model_path: Optional[str] = None  # Defaults to <models_dir>/face_landmarker.task
    model_url: str = DEFAULT_MODEL_URL
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    download_timeout_s: float = 30.0

@dataclass
class RenderConfig:
    """Overlay rendering settings"""
    triangulate_mesh: bool = True
    render_pointcloud: bool = True  # Ignored on mobile
    color_hex: str = "#32EEDB"
    line_width: float = 0.5
    point_radius: int = 1
    show_stats: bool = True
    window_name: str = "Faceflow"

    @property
    def color_bgr(self) -> Tuple[int, int, int]:
        """Stroke/fill colour in OpenCV channel order"""
        value = self.color_hex.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Invalid colour: {self.color_hex}")
        r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
        return (b, g, r)

@dataclass
class PerformanceConfig:
    """Telemetry settings"""
    heartbeat_interval_s: float = 30.0
    fps_window: int = 30

@dataclass
class SystemConfig:
    """Main system configuration"""
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    user_agent: Optional[str] = None  # Overrides runtime detection
    triangulation_path: Optional[str] = None

    # System paths
    models_dir: str = "models"
    logs_dir: str = "logs"
    log_level: str = "INFO"

    @property
    def resolved_model_path(self) -> str:
        return self.model.model_path or os.path.join(self.models_dir, "face_landmarker.task")

    def validate(self):
        """Reject settings the session cannot run with"""
        if self.model.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.model.backend}', expected one of {BACKENDS}")
        if self.model.max_faces < 1:
            raise ValueError(f"max_faces must be a positive integer, got {self.model.max_faces}")
        if self.camera.video_size < 1:
            raise ValueError(f"video_size must be positive, got {self.camera.video_size}")
        # Raises on malformed colour
        self.render.color_bgr

    def save_to_file(self, filepath: str):
        """Save configuration to JSON file"""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=4)

    @classmethod
    def from_dict(cls, data: dict) -> 'SystemConfig':
        data = dict(data)
        sections = {
            'camera': CameraConfig,
            'model': ModelConfig,
            'render': RenderConfig,
            'performance': PerformanceConfig,
        }
        for name, section_cls in sections.items():
            if name in data:
                data[name] = section_cls(**data[name])
        return cls(**data)

    @classmethod
    def load_from_file(cls, filepath: str) -> 'SystemConfig':
        """Load configuration from JSON file"""
        if os.path.exists(filepath):
            with open(filepath, 'r') as f:
                return cls.from_dict(json.load(f))
        return cls()
