# utils/performance.py
import time
import psutil
import numpy as np
from collections import deque


class PerformanceMonitor:
    """Rolling frame rate, inference latency and host load"""

    def __init__(self, window_size: int = 30):
        self.window_size = window_size
        self.frame_times = deque(maxlen=window_size)
        self.inference_times = deque(maxlen=window_size)
        self.cpu_history = deque(maxlen=window_size)
        self.memory_history = deque(maxlen=window_size)
        self.last_frame_time = None
        self.frame_count = 0
        self.last_faces = 0
        self.start_time = time.time()

    def update_fps(self):
        """Mark the end of one rendered frame"""
        current_time = time.perf_counter()
        if self.last_frame_time is not None:
            self.frame_times.append(current_time - self.last_frame_time)
        self.last_frame_time = current_time
        self.frame_count += 1

    def log_inference_time(self, seconds: float, faces: int = 0):
        self.inference_times.append(seconds)
        self.last_faces = faces

    def update_system_stats(self):
        """Update CPU and memory usage"""
        self.cpu_history.append(psutil.cpu_percent())
        self.memory_history.append(psutil.virtual_memory().percent)

    def get_average_fps(self) -> float:
        if not self.frame_times:
            return 0.0
        avg = float(np.mean(self.frame_times))
        return 1.0 / avg if avg > 0 else 0.0

    def get_current_stats(self) -> dict:
        """Get current performance statistics"""
        return {
            'fps': self.get_average_fps(),
            'inference_ms': float(np.mean(self.inference_times)) * 1000 if self.inference_times else 0.0,
            'faces': self.last_faces,
            'cpu_percent': float(np.mean(self.cpu_history)) if self.cpu_history else 0.0,
            'memory_percent': float(np.mean(self.memory_history)) if self.memory_history else 0.0,
            'frame_count': self.frame_count,
            'uptime': time.time() - self.start_time
        }


class FrameDropCounter:
    """Estimate camera frames lost while inference blocks the loop"""

    def __init__(self, camera_fps: float = 0.0):
        self.camera_fps = camera_fps
        self.dropped_frames = 0
        self.processed_frames = 0

    def record(self, blocked_seconds: float) -> int:
        """Account one processed frame, returns frames dropped during it"""
        self.processed_frames += 1
        if self.camera_fps <= 0:
            return 0
        # One frame period is the one we consumed
        dropped = max(0, int(blocked_seconds * self.camera_fps) - 1)
        self.dropped_frames += dropped
        return dropped

    @property
    def drop_rate(self) -> float:
        total = self.processed_frames + self.dropped_frames
        return self.dropped_frames / total if total else 0.0

    def get_stats(self) -> dict:
        return {
            'processed_frames': self.processed_frames,
            'dropped_frames': self.dropped_frames,
            'drop_rate': self.drop_rate
        }
