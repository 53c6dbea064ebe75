# visualization/hud_overlay.py
import cv2
import numpy as np
from typing import Dict, Tuple


class StatsOverlay:
    """Corner panel with frame rate and inference time"""

    def __init__(self, text_color: Tuple[int, int, int] = (255, 255, 255),
                 background: Tuple[int, int, int] = (0, 0, 0), alpha: float = 0.6):
        self.text_color = text_color
        self.background = background
        self.alpha = alpha

    def render(self, frame: np.ndarray, stats: Dict) -> np.ndarray:
        """
        Draw the stats panel in place

        Args:
            frame: Canvas to draw on
            stats: Performance stats with 'fps', 'inference_ms' and 'faces'

        Returns:
            The same canvas
        """
        lines = [
            f"FPS: {stats.get('fps', 0.0):.1f}",
            f"Inference: {stats.get('inference_ms', 0.0):.1f} ms",
            f"Faces: {stats.get('faces', 0)}"
        ]

        panel_w = 170
        panel_h = len(lines) * 20 + 10
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (panel_w, panel_h), self.background, -1)
        cv2.addWeighted(overlay, self.alpha, frame, 1 - self.alpha, 0, frame)

        for i, line in enumerate(lines):
            cv2.putText(frame, line, (8, 20 + i * 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5,
                        self.text_color, 1, cv2.LINE_AA)
        return frame
