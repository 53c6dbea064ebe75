# visualization/drawing.py
"""
Canvas drawing primitives for the face mesh overlay
"""
from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2
import numpy as np

from faceflow.core.triangulation import as_triangles


@dataclass(frozen=True)
class DrawingStyle:
    """Stroke/fill settings, fixed once at startup"""
    color: Tuple[int, int, int] = (219, 238, 50)  # #32EEDB in BGR
    thickness: int = 1
    point_radius: int = 1
    line_type: int = cv2.LINE_AA

    @classmethod
    def from_render_config(cls, render_config) -> "DrawingStyle":
        return cls(
            color=render_config.color_bgr,
            thickness=max(1, int(round(render_config.line_width))),
            point_radius=max(1, int(render_config.point_radius))
        )


def draw_path(canvas: np.ndarray, points, close_path: bool, style: DrawingStyle):
    """Stroke a polyline through ordered 2D points"""
    pts = np.rint(np.asarray(points, dtype=np.float32)[:, :2]).astype(np.int32)
    cv2.polylines(canvas, [pts.reshape(-1, 1, 2)], close_path, style.color,
                  style.thickness, style.line_type)


def draw_mesh(canvas: np.ndarray, keypoints: np.ndarray, triangulation: Sequence[int],
              style: DrawingStyle) -> int:
    """Stroke one closed triangle per index triple, returns the triangle count"""
    triangles = as_triangles(triangulation)
    if len(triangles) == 0:
        return 0

    keypoints = np.asarray(keypoints)
    highest = int(triangles.max())
    if highest >= len(keypoints):
        raise ValueError(
            f"Triangulation references landmark {highest} but the prediction has {len(keypoints)} points"
        )

    for triangle in triangles:
        draw_path(canvas, keypoints[triangle], True, style)
    return len(triangles)


def draw_keypoints(canvas: np.ndarray, keypoints: np.ndarray, style: DrawingStyle) -> int:
    """Fill a small circle at every landmark, returns the point count"""
    count = 0
    for x, y in np.asarray(keypoints)[:, :2]:
        cv2.circle(canvas, (int(round(x)), int(round(y))), style.point_radius,
                   style.color, -1, style.line_type)
        count += 1
    return count
