# visualization/point_cloud.py
import numpy as np
import open3d as o3d
from loguru import logger
from typing import Sequence


def flatten_point_cloud(predictions: Sequence) -> np.ndarray:
    """Concatenate every prediction's landmarks, negating each coordinate"""
    meshes = [np.asarray(getattr(p, 'scaled_mesh', p), dtype=np.float64).reshape(-1, 3)
              for p in predictions]
    if not meshes:
        return np.empty((0, 3), dtype=np.float64)
    return -np.concatenate(meshes, axis=0)


class PointCloudVisualizer:
    """3D scatter view of face landmarks using Open3D"""

    def __init__(self, window_name: str = "Face Point Cloud", width: int = 600, height: int = 600,
                 color=(0.2, 0.93, 0.86)):
        self.window_name = window_name
        self.width = width
        self.height = height
        self.color = np.asarray(color, dtype=np.float64)
        self.vis = None
        self.pcd = None
        self.has_initialized = False

    def initialize(self) -> bool:
        """Open the viewer window"""
        try:
            self.vis = o3d.visualization.Visualizer()
            if not self.vis.create_window(window_name=self.window_name, width=self.width, height=self.height):
                logger.warning("Open3D could not create a window, point cloud disabled")
                self.vis = None
                return False
            self.pcd = o3d.geometry.PointCloud()
            return True
        except Exception as e:
            logger.warning(f"Failed to initialize 3D visualizer: {e}")
            self.vis = None
            return False

    def _set_points(self, points: np.ndarray):
        self.pcd.points = o3d.utility.Vector3dVector(points)
        self.pcd.colors = o3d.utility.Vector3dVector(np.tile(self.color, (len(points), 1)))

    def render(self, points: np.ndarray):
        """First dataset: add geometry and frame the view around it"""
        self._set_points(points)
        self.vis.add_geometry(self.pcd, reset_bounding_box=True)
        self.has_initialized = True

    def update_dataset(self, points: np.ndarray):
        """Replace the points of an already rendered dataset"""
        self._set_points(points)
        self.vis.update_geometry(self.pcd)

    def pump(self) -> bool:
        """Process window events and redraw, False once the window was closed"""
        if self.vis is None:
            return False
        alive = self.vis.poll_events()
        self.vis.update_renderer()
        return alive

    def close(self):
        if self.vis is not None:
            self.vis.destroy_window()
            self.vis = None
        self.has_initialized = False
