"""
Known scene structure: camera intrinsics and view extrinsics.

Owned by the caller and only read by the pipeline.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import cv2
import numpy as np
from scipy.spatial.transform import Rotation

from MultiViewStereo.algorithms.geometry.se3 import concat, make_pose
from MultiViewStereo.core.exceptions import ValidationError


@dataclass
class CameraModel:
    """Pinhole camera with optional OpenCV distortion coefficients"""
    K: np.ndarray
    dist: Optional[np.ndarray] = None

    def __post_init__(self):
        self.K = np.asarray(self.K, dtype=np.float64).reshape(3, 3)
        if self.dist is None:
            self.dist = np.zeros(5)
        self.dist = np.asarray(self.dist, dtype=np.float64).ravel()

    @property
    def has_distortion(self) -> bool:
        return bool(np.any(self.dist != 0))

    def pixel_to_norm(self, pixels: np.ndarray) -> np.ndarray:
        """
        Convert distorted pixel coordinates into normalized image coordinates.

        Args:
            pixels: (N, 2) pixel coordinates

        Returns:
            (N, 2) normalized coordinates (x/z, y/z)
        """
        pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 1, 2)
        if len(pixels) == 0:
            return np.zeros((0, 2))
        return cv2.undistortPoints(pixels, self.K, self.dist).reshape(-1, 2)

    def norm_to_pixel(self, norm: np.ndarray) -> np.ndarray:
        """
        Convert normalized image coordinates into distorted pixel coordinates.

        Args:
            norm: (N, 2) normalized coordinates

        Returns:
            (N, 2) pixel coordinates
        """
        norm = np.asarray(norm, dtype=np.float64).reshape(-1, 2)
        if len(norm) == 0:
            return np.zeros((0, 2))
        if not self.has_distortion:
            return norm * [self.K[0, 0], self.K[1, 1]] + [self.K[0, 2], self.K[1, 2]] + \
                norm[:, 1:2] * [self.K[0, 1], 0.0]
        points = np.hstack([norm, np.ones((len(norm), 1))]).reshape(-1, 1, 3)
        pixels, _ = cv2.projectPoints(points, np.zeros(3), np.zeros(3), self.K, self.dist)
        return pixels.reshape(-1, 2)


@dataclass
class ViewMetric:
    """
    Extrinsics of a single view.

    If ``parent`` is set then ``world_to_view`` is relative to the parent view,
    i.e. it maps the parent's frame into this view.
    """
    camera: int
    world_to_view: np.ndarray = field(default_factory=lambda: np.eye(4))
    parent: Optional[int] = None

    def __post_init__(self):
        self.world_to_view = np.asarray(self.world_to_view, dtype=np.float64).reshape(4, 4)


class SceneStructure:
    """Cameras and views with known intrinsic and extrinsic parameters"""

    def __init__(self,
                 cameras: Optional[List[CameraModel]] = None,
                 views: Optional[List[ViewMetric]] = None):
        self.cameras: List[CameraModel] = list(cameras or [])
        self.views: List[ViewMetric] = list(views or [])

    def add_camera(self, K: np.ndarray, dist: Optional[np.ndarray] = None) -> int:
        self.cameras.append(CameraModel(K=K, dist=dist))
        return len(self.cameras) - 1

    def add_view(self, camera: int, world_to_view: np.ndarray,
                 parent: Optional[int] = None) -> int:
        """
        Add a view and return its index.

        Raises:
            ValidationError: If the camera or parent view does not exist
        """
        if not 0 <= camera < len(self.cameras):
            raise ValidationError(f"Unknown camera index {camera}")
        if parent is not None and not 0 <= parent < len(self.views):
            raise ValidationError(f"Parent view {parent} must be added before its children")
        self.views.append(ViewMetric(camera=camera, world_to_view=world_to_view, parent=parent))
        return len(self.views) - 1

    def camera_of(self, view_index: int) -> CameraModel:
        return self.cameras[self.views[view_index].camera]

    def world_to_view(self, view_index: int) -> np.ndarray:
        """
        Transform from the world frame into a view, following parent links.

        Returns:
            New 4x4 array; the scene itself is never modified
        """
        view = self.views[view_index]
        world_to_view = view.world_to_view.copy()
        visited = {view_index}
        while view.parent is not None:
            if view.parent in visited:
                raise ValidationError(f"Cycle in view hierarchy at view {view.parent}")
            visited.add(view.parent)
            view = self.views[view.parent]
            world_to_view = concat(view.world_to_view, world_to_view)
        return world_to_view


def pose_from_euler(euler_deg: Sequence[float], translation: Sequence[float]) -> np.ndarray:
    """
    Create a 4x4 world to view transform.

    Args:
        euler_deg: 'xyz' Euler angles in degrees
        translation: Translation (3,)

    Returns:
        4x4 transform
    """
    R = Rotation.from_euler('xyz', euler_deg, degrees=True).as_matrix()
    return make_pose(R, translation)
