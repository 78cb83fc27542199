"""
Disparity images to a single point cloud.

Each new disparity image is compared against the points already in the cloud
before any of its pixels are added. Existing points are projected into the
new view; a pixel is redundant if an existing point lands on it with a
similar disparity. Points are only ever appended.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from scipy.spatial import cKDTree

from MultiViewStereo.algorithms.geometry.se3 import invert, transform_points
from MultiViewStereo.config import DisparityCloudConfig
from MultiViewStereo.core.interfaces import ICloudAccumulator, PointTransform
from MultiViewStereo.core.structures import DisparityParameters
from MultiViewStereo.logger import get_logger

logger = get_logger("cloud")


@dataclass
class ViewPointRange:
    """Points contributed by one disparity image are cloud[start:end]"""
    view_id: Optional[str]
    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start


class DisparityCloud(ICloudAccumulator):
    """Combines disparity images into one cloud while skipping redundant pixels"""

    def __init__(self, config: Optional[DisparityCloudConfig] = None):
        self.config = config or DisparityCloudConfig()
        self._blocks: List[np.ndarray] = []
        self._size = 0
        self._cache: Optional[np.ndarray] = None
        self.views: List[ViewPointRange] = []

    def reset(self) -> None:
        self._blocks = []
        self._size = 0
        self._cache = None
        self.views = []

    def __len__(self) -> int:
        return self._size

    @property
    def cloud(self) -> np.ndarray:
        if self._cache is None:
            self._cache = np.vstack(self._blocks) if self._blocks else np.zeros((0, 3))
        return self._cache

    def points_of(self, view_id: str) -> np.ndarray:
        """Points contributed by a single view"""
        cloud = self.cloud
        blocks = [cloud[r.start:r.end] for r in self.views if r.view_id == view_id]
        return np.vstack(blocks) if blocks else np.zeros((0, 3))

    def add_disparity(self,
                      disparity: np.ndarray,
                      mask: np.ndarray,
                      world_to_view: np.ndarray,
                      parameters: DisparityParameters,
                      pixel_to_norm: PointTransform,
                      norm_to_pixel: PointTransform,
                      view_id: Optional[str] = None) -> int:
        """
        Add the points of a disparity image which are not already in the cloud.

        Returns:
            Number of points added
        """
        disparity = np.asarray(disparity, dtype=np.float64)
        candidates = np.asarray(mask, dtype=bool) & parameters.is_valid(disparity)

        redundant = self._redundant_pixels(disparity, world_to_view, parameters, norm_to_pixel)
        keep = candidates & ~redundant

        ys, xs = np.nonzero(keep)
        points_world = self._pixels_to_world(xs, ys, disparity[ys, xs], world_to_view,
                                             parameters, pixel_to_norm)

        if self.config.min_point_distance > 0 and self._size > 0 and len(points_world) > 0:
            tree = cKDTree(self.cloud)
            distances, _ = tree.query(points_world, k=1)
            points_world = points_world[distances >= self.config.min_point_distance]

        start = self._size
        if len(points_world) > 0:
            self._blocks.append(points_world)
            self._size += len(points_world)
            self._cache = None
        self.views.append(ViewPointRange(view_id=view_id, start=start, end=self._size))

        logger.debug(
            f"View {view_id}: {int(candidates.sum())} valid pixels, {int((candidates & redundant).sum())} "
            f"redundant, {self._size - start} added"
        )
        return self._size - start

    def _redundant_pixels(self, disparity: np.ndarray, world_to_view: np.ndarray,
                          parameters: DisparityParameters,
                          norm_to_pixel: PointTransform) -> np.ndarray:
        """Pixels onto which an existing point projects with a similar disparity"""
        height, width = disparity.shape
        redundant = np.zeros((height, width), dtype=bool)
        if self._size == 0:
            return redundant

        points_view = transform_points(world_to_view, self.cloud)
        points_view = points_view[points_view[:, 2] > 0]
        if len(points_view) == 0:
            return redundant

        pixels = norm_to_pixel(points_view[:, :2] / points_view[:, 2:3])
        u = np.round(pixels[:, 0]).astype(np.int64)
        v = np.round(pixels[:, 1]).astype(np.int64)
        inside = (u >= 0) & (u < width) & (v >= 0) & (v < height)
        u, v, points_view = u[inside], v[inside], points_view[inside]

        rect_depth = (points_view @ parameters.rotate_to_rectified.T)[:, 2]
        projected = parameters.depth_to_disparity(rect_depth)
        observed = disparity[v, u]

        with np.errstate(invalid='ignore'):
            similar = np.abs(projected - observed) <= self.config.disparity_similar_tol
        redundant[v[similar], u[similar]] = True
        return redundant

    def _pixels_to_world(self, xs: np.ndarray, ys: np.ndarray, values: np.ndarray,
                         world_to_view: np.ndarray, parameters: DisparityParameters,
                         pixel_to_norm: PointTransform) -> np.ndarray:
        if len(xs) == 0:
            return np.zeros((0, 3))

        norm = pixel_to_norm(np.stack([xs, ys], axis=1).astype(np.float64))
        rays_view = np.hstack([norm, np.ones((len(norm), 1))])

        # Scale each ray so its depth along the rectified axis matches the disparity
        rect_z = rays_view @ parameters.rotate_to_rectified[2]
        depth = parameters.disparity_to_depth(values)
        with np.errstate(divide='ignore', invalid='ignore'):
            points_view = rays_view * (depth / rect_z)[:, None]

        ok = np.all(np.isfinite(points_view), axis=1) & (rect_z > 0)
        return transform_points(invert(world_to_view), points_view[ok])
