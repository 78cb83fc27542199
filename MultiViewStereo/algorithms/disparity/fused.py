"""
Fused Multi-View Disparity

Given one "center" view and several other views which each form a stereo pair
with it, compute a single disparity image for the center. Every pair is
rectified and matched on its own, converted to depth in the center's frame
and projected back into the center's original pixel grid. The per-pixel
median over all pairs is then expressed as a disparity of a virtual stereo
pair with the center's intrinsics.
"""

import warnings
from typing import Dict, List, Optional, Sequence

import numpy as np

from MultiViewStereo.algorithms.geometry.rectification import (
    RectifiedPair,
    StereoRectifier,
    rectify_images
)
from MultiViewStereo.algorithms.geometry.se3 import relative_pose
from MultiViewStereo.config import FusedDisparityConfig
from MultiViewStereo.core.exceptions import ComputationError, ConfigurationError
from MultiViewStereo.core.interfaces import (
    IFusedDisparityEngine,
    IStereoDisparity,
    PairDisparityCallback
)
from MultiViewStereo.core.structures import DisparityParameters, SceneStructure
from MultiViewStereo.logger import get_logger

logger = get_logger("disparity.fused")


class MultiViewToFusedDisparity(IFusedDisparityEngine):
    """Computes a fused disparity image for a center view from several stereo pairs"""

    def __init__(self, config: Optional[FusedDisparityConfig] = None,
                 stereo_disparity: Optional[IStereoDisparity] = None):
        self.config = config or FusedDisparityConfig()
        self.stereo_disparity: Optional[IStereoDisparity] = stereo_disparity
        self.listener: Optional[PairDisparityCallback] = None

        self.rectifier = StereoRectifier()
        self.scene: Optional[SceneStructure] = None
        self.images: Dict[int, np.ndarray] = {}

        self._fused_disparity = np.zeros((0, 0), dtype=np.float32)
        self._fused_mask = np.zeros((0, 0), dtype=bool)
        self._fused_param = DisparityParameters()

    def initialize(self, scene: SceneStructure, images: Dict[int, np.ndarray]) -> None:
        self.scene = scene
        self.images = images

    def process(self, center_index: int, pair_indexes: Sequence[int]) -> bool:
        """
        Compute the fused disparity of the center view.

        Args:
            center_index: Scene view index of the center
            pair_indexes: Scene view indexes of the partners

        Returns:
            True if at least one pixel has a fused disparity
        """
        if self.stereo_disparity is None:
            raise ConfigurationError("A stereo disparity algorithm must be set first")
        if self.scene is None:
            raise ComputationError("initialize() must be called before process()")

        center_image = self.images[center_index]
        height, width = center_image.shape[:2]
        camera = self.scene.camera_of(center_index)
        world_to_center = self.scene.world_to_view(center_index)
        self.rectifier.set_view1(camera, width, height)

        depth_layers: List[np.ndarray] = []
        baselines: List[float] = []

        for pair_index in pair_indexes:
            image2 = self.images[pair_index]
            camera2 = self.scene.camera_of(pair_index)
            view1_to_view2 = relative_pose(world_to_center, self.scene.world_to_view(pair_index))

            try:
                rectified = self.rectifier.process_view2(
                    camera2, image2.shape[1], image2.shape[0], view1_to_view2)
            except ComputationError as e:
                logger.warning(f"Pair {center_index}-{pair_index} can't be rectified: {e}")
                continue

            depth = self._pair_depth(center_index, pair_index, rectified, center_image, image2)
            if not np.any(np.isfinite(depth)):
                logger.debug(f"Pair {center_index}-{pair_index} produced no valid depth")
                continue

            depth_layers.append(depth)
            baselines.append(rectified.baseline)

        if not depth_layers:
            return False

        fused_depth = self._fuse_depths(np.stack(depth_layers))
        valid = np.isfinite(fused_depth)
        if not np.any(valid):
            return False

        # Virtual stereo pair with the center's intrinsics and the average baseline
        baseline = float(np.mean(baselines))
        param = DisparityParameters(
            disparity_min=0.0,
            baseline=baseline,
            K=camera.K.copy(),
            rotate_to_rectified=np.eye(3)
        )
        disparity = np.full(fused_depth.shape, np.nan, dtype=np.float32)
        disparity[valid] = baseline * param.focal / fused_depth[valid]
        param.disparity_range = float(np.floor(np.nanmax(disparity)) + 1.0)

        self._fused_disparity = disparity
        self._fused_mask = valid
        self._fused_param = param

        logger.debug(
            f"Fused {len(depth_layers)}/{len(pair_indexes)} pairs for view {center_index}: "
            f"{int(valid.sum())} valid pixels"
        )
        return True

    def _pair_depth(self, center_index: int, pair_index: int, rectified: RectifiedPair,
                    center_image: np.ndarray, image2: np.ndarray) -> np.ndarray:
        """Depth of a single pair in the center's frame, on the center's pixel grid"""
        rect1, rect2 = rectify_images(rectified, center_image, image2)

        disparity = _from_canonical(
            self.stereo_disparity.process(_to_canonical(rect1, rectified),
                                          _to_canonical(rect2, rectified)),
            rectified
        )
        mask = np.isfinite(disparity)

        param = DisparityParameters(
            disparity_min=float(self.stereo_disparity.disparity_min),
            disparity_range=float(self.stereo_disparity.disparity_range),
            baseline=rectified.baseline,
            K=rectified.rectified_K,
            rotate_to_rectified=rectified.R1.copy()
        )

        if self.listener is not None:
            self.listener(center_index, pair_index, rect1, rect2, disparity, mask, param)

        height, width = center_image.shape[:2]
        layer = np.full((height, width), np.inf)

        rect_depth = param.disparity_to_depth(disparity)
        ys, xs = np.nonzero(np.isfinite(rect_depth))
        if len(xs) == 0:
            return np.full((height, width), np.nan)

        # Back project into the rectified frame, then rotate into the center's frame
        K = param.K
        z = rect_depth[ys, xs]
        points_rect = np.stack([
            (xs - K[0, 2]) * z / K[0, 0],
            (ys - K[1, 2]) * z / K[1, 1],
            z
        ], axis=1)
        points_view = points_rect @ rectified.R1

        in_front = points_view[:, 2] > 0
        points_view = points_view[in_front]

        camera = self.scene.camera_of(center_index)
        pixels = camera.norm_to_pixel(points_view[:, :2] / points_view[:, 2:3])
        u = np.round(pixels[:, 0]).astype(np.int64)
        v = np.round(pixels[:, 1]).astype(np.int64)
        inside = (u >= 0) & (u < width) & (v >= 0) & (v < height)

        # Keep the closest point when several land on the same pixel
        np.minimum.at(layer, (v[inside], u[inside]), points_view[inside, 2])
        layer[np.isinf(layer)] = np.nan
        return layer

    def _fuse_depths(self, layers: np.ndarray) -> np.ndarray:
        """Per-pixel median over all pairs after rejecting inconsistent samples"""
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', category=RuntimeWarning)
            median = np.nanmedian(layers, axis=0)

            with np.errstate(invalid='ignore'):
                agree = np.abs(layers - median) <= self.config.max_relative_disagreement * median

            support = agree.sum(axis=0)
            fused = np.nanmedian(np.where(agree, layers, np.nan), axis=0)

        fused[support < self.config.min_pair_support] = np.nan
        return fused

    @property
    def fused_disparity(self) -> np.ndarray:
        return self._fused_disparity

    @property
    def fused_mask(self) -> np.ndarray:
        return self._fused_mask

    @property
    def fused_param(self) -> DisparityParameters:
        return self._fused_param


def _to_canonical(image: np.ndarray, pair: RectifiedPair) -> np.ndarray:
    """Orient a rectified image so the partner view lies to the right"""
    if pair.vertical:
        image = np.swapaxes(image, 0, 1)
    if pair.partner_first:
        image = image[:, ::-1]
    return np.ascontiguousarray(image)


def _from_canonical(disparity: np.ndarray, pair: RectifiedPair) -> np.ndarray:
    """Undo _to_canonical() on a disparity image"""
    if pair.partner_first:
        disparity = disparity[:, ::-1]
    if pair.vertical:
        disparity = np.swapaxes(disparity, 0, 1)
    return np.ascontiguousarray(disparity)
