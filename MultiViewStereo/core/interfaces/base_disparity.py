"""
Base interfaces for stereo disparity and fused multi-view disparity.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from MultiViewStereo.core.structures.disparity import DisparityParameters

# (left_index, right_index, rect_left, rect_right, disparity, mask, parameters)
PairDisparityCallback = Callable[
    [int, int, np.ndarray, np.ndarray, np.ndarray, np.ndarray, DisparityParameters], None]


class IStereoDisparity(ABC):
    """Dense disparity between two rectified images, left image as reference"""

    @property
    @abstractmethod
    def disparity_min(self) -> int:
        pass

    @property
    @abstractmethod
    def disparity_range(self) -> int:
        pass

    @abstractmethod
    def process(self, rect_left: np.ndarray, rect_right: np.ndarray) -> np.ndarray:
        """
        Compute the disparity image.

        Args:
            rect_left: Rectified left image
            rect_right: Rectified right image, partner located to the right

        Returns:
            float32 disparity in [0, disparity_range) relative to
            disparity_min; NaN marks invalid pixels
        """
        pass


class IFusedDisparityEngine(ABC):
    """
    Computes a single disparity image for a center view from several stereo
    pairs which all share that center.

    A concrete IStereoDisparity must be assigned to ``stereo_disparity``
    before use.
    """

    stereo_disparity: Optional[IStereoDisparity] = None
    listener: Optional[PairDisparityCallback] = None

    @abstractmethod
    def initialize(self, scene, images: Dict[int, np.ndarray]) -> None:
        """
        Provide the scene and the images of the current cluster.

        Args:
            scene: SceneStructure
            images: Scene view index -> image
        """
        pass

    @abstractmethod
    def process(self, center_index: int, pair_indexes: Sequence[int]) -> bool:
        """
        Compute the fused disparity.

        Args:
            center_index: Scene view index of the center
            pair_indexes: Scene view indexes of the partners

        Returns:
            True on success, False if nothing could be computed
        """
        pass

    @property
    @abstractmethod
    def fused_disparity(self) -> np.ndarray:
        """Fused disparity in the center's original pixel grid, NaN = invalid"""
        pass

    @property
    @abstractmethod
    def fused_mask(self) -> np.ndarray:
        """Boolean mask, True where fused_disparity is valid"""
        pass

    @property
    @abstractmethod
    def fused_param(self) -> DisparityParameters:
        pass
