"""
Base interface for merging disparity images into one point cloud.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from MultiViewStereo.core.structures.disparity import DisparityParameters

PointTransform = Callable[[np.ndarray], np.ndarray]


class ICloudAccumulator(ABC):
    """
    Append-only global cloud.

    Points are only ever appended; whether a candidate point is redundant
    with one already present is decided by the implementation.
    """

    @abstractmethod
    def reset(self) -> None:
        pass

    @abstractmethod
    def add_disparity(self,
                      disparity: np.ndarray,
                      mask: np.ndarray,
                      world_to_view: np.ndarray,
                      parameters: DisparityParameters,
                      pixel_to_norm: PointTransform,
                      norm_to_pixel: PointTransform,
                      view_id: Optional[str] = None) -> int:
        """
        Convert every valid disparity pixel into a 3D point in the world frame
        and append those which are not redundant.

        Args:
            disparity: Disparity image, NaN = invalid
            mask: Boolean mask, True = valid pixel
            world_to_view: 4x4 transform from world into the disparity's view
            parameters: How disparity maps to depth
            pixel_to_norm: (N, 2) pixels -> (N, 2) normalized coordinates
            norm_to_pixel: (N, 2) normalized coordinates -> (N, 2) pixels
            view_id: Optional id recorded with the added points

        Returns:
            Number of points appended
        """
        pass

    @property
    @abstractmethod
    def cloud(self) -> np.ndarray:
        """(N, 3) points in insertion order"""
        pass
