"""
Describes how a disparity image maps to 3D.

Owned by whatever computed the disparity image, read by the cloud step.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class DisparityParameters:
    """
    Rectified stereo geometry of a disparity image.

    Attributes:
        disparity_min: Offset added to every stored disparity value
        disparity_range: Number of possible disparity values. Stored values
            must be in [0, disparity_range)
        baseline: Distance between the two (possibly virtual) cameras
        K: Intrinsics of the rectified left camera
        rotate_to_rectified: Rotation from the left view frame into the
            rectified frame
    """
    disparity_min: float = 0.0
    disparity_range: float = 0.0
    baseline: float = 0.0
    K: np.ndarray = field(default_factory=lambda: np.eye(3))
    rotate_to_rectified: np.ndarray = field(default_factory=lambda: np.eye(3))

    @property
    def focal(self) -> float:
        return float(self.K[0, 0])

    def is_valid(self, disparity: np.ndarray) -> np.ndarray:
        """True where a stored disparity value can be converted to depth"""
        disparity = np.asarray(disparity)
        with np.errstate(invalid='ignore'):
            return np.isfinite(disparity) & (disparity >= 0) & (disparity < self.disparity_range) & \
                (disparity + self.disparity_min > 0)

    def disparity_to_depth(self, disparity: np.ndarray) -> np.ndarray:
        """Depth along the rectified optical axis, NaN where invalid"""
        disparity = np.asarray(disparity, dtype=np.float64)
        depth = np.full(disparity.shape, np.nan)
        valid = self.is_valid(disparity)
        depth[valid] = self.baseline * self.focal / (disparity[valid] + self.disparity_min)
        return depth

    def depth_to_disparity(self, depth: np.ndarray) -> np.ndarray:
        """Stored disparity value of a rectified depth, NaN for non-positive depth"""
        depth = np.asarray(depth, dtype=np.float64)
        disparity = np.full(depth.shape, np.nan)
        with np.errstate(invalid='ignore'):
            positive = np.isfinite(depth) & (depth > 0)
        disparity[positive] = self.baseline * self.focal / depth[positive] - self.disparity_min
        return disparity
