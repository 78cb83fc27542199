"""
Stereo Matching

Dense disparity between two rectified images with OpenCV's semi-global block
matching.
"""

from typing import Optional

import cv2
import numpy as np

from MultiViewStereo.config import FusedDisparityConfig
from MultiViewStereo.core.interfaces import IStereoDisparity


class SGBMStereoDisparity(IStereoDisparity):
    """Semi-global block matching, left image is the reference"""

    def __init__(self, config: Optional[FusedDisparityConfig] = None):
        """
        Args:
            config: Matching parameters. If None, uses defaults.
        """
        self.config = config or FusedDisparityConfig()

        # SGBM needs the number of disparities to be divisible by 16
        self._range = int(np.ceil(self.config.disparity_range / 16.0) * 16)

        block = self.config.block_size
        self.matcher = cv2.StereoSGBM_create(
            minDisparity=int(self.config.disparity_min),
            numDisparities=self._range,
            blockSize=block,
            P1=8 * block ** 2,
            P2=32 * block ** 2,
            disp12MaxDiff=self.config.disp12_max_diff,
            uniquenessRatio=self.config.uniqueness_ratio,
            speckleWindowSize=self.config.speckle_window_size,
            speckleRange=self.config.speckle_range,
            preFilterCap=63
        )

    @property
    def disparity_min(self) -> int:
        return int(self.config.disparity_min)

    @property
    def disparity_range(self) -> int:
        return self._range

    def process(self, rect_left: np.ndarray, rect_right: np.ndarray) -> np.ndarray:
        """
        Compute disparity

        Args:
            rect_left: Rectified left image
            rect_right: Rectified right image

        Returns:
            float32 disparity relative to disparity_min, NaN where invalid
        """
        gray_left = _to_gray_u8(rect_left)
        gray_right = _to_gray_u8(rect_right)

        raw = self.matcher.compute(gray_left, gray_right).astype(np.float32) / 16.0

        # SGBM marks invalid pixels with minDisparity - 1
        disparity = raw - self.disparity_min
        disparity[(disparity < 0) | (disparity >= self._range)] = np.nan
        return disparity


def _to_gray_u8(image: np.ndarray) -> np.ndarray:
    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.dtype != np.uint8:
        image = cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return np.ascontiguousarray(image)
