"""
Stereo rectification from known intrinsic and extrinsic parameters.

View 1 is always the "center" view. Rectification is computed with OpenCV's
calibrated rectification so the two rectified images share rows (or columns
when the baseline is mostly vertical).
"""

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from MultiViewStereo.core.exceptions import ComputationError

# Pairs with a shorter baseline than this can't be rectified
MIN_BASELINE = 1e-9


@dataclass
class RectifiedPair:
    """
    Rectification of a stereo pair.

    Attributes:
        K1, D1, K2, D2: Original intrinsics and distortion of both views
        R1, R2: Rotations from each view into its rectified frame
        P1, P2: 3x4 projection matrices of the rectified views
        size: (width, height) of the rectified images
        baseline: Length of the baseline in world units
        vertical: True if the epipolar lines are columns instead of rows
        partner_first: True if view 2 lies to the left (or above) of view 1
    """
    K1: np.ndarray
    D1: np.ndarray
    K2: np.ndarray
    D2: np.ndarray
    R1: np.ndarray
    R2: np.ndarray
    P1: np.ndarray
    P2: np.ndarray
    size: Tuple[int, int]
    baseline: float
    vertical: bool
    partner_first: bool

    @property
    def rectified_K(self) -> np.ndarray:
        return self.P1[:3, :3].copy()


class StereoRectifier:
    """
    Computes rectification between a fixed view 1 and any number of view 2s.

    Usage:
        rectifier = StereoRectifier()
        rectifier.set_view1(camera, width, height)
        pair = rectifier.process_view2(camera2, width2, height2, view1_to_view2)
    """

    def __init__(self):
        self.camera1 = None
        self.size1: Tuple[int, int] = (0, 0)

    def set_view1(self, camera, width: int, height: int):
        """Specify the center view"""
        self.camera1 = camera
        self.size1 = (int(width), int(height))

    def process_view2(self, camera2, width2: int, height2: int,
                      view1_to_view2: np.ndarray) -> RectifiedPair:
        """
        Rectify view 1 against view 2.

        Args:
            camera2: CameraModel of view 2
            width2: View 2 image width
            height2: View 2 image height
            view1_to_view2: 4x4 transform from view 1 into view 2

        Returns:
            RectifiedPair

        Raises:
            ComputationError: If the baseline is degenerate
        """
        if self.camera1 is None:
            raise ComputationError("set_view1() must be called before process_view2()")

        R = np.ascontiguousarray(view1_to_view2[:3, :3], dtype=np.float64)
        T = np.ascontiguousarray(view1_to_view2[:3, 3], dtype=np.float64).reshape(3, 1)
        if np.linalg.norm(T) < MIN_BASELINE:
            raise ComputationError("Can't rectify a stereo pair with no baseline")

        R1, R2, P1, P2, _, _, _ = cv2.stereoRectify(
            self.camera1.K, self.camera1.dist,
            camera2.K, camera2.dist,
            self.size1,
            R, T,
            flags=cv2.CALIB_ZERO_DISPARITY,
            alpha=0
        )
        if not (np.all(np.isfinite(P1)) and np.all(np.isfinite(P2))):
            raise ComputationError("Rectification produced invalid projection matrices")

        vertical = abs(P2[1, 3]) > abs(P2[0, 3])
        shift = P2[1, 3] if vertical else P2[0, 3]
        focal = P2[1, 1] if vertical else P2[0, 0]

        return RectifiedPair(
            K1=self.camera1.K, D1=self.camera1.dist,
            K2=camera2.K, D2=camera2.dist,
            R1=R1, R2=R2, P1=P1, P2=P2,
            size=self.size1,
            baseline=float(abs(shift) / focal),
            vertical=bool(vertical),
            partner_first=bool(shift > 0)
        )


def pixels_to_rectified1(pair: RectifiedPair, pixels: np.ndarray) -> np.ndarray:
    """Map (N, 2) original pixels of view 1 into rectified view 1 pixels"""
    pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 1, 2)
    return cv2.undistortPoints(pixels, pair.K1, pair.D1, R=pair.R1, P=pair.P1).reshape(-1, 2)


def pixels_to_rectified2(pair: RectifiedPair, pixels: np.ndarray) -> np.ndarray:
    """Map (N, 2) original pixels of view 2 into rectified view 2 pixels"""
    pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 1, 2)
    return cv2.undistortPoints(pixels, pair.K2, pair.D2, R=pair.R2, P=pair.P2).reshape(-1, 2)


def rectify_images(pair: RectifiedPair, image1: np.ndarray,
                   image2: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rectify a stereo image pair

    Args:
        pair: Rectification computed by StereoRectifier
        image1: Image of view 1
        image2: Image of view 2

    Returns:
        img1_rect: Rectified first image
        img2_rect: Rectified second image
    """
    map1x, map1y = cv2.initUndistortRectifyMap(
        pair.K1, pair.D1, pair.R1, pair.P1, pair.size, cv2.CV_32FC1
    )
    map2x, map2y = cv2.initUndistortRectifyMap(
        pair.K2, pair.D2, pair.R2, pair.P2, pair.size, cv2.CV_32FC1
    )

    img1_rect = cv2.remap(image1, map1x, map1y, cv2.INTER_LINEAR)
    img2_rect = cv2.remap(image2, map2x, map2y, cv2.INTER_LINEAR)

    return img1_rect, img2_rect
