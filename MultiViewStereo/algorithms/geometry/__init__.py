"""
Geometry helpers: rigid transforms and stereo rectification.
"""

from .se3 import make_pose, invert, concat, relative_pose, transform_points
from .rectification import (
    RectifiedPair,
    StereoRectifier,
    pixels_to_rectified1,
    pixels_to_rectified2,
    rectify_images
)

__all__ = [
    'make_pose',
    'invert',
    'concat',
    'relative_pose',
    'transform_points',
    'RectifiedPair',
    'StereoRectifier',
    'pixels_to_rectified1',
    'pixels_to_rectified2',
    'rectify_images',
]
