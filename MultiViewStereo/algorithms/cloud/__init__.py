"""
Point cloud accumulation from disparity images.
"""

from .disparity_cloud import DisparityCloud, ViewPointRange

__all__ = ['DisparityCloud', 'ViewPointRange']
