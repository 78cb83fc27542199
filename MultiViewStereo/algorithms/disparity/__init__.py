"""
Pairwise and fused disparity.
"""

from .block_matching import SGBMStereoDisparity
from .fused import MultiViewToFusedDisparity

__all__ = ['SGBMStereoDisparity', 'MultiViewToFusedDisparity']
