"""
Interfaces for the collaborators of the multi-view stereo pipeline.
"""

from .base_lookup import ILookUpImages
from .base_coverage import ICoverageScorer
from .base_disparity import IStereoDisparity, IFusedDisparityEngine, PairDisparityCallback
from .base_cloud import ICloudAccumulator, PointTransform
from .listener import IMultiViewStereoListener

__all__ = [
    'ILookUpImages',
    'ICoverageScorer',
    'IStereoDisparity',
    'IFusedDisparityEngine',
    'PairDisparityCallback',
    'ICloudAccumulator',
    'PointTransform',
    'IMultiViewStereoListener',
]
