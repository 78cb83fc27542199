"""
Multi-View Stereo Module
========================

Dense point cloud from images with known camera poses and intrinsics.
Views are scored as potential "center" views, non-overlapping clusters of
stereo pairs are selected greedily, one fused disparity image is computed per
cluster and all of them are merged into one cloud without duplicate points.

Architecture:
    core/        - Data model, interfaces and exceptions
    algorithms/  - Geometry, scoring, selection, disparity and cloud
    data/        - Cluster image loading, image providers and export
    pipeline/    - MultiViewStereoFromKnownScene driver

Example:
    >>> from MultiViewStereo import MultiViewStereoFromKnownScene, SGBMStereoDisparity
    >>> from MultiViewStereo.data import MockSceneProvider
    >>>
    >>> mock = MockSceneProvider(num_views=5, seed=42)
    >>> mvs = MultiViewStereoFromKnownScene(mock.images)
    >>> mvs.set_stereo_disparity(SGBMStereoDisparity())
    >>> result = mvs.process(mock.scene, mock.graph)
"""

from .config import (
    MultiViewStereoConfig,
    CoverageConfig,
    FusedDisparityConfig,
    DisparityCloudConfig
)
from .core.exceptions import (
    MultiViewStereoError,
    ConfigurationError,
    ValidationError,
    ResourceError,
    ComputationError,
    InsufficientDataError
)
from .core.structures import StereoPairGraph, SceneStructure, CameraModel, CenterView
from .algorithms.disparity import SGBMStereoDisparity, MultiViewToFusedDisparity
from .pipeline import MultiViewStereoFromKnownScene, MultiViewStereoResult

__version__ = "1.0.0"
__all__ = [
    'MultiViewStereoFromKnownScene',
    'MultiViewStereoResult',
    'MultiViewStereoConfig',
    'CoverageConfig',
    'FusedDisparityConfig',
    'DisparityCloudConfig',
    'StereoPairGraph',
    'SceneStructure',
    'CameraModel',
    'CenterView',
    'SGBMStereoDisparity',
    'MultiViewToFusedDisparity',
    'MultiViewStereoError',
    'ConfigurationError',
    'ValidationError',
    'ResourceError',
    'ComputationError',
    'InsufficientDataError',
]
