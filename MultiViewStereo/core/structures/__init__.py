from .view_graph import (
    StereoPairGraph,
    Vertex,
    Edge,
    ValidationResult,
    check_quality3d
)
from .scene import CameraModel, ViewMetric, SceneStructure, pose_from_euler
from .disparity import DisparityParameters
from .view_info import ViewInfo, CenterView, INVALID_SCORE

__all__ = [
    # Graph
    'StereoPairGraph',
    'Vertex',
    'Edge',
    'ValidationResult',
    'check_quality3d',

    # Scene
    'CameraModel',
    'ViewMetric',
    'SceneStructure',
    'pose_from_euler',

    # Working state
    'DisparityParameters',
    'ViewInfo',
    'CenterView',
    'INVALID_SCORE',
]
