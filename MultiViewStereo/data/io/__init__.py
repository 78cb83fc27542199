"""
I/O utilities.

Components:
    - LRUCache: Least Recently Used cache
    - save_point_cloud / to_open3d: Export through Open3D (optional dependency)
"""

from .cache import LRUCache
from .export import HAS_OPEN3D, save_point_cloud, to_open3d

__all__ = [
    'LRUCache',
    'HAS_OPEN3D',
    'save_point_cloud',
    'to_open3d',
]
