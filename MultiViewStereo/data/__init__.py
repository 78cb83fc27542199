"""
Data access layer for the multi-view stereo pipeline.

This module provides:
- ClusterImageLoader: Holds only the images of the current cluster
- Image providers: Retrieve images by view id from various sources
- I/O utilities: Caching and point cloud export

Architecture:
    MultiViewStereoFromKnownScene
        ↓
    ClusterImageLoader
        ↓
    ILookUpImages (interface)
        ↓
    Providers (memory, folder, mock)
"""

from .cluster_loader import ClusterImageLoader
from .providers import (
    ILookUpImages,
    InMemoryImageLookup,
    FolderImageLookup,
    MockSceneProvider,
)
from .io import LRUCache, save_point_cloud, to_open3d

__all__ = [
    'ClusterImageLoader',
    'ILookUpImages',
    'InMemoryImageLookup',
    'FolderImageLookup',
    'MockSceneProvider',
    'LRUCache',
    'save_point_cloud',
    'to_open3d',
]
