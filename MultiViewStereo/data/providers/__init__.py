"""
Image providers.

Available Providers:
    - InMemoryImageLookup: Images held in a dictionary
    - FolderImageLookup: Images read from a folder with OpenCV
    - MockSceneProvider: Synthetic scene, graph and images for testing

Usage:
    from MultiViewStereo.data.providers import FolderImageLookup

    lookup = FolderImageLookup('./images', grayscale=True)
    width, height = lookup.load_shape('IMG_0001')
"""

from MultiViewStereo.core.interfaces import ILookUpImages

from .memory_provider import InMemoryImageLookup
from .folder_provider import FolderImageLookup, IMAGE_EXTENSIONS
from .mock_provider import MockSceneProvider

__all__ = [
    'ILookUpImages',
    'InMemoryImageLookup',
    'FolderImageLookup',
    'IMAGE_EXTENSIONS',
    'MockSceneProvider',
]
