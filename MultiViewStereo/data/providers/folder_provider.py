"""
Images stored as files in a single folder.

The view id of an image is its file name without the extension.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from MultiViewStereo.core.exceptions import ResourceError
from MultiViewStereo.core.interfaces import ILookUpImages
from MultiViewStereo.data.io.cache import LRUCache
from MultiViewStereo.logger import get_logger

logger = get_logger("data.folder_provider")

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.tif', '.tiff', '.bmp')


class FolderImageLookup(ILookUpImages):
    """
    Look up images in a folder with OpenCV.

    Only image shapes are cached; pixels are read every time they are
    requested so memory use is bounded by the caller.
    """

    def __init__(self,
                 folder: Union[str, Path],
                 extensions: Sequence[str] = IMAGE_EXTENSIONS,
                 grayscale: bool = True,
                 cache_size: int = 1024):
        """
        Args:
            folder: Folder containing the images
            extensions: File extensions treated as images (case insensitive)
            grayscale: Load images as single channel
            cache_size: Number of image shapes to cache

        Raises:
            ResourceError: If the folder does not exist
        """
        self.folder = Path(folder)
        if not self.folder.is_dir():
            raise ResourceError(f"Image folder not found: {self.folder}")

        self.grayscale = grayscale
        self._shapes = LRUCache(max_size=cache_size)

        suffixes = {ext.lower() for ext in extensions}
        self._paths: Dict[str, Path] = {}
        for path in sorted(self.folder.iterdir()):
            if path.is_file() and path.suffix.lower() in suffixes:
                if path.stem in self._paths:
                    logger.warning(f"Duplicate view id {path.stem}, ignoring {path.name}")
                    continue
                self._paths[path.stem] = path

        logger.info(f"Found {len(self._paths)} images in {self.folder}")

    def view_ids(self) -> List[str]:
        return list(self._paths)

    def path_of(self, view_id: str) -> Path:
        try:
            return self._paths[view_id]
        except KeyError as e:
            raise ResourceError(f"Unknown image: {view_id}", view_id=view_id) from e

    def load_shape(self, view_id: str) -> Tuple[int, int]:
        shape = self._shapes.get_or_load(view_id, self._read_shape)
        if shape is None:
            raise ResourceError(f"Failed to read image: {view_id}", view_id=view_id)
        return shape

    def load_image(self, view_id: str) -> Optional[np.ndarray]:
        if view_id not in self._paths:
            return None
        flags = cv2.IMREAD_GRAYSCALE if self.grayscale else cv2.IMREAD_COLOR
        image = cv2.imread(str(self._paths[view_id]), flags)
        if image is None:
            logger.error(f"OpenCV could not decode {self._paths[view_id]}")
            return None

        self._shapes.put(view_id, (image.shape[1], image.shape[0]))
        return image

    def _read_shape(self, view_id: str) -> Optional[Tuple[int, int]]:
        image = cv2.imread(str(self.path_of(view_id)), cv2.IMREAD_UNCHANGED)
        if image is None:
            return None
        return image.shape[1], image.shape[0]

    def get_cache_stats(self):
        return self._shapes.get_stats()
