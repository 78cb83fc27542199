"""
Base interface for image look up.

There can easily be too many images to hold in memory at once, so the pipeline
asks for them by view id when a cluster needs them.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np


class ILookUpImages(ABC):
    """
    Abstract interface for retrieving images by view id.

    Implementations: InMemoryImageLookup, FolderImageLookup
    """

    @abstractmethod
    def load_shape(self, view_id: str) -> Tuple[int, int]:
        """
        Get the shape of an image without needing to keep its pixels.

        Args:
            view_id: View identifier

        Returns:
            (width, height)

        Raises:
            ResourceError: If the image is unknown or unreadable
        """
        pass

    @abstractmethod
    def load_image(self, view_id: str) -> Optional[np.ndarray]:
        """
        Load the pixels of an image.

        Args:
            view_id: View identifier

        Returns:
            Image array (H, W) or (H, W, C), or None on failure
        """
        pass
