"""
Images held in memory, keyed by view id.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from MultiViewStereo.core.exceptions import ResourceError
from MultiViewStereo.core.interfaces import ILookUpImages


class InMemoryImageLookup(ILookUpImages):
    """Look up images from a dictionary. Useful for tests and small scenes."""

    def __init__(self, images: Optional[Dict[str, np.ndarray]] = None):
        self._images: Dict[str, np.ndarray] = dict(images or {})

    def add(self, view_id: str, image: np.ndarray):
        self._images[view_id] = image

    def view_ids(self):
        return list(self._images)

    def load_shape(self, view_id: str) -> Tuple[int, int]:
        if view_id not in self._images:
            raise ResourceError(f"Unknown image: {view_id}", view_id=view_id)
        height, width = self._images[view_id].shape[:2]
        return width, height

    def load_image(self, view_id: str) -> Optional[np.ndarray]:
        return self._images.get(view_id)
