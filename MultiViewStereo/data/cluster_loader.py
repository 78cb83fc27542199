"""
Resource-bounded image loading for one cluster of stereo pairs.

Only the images of the current cluster are held: reset() replaces the storage
of the previous cluster before anything new is loaded.
"""

from typing import Dict, List

import numpy as np

from MultiViewStereo.core.exceptions import ResourceError
from MultiViewStereo.core.interfaces import ILookUpImages
from MultiViewStereo.core.structures import Vertex
from MultiViewStereo.logger import get_logger

logger = get_logger("data.cluster_loader")


class ClusterImageLoader:
    """
    Loads the images of a center view and its stereo partners.

    Attributes:
        images: Scene view index -> image, for the current cluster only
        ids: Scene view index -> view id
        pair_indexes: Scene view indexes of the partners (center excluded)
        peak_count: Most images held at once since the last reset()
    """

    def __init__(self, image_lookup: ILookUpImages):
        self.image_lookup = image_lookup
        self.images: Dict[int, np.ndarray] = {}
        self.ids: Dict[int, str] = {}
        self.pair_indexes: List[int] = []
        self.peak_count = 0
        self.total_loaded = 0

    def reset(self):
        """Discard every image of the previous cluster"""
        self.images = {}
        self.ids = {}
        self.pair_indexes = []
        self.peak_count = 0

    @property
    def count(self) -> int:
        return len(self.images)

    def load(self, vertex: Vertex, is_center: bool = False) -> np.ndarray:
        """
        Load the image of a view into the current cluster.

        Args:
            vertex: View to load
            is_center: The center is not added to pair_indexes

        Returns:
            The loaded image

        Raises:
            ResourceError: If the image can't be loaded
        """
        if vertex.scene_index in self.images:
            return self.images[vertex.scene_index]

        try:
            image = self.image_lookup.load_image(vertex.id)
        except ResourceError:
            raise
        except Exception as e:
            raise ResourceError(f"Failed to look up image: {vertex.id}", view_id=vertex.id) from e

        if image is None:
            raise ResourceError(f"Failed to look up image: {vertex.id}", view_id=vertex.id)

        self.images[vertex.scene_index] = image
        self.ids[vertex.scene_index] = vertex.id
        if not is_center:
            self.pair_indexes.append(vertex.scene_index)

        self.total_loaded += 1
        self.peak_count = max(self.peak_count, len(self.images))
        return image

    def load_cluster(self, center: Vertex, neighbors: List[Vertex]) -> Dict[int, np.ndarray]:
        """
        Reset, then load every neighbor followed by the center.

        Returns:
            Scene view index -> image for the whole cluster
        """
        self.reset()
        for neighbor in neighbors:
            logger.debug(f"  connected.id={neighbor.id}")
            self.load(neighbor)
        self.load(center, is_center=True)
        return self.images
