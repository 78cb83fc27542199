"""
Observer for intermediate results which are otherwise discarded.
"""

from abc import ABC, abstractmethod

import numpy as np

from MultiViewStereo.core.structures.disparity import DisparityParameters


class IMultiViewStereoListener(ABC):
    """
    Receives intermediate disparity images.

    Purely observational: the pipeline never looks at what a listener does.
    Exceptions raised by a listener are logged and the run continues.
    """

    @abstractmethod
    def handle_pair_disparity(self, left: str, right: str,
                              rect_left: np.ndarray, rect_right: np.ndarray,
                              disparity: np.ndarray, mask: np.ndarray,
                              parameters: DisparityParameters) -> None:
        """Called after the disparity of a single stereo pair has been computed"""
        pass

    @abstractmethod
    def handle_fused_disparity(self, center_view_id: str,
                               disparity: np.ndarray, mask: np.ndarray,
                               parameters: DisparityParameters) -> None:
        """Called after the fused disparity of a center view has been computed"""
        pass
