"""
Base interface for scoring a view as the "center" of a stereo cluster.
"""

from abc import ABC, abstractmethod


class ICoverageScorer(ABC):
    """
    Computes how well a center view is covered by its stereo partners.

    Usage pattern, once per candidate center:
        scorer.initialize(width, height, camera)
        scorer.add_view(...)   # once per qualifying neighbor
        score = scorer.process()

    How overlapping coverage is combined is up to the implementation. The
    score must grow with the area covered by high quality neighbors and be
    deterministic for identical inputs.
    """

    @abstractmethod
    def initialize(self, width: int, height: int, camera) -> None:
        """
        Start scoring a new center view.

        Args:
            width: Center image width
            height: Center image height
            camera: CameraModel of the center view
        """
        pass

    @abstractmethod
    def add_view(self, width: int, height: int, camera, rectified, quality: float) -> None:
        """
        Add the contribution of one stereo partner.

        Args:
            width: Partner image width
            height: Partner image height
            camera: CameraModel of the partner
            rectified: RectifiedPair with the center as view 1
            quality: quality3D of the pair, used as the weight
        """
        pass

    @abstractmethod
    def process(self) -> float:
        """Combine all contributions and return the score"""
        pass

    @property
    @abstractmethod
    def score(self) -> float:
        """Score found by the last call to process()"""
        pass
