"""
Coverage score of a view acting as the "center" among several stereo pairs.

The center image is sampled on a coarse grid. Each stereo partner covers the
grid cells whose rectified coordinates fall inside the partner's rectified
image. A cell covered by several partners has diminishing returns: its miss
probability is the product of ``1 - quality`` over the partners covering it.
"""

from typing import Optional

import numpy as np

from MultiViewStereo.algorithms.geometry.rectification import (
    RectifiedPair,
    pixels_to_rectified1,
    pixels_to_rectified2
)
from MultiViewStereo.config import CoverageConfig
from MultiViewStereo.core.interfaces import ICoverageScorer
from MultiViewStereo.logger import get_logger

logger = get_logger("scoring.coverage")


class RectifiedViewCoverageScorer(ICoverageScorer):
    """Scores a center view by the fraction of its area seen by good stereo partners"""

    def __init__(self, config: Optional[CoverageConfig] = None):
        self.config = config or CoverageConfig()
        self._pixels: np.ndarray = np.zeros((0, 2))
        self._miss: np.ndarray = np.zeros(0)
        self._score = 0.0
        self.num_views = 0

    def initialize(self, width: int, height: int, camera) -> None:
        """Create the sampling grid for a center image"""
        cell = max(width, height) / float(self.config.max_grid_side)
        cols = max(1, int(round(width / cell)))
        rows = max(1, int(round(height / cell)))

        # Sample at the middle of each cell
        xs = (np.arange(cols) + 0.5) * (width / cols)
        ys = (np.arange(rows) + 0.5) * (height / rows)
        grid_x, grid_y = np.meshgrid(xs, ys)
        self._pixels = np.stack([grid_x.ravel(), grid_y.ravel()], axis=1)

        self._miss = np.ones(len(self._pixels))
        self._score = 0.0
        self.num_views = 0

    def add_view(self, width: int, height: int, camera, rectified: RectifiedPair,
                 quality: float) -> None:
        """Mark the cells covered by this partner, weighted by quality"""
        covered = self.covered_cells(rectified, width, height)
        self._miss[covered] *= (1.0 - float(quality))
        self.num_views += 1

    def covered_cells(self, rectified: RectifiedPair, width: int, height: int) -> np.ndarray:
        """
        Boolean array of grid cells which are visible inside the partner image.

        Points at infinity are assumed, i.e. a cell is covered if its rectified
        coordinate lies inside the rectified bounds of the partner image.
        """
        rect1 = pixels_to_rectified1(rectified, self._pixels)

        # Sample the border of the partner so lens distortion bends the bounds correctly
        border = _image_border(width, height)
        rect2 = pixels_to_rectified2(rectified, border)

        finite = np.all(np.isfinite(rect1), axis=1)
        lower = rect2.min(axis=0)
        upper = rect2.max(axis=0)
        inside = np.all((rect1 >= lower) & (rect1 <= upper), axis=1)
        return finite & inside

    def process(self) -> float:
        """
        Score = mean covered fraction over all grid cells.

        Returns:
            Score in [0, 1], 0 if no views were added
        """
        if len(self._miss) == 0 or self.num_views == 0:
            self._score = 0.0
            return self._score

        coverage = 1.0 - self._miss
        coverage[coverage < self.config.min_covered_fraction] = 0.0
        self._score = float(coverage.mean())
        return self._score

    @property
    def score(self) -> float:
        return self._score


def _image_border(width: int, height: int, samples: int = 8) -> np.ndarray:
    """Points along the border of an image, corners included"""
    xs = np.linspace(0, width - 1, samples)
    ys = np.linspace(0, height - 1, samples)
    top = np.stack([xs, np.zeros_like(xs)], axis=1)
    bottom = np.stack([xs, np.full_like(xs, height - 1)], axis=1)
    left = np.stack([np.zeros_like(ys), ys], axis=1)
    right = np.stack([np.full_like(ys, width - 1), ys], axis=1)
    return np.vstack([top, bottom, left, right])
