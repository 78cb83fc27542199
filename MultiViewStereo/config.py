"""
Configuration for the multi-view stereo pipeline.

Modify the default values here for experimentation.
"""

from dataclasses import dataclass, field
from typing import Optional

from MultiViewStereo.core.exceptions import ConfigurationError


@dataclass
class CoverageConfig:
    """Configuration for scoring a view as a "center" view"""

    # Coverage is evaluated on a coarse grid instead of every pixel
    max_grid_side: int = 40

    # Cells with less coverage than this do not count towards the score
    min_covered_fraction: float = 0.0


@dataclass
class FusedDisparityConfig:
    """Configuration for the pairwise SGBM matcher and the per-pixel fusion"""

    # Stereo matching (OpenCV SGBM)
    disparity_min: int = 0
    disparity_range: int = 64                 # Rounded up to a multiple of 16 for SGBM
    block_size: int = 5
    uniqueness_ratio: int = 10
    speckle_window_size: int = 50
    speckle_range: int = 2
    disp12_max_diff: int = 1

    # Fusion
    min_pair_support: int = 1                 # Pairs that must observe a pixel
    max_relative_disagreement: float = 0.1    # Depth samples this far from the median are dropped


@dataclass
class DisparityCloudConfig:
    """Configuration for merging disparity images into one cloud"""

    # A pixel is redundant if an existing point projects onto it with a disparity this close
    disparity_similar_tol: float = 1.0

    # Optional radius pruning against the existing cloud (0 disables it)
    min_point_distance: float = 0.0


@dataclass
class MultiViewStereoConfig:
    """Configuration for MultiViewStereoFromKnownScene"""

    # Minimum quality of the 3D information between two views for them to be a stereo pair
    minimum_quality3d: float = 0.25

    # Views already claimed by an earlier center can still act as neighbors of a later one
    reuse_claimed_neighbors: bool = True

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    fused: FusedDisparityConfig = field(default_factory=FusedDisparityConfig)
    cloud: DisparityCloudConfig = field(default_factory=DisparityCloudConfig)

    # Logging
    verbose: bool = False
    log_file: Optional[str] = None
    # Set False to keep log output in log_file only
    log_console: bool = True

    def validate(self):
        """
        Check the configuration before any processing starts.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if not 0.0 <= self.minimum_quality3d <= 1.0:
            raise ConfigurationError(
                f"minimum_quality3d must be in [0, 1], got {self.minimum_quality3d}")
        if self.coverage.max_grid_side < 1:
            raise ConfigurationError("coverage.max_grid_side must be positive")
        if self.fused.disparity_range < 1:
            raise ConfigurationError("fused.disparity_range must be positive")
        if self.fused.block_size < 1 or self.fused.block_size % 2 == 0:
            raise ConfigurationError("fused.block_size must be a positive odd number")
        if self.fused.min_pair_support < 1:
            raise ConfigurationError("fused.min_pair_support must be at least 1")
        if self.cloud.disparity_similar_tol < 0 or self.cloud.min_point_distance < 0:
            raise ConfigurationError("cloud tolerances must be non-negative")
