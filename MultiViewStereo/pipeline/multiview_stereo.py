"""
Multi-View Stereo From Known Scene Structure

Creates a dense point cloud from multiple stereo pairs. When possible, a single
disparity image is computed using multiple stereo pairs with a single "center"
image that is common to all pairs, so noise is reduced using the redundant
information. A combined 3D point cloud is then found from the disparity
images while removing redundant points.

    1. Compute the score for every view if it was a "center" view among multiple stereo pairs
    2. Sort views based on scores with the best first
    3. Greedily select views to act as a center view and compute a fused disparity image
       from its neighbors
    4. Add the disparity image to the combined point cloud while pruning redundant pixels

Centers are processed one at a time: which pixels are redundant depends on
what earlier centers already added.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

import numpy as np

from MultiViewStereo.algorithms.cloud import DisparityCloud
from MultiViewStereo.algorithms.disparity import MultiViewToFusedDisparity
from MultiViewStereo.algorithms.scoring import RectifiedViewCoverageScorer
from MultiViewStereo.algorithms.selection import (
    ViewSelector,
    claim_views,
    order_candidates,
    select_cluster
)
from MultiViewStereo.config import MultiViewStereoConfig
from MultiViewStereo.core.exceptions import (
    ComputationError,
    ConfigurationError,
    InsufficientDataError,
    MultiViewStereoError,
    ResourceError,
    ValidationError
)
from MultiViewStereo.core.interfaces import (
    ICloudAccumulator,
    ICoverageScorer,
    IFusedDisparityEngine,
    ILookUpImages,
    IMultiViewStereoListener,
    IStereoDisparity
)
from MultiViewStereo.core.structures import (
    CenterView,
    SceneStructure,
    StereoPairGraph,
    Vertex,
    ViewInfo
)
from MultiViewStereo.data.cluster_loader import ClusterImageLoader
from MultiViewStereo.logger import configure_root_logger, get_logger

logger = get_logger("pipeline")


@dataclass
class MultiViewStereoResult:
    """
    Result of MultiViewStereoFromKnownScene.process()

    Attributes:
        cloud: (N, 3) points in the world frame, in insertion order
        centers: Views which acted as centers, in processing order
        statistics: Counts and timings of the run
    """
    cloud: np.ndarray
    centers: List[CenterView]
    statistics: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"MultiViewStereoResult(points={len(self.cloud)}, centers={len(self.centers)})"


class MultiViewStereoFromKnownScene:
    """
    Dense point cloud from views with known intrinsic and extrinsic parameters.

    NOTE: set_stereo_disparity() must be called before process().

    Example:
        >>> mvs = MultiViewStereoFromKnownScene(FolderImageLookup('./images'))
        >>> mvs.set_stereo_disparity(SGBMStereoDisparity())
        >>> result = mvs.process(scene, pairs)
        >>> print(len(result.cloud), [c.view_id for c in result.centers])
    """

    def __init__(self,
                 image_lookup: ILookUpImages,
                 config: Optional[MultiViewStereoConfig] = None,
                 listener: Optional[IMultiViewStereoListener] = None,
                 coverage_scorer: Optional[ICoverageScorer] = None,
                 fused_engine: Optional[IFusedDisparityEngine] = None,
                 cloud: Optional[ICloudAccumulator] = None):
        """
        Args:
            image_lookup: Retrieves images by view id
            config: Configuration object. If None, uses defaults.
            listener: Optional observer of intermediate disparity images
            coverage_scorer: Scores views as centers. Default: RectifiedViewCoverageScorer
            fused_engine: Computes fused disparity. Default: MultiViewToFusedDisparity
            cloud: Accumulates the point cloud. Default: DisparityCloud
        """
        self.config = config or MultiViewStereoConfig()
        self.image_lookup = image_lookup
        self.listener = listener

        if coverage_scorer is None:
            coverage_scorer = RectifiedViewCoverageScorer(self.config.coverage)
        if fused_engine is None:
            fused_engine = MultiViewToFusedDisparity(self.config.fused)
        if cloud is None:
            cloud = DisparityCloud(self.config.cloud)

        self.coverage_scorer = coverage_scorer
        self.fused_engine = fused_engine
        self.disparity_cloud = cloud
        self.loader = ClusterImageLoader(image_lookup)
        self.selector = ViewSelector(self.coverage_scorer, self.config.minimum_quality3d)

        # Working state, created fresh by every call to process()
        self.view_infos: List[ViewInfo] = []
        self.scores = np.zeros(0)
        self.list_centers: List[CenterView] = []
        self.stats: Dict[str, Any] = {}

        if self.config.verbose or self.config.log_file:
            configure_root_logger(
                level='DEBUG' if self.config.verbose else 'INFO',
                log_file=self.config.log_file,
                console=self.config.log_console
            )

    def set_stereo_disparity(self, stereo_disparity: IStereoDisparity):
        """Specifies which stereo disparity algorithm to use"""
        self.fused_engine.stereo_disparity = stereo_disparity

    def get_cloud(self) -> np.ndarray:
        """Returns the computed 3D point cloud"""
        return self.disparity_cloud.cloud

    def process(self, scene: SceneStructure, pairs: StereoPairGraph) -> MultiViewStereoResult:
        """
        Computes a point cloud given the known scene and a set of stereo pairs.

        Args:
            scene: Extrinsic and intrinsic parameters of every view
            pairs: Which views are to be used and their relationship to each other

        Returns:
            MultiViewStereoResult

        Raises:
            ConfigurationError: No stereo disparity set or invalid configuration
            ValidationError: Invalid stereo pair graph
            ResourceError: An image could not be loaded
            ComputationError: A fused disparity could not be computed
        """
        self.config.validate()
        self._initialize_listener()
        self._validate_graph(pairs)

        start_time = time.time()
        self.stats = {
            'num_views': len(pairs),
            'num_centers': 0,
            'num_skipped': 0,
            'num_points': 0,
            'peak_loaded_images': 0,
            'processing_time': {}
        }

        # Go through each view and compute its score as a center view
        stage_start = time.time()
        self.score_views(scene, pairs)
        self.stats['processing_time']['scoring'] = time.time() - stage_start

        self.disparity_cloud.reset()
        self.list_centers = []

        # Best views first, ties broken by view id
        order = order_candidates(self.scores, [info.view_id for info in self.view_infos])

        stage_start = time.time()
        claimed: FrozenSet[int] = frozenset()
        for rank, index in enumerate(order):
            # Already consumed by an earlier cluster
            if index in claimed:
                continue
            claimed = self._process_candidate(scene, pairs, rank, index, claimed)
        self.stats['processing_time']['fusion'] = time.time() - stage_start

        self.stats['num_centers'] = len(self.list_centers)
        self.stats['num_points'] = len(self.get_cloud())
        self.stats['total_time'] = time.time() - start_time

        logger.info(
            f"✓ Dense cloud complete: {self.stats['num_points']:,} points from "
            f"{self.stats['num_centers']} centers in {self.stats['total_time']:.2f}s"
        )

        return MultiViewStereoResult(
            cloud=self.get_cloud().copy(),
            centers=list(self.list_centers),
            statistics=dict(self.stats)
        )

    def score_views(self, scene: SceneStructure, pairs: StereoPairGraph) -> np.ndarray:
        """
        Compute the score of every view as a center.

        Scores are addressed by the graph's dense index and are not modified
        once selection starts.

        Returns:
            Copy of the scores
        """
        self.view_infos = self._initialize_view_infos(pairs)
        self.selector.minimum_quality3d = self.config.minimum_quality3d
        self.scores = self.selector.score_views(scene, pairs, self.view_infos)
        for info in self.view_infos:
            info.score = float(self.scores[info.index])
        return self.scores.copy()

    def _process_candidate(self, scene: SceneStructure, pairs: StereoPairGraph,
                           rank: int, index: int, claimed: FrozenSet[int]) -> FrozenSet[int]:
        """Try to use a view as a center. Returns the updated claimed set."""
        info = self.view_infos[index]
        vertex = pairs.vertex_at(index)
        logger.debug(f"Center[{rank}] View={info.view_id} score={info.score:.4f}")

        try:
            neighbors = select_cluster(
                pairs, index,
                self.config.minimum_quality3d,
                claimed,
                self.config.reuse_claimed_neighbors
            )
        except InsufficientDataError:
            logger.info(f"Skipping {info.view_id}: too few connections to use as a center")
            self.stats['num_skipped'] += 1
            return claimed

        # Record that this view was used as a center
        center = CenterView(
            view_id=info.view_id,
            index=index,
            score=info.score,
            neighbors=[n.id for n in neighbors]
        )
        self.list_centers.append(center)

        try:
            self.loader.load_cluster(vertex, neighbors)
            self.stats['peak_loaded_images'] = max(self.stats['peak_loaded_images'],
                                                   self.loader.peak_count)
            center.points_added = self._compute_fused_disparity_add_cloud(scene, vertex)
        except (ResourceError, ComputationError) as e:
            logger.error(f"✗ Center {info.view_id} failed, aborting: {e}")
            raise
        finally:
            # Images of this cluster are never needed again
            self.loader.reset()

        logger.info(
            f"Center {info.view_id}: {len(neighbors)} neighbors, "
            f"{center.points_added:,} points added ({len(self.get_cloud()):,} total)"
        )
        return claim_views(claimed, index, neighbors)

    def _compute_fused_disparity_add_cloud(self, scene: SceneStructure, vertex: Vertex) -> int:
        """
        Combining stereo information from all images in this cluster, compute a
        disparity image and add it to the cloud
        """
        self.fused_engine.initialize(scene, self.loader.images)
        try:
            success = self.fused_engine.process(vertex.scene_index, list(self.loader.pair_indexes))
        except MultiViewStereoError:
            raise
        except Exception as e:
            raise ComputationError(f"Disparity failed for view {vertex.id}: {e}",
                                   view_id=vertex.id) from e
        if not success:
            raise ComputationError(f"Disparity failed for view {vertex.id}", view_id=vertex.id)

        disparity = self.fused_engine.fused_disparity
        mask = self.fused_engine.fused_mask
        parameters = self.fused_engine.fused_param

        # Pass along results to the listener
        if self.listener is not None:
            try:
                self.listener.handle_fused_disparity(vertex.id, disparity, mask, parameters)
            except Exception:
                logger.exception(f"Listener failed on fused disparity of {vertex.id}")

        # The fused disparity is in the center's original pixels
        camera = scene.camera_of(vertex.scene_index)
        world_to_view = scene.world_to_view(vertex.scene_index)

        return self.disparity_cloud.add_disparity(
            disparity, mask, world_to_view, parameters,
            camera.pixel_to_norm, camera.norm_to_pixel,
            view_id=vertex.id
        )

    def _initialize_listener(self):
        """Sets up the listener for individual stereo pairs"""
        if getattr(self.fused_engine, 'stereo_disparity', None) is None:
            raise ConfigurationError("Must call set_stereo_disparity() first")

        if self.listener is None:
            self.fused_engine.listener = None
            return

        listener = self.listener
        ids = self.loader

        def forward_pair(left, right, rect_left, rect_right, disparity, mask, parameters):
            try:
                listener.handle_pair_disparity(ids.ids[left], ids.ids[right],
                                               rect_left, rect_right, disparity, mask, parameters)
            except Exception:
                logger.exception(f"Listener failed on pair {ids.ids[left]}-{ids.ids[right]}")

        self.fused_engine.listener = forward_pair

    def _initialize_view_infos(self, pairs: StereoPairGraph) -> List[ViewInfo]:
        """Create a ViewInfo for every view, all parameters but the score"""
        infos = []
        for vertex in pairs:
            try:
                width, height = self.image_lookup.load_shape(vertex.id)
            except ResourceError:
                raise
            except Exception as e:
                raise ResourceError(f"Failed to look up shape: {vertex.id}",
                                    view_id=vertex.id) from e
            infos.append(ViewInfo(
                index=vertex.index,
                view_id=vertex.id,
                scene_index=vertex.scene_index,
                width=int(width),
                height=int(height)
            ))
        return infos

    def _validate_graph(self, pairs: StereoPairGraph):
        validation = pairs.validate()
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation:
            raise ValidationError("; ".join(validation.errors))
