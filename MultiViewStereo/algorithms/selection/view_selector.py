"""
View Selector

Scores every view for its suitability as the "center" of a cluster of stereo
pairs, and orders the views best first.

The scoring of one view only reads the scene and graph, so the result is the
same no matter how often or in which order views are scored.
"""

from typing import List, Optional, Sequence

import numpy as np

from MultiViewStereo.algorithms.geometry.rectification import StereoRectifier
from MultiViewStereo.algorithms.geometry.se3 import relative_pose
from MultiViewStereo.core.exceptions import ComputationError
from MultiViewStereo.core.interfaces import ICoverageScorer
from MultiViewStereo.core.structures import (
    INVALID_SCORE,
    Edge,
    SceneStructure,
    StereoPairGraph,
    Vertex,
    ViewInfo,
    check_quality3d
)
from MultiViewStereo.logger import get_logger

logger = get_logger("selection.view_selector")


def qualifying_edges(vertex: Vertex, minimum_quality3d: float) -> List[Edge]:
    """
    Edges of a vertex with enough 3D information to form a stereo pair.

    Raises:
        ValidationError: If an edge has a quality3D outside [0, 1]
    """
    return [edge for edge in vertex.pairs if check_quality3d(edge.quality3d) >= minimum_quality3d]


def count_usable_centers(graph: StereoPairGraph, minimum_quality3d: float) -> int:
    """Number of views with at least one qualifying stereo pair"""
    return sum(1 for vertex in graph if qualifying_edges(vertex, minimum_quality3d))


def order_candidates(scores: np.ndarray, view_ids: Sequence[str]) -> List[int]:
    """
    Order dense view indexes by descending score.

    Ties are broken by ascending view id so the order is reproducible. NaN
    scores are placed last.

    Args:
        scores: Snapshot of the per-view scores, addressed by dense index
        view_ids: View id of every dense index

    Returns:
        Dense indexes, best center candidate first
    """
    snapshot = np.array(scores, dtype=np.float64)
    snapshot[np.isnan(snapshot)] = -np.inf
    return sorted(range(len(snapshot)), key=lambda i: (-snapshot[i], view_ids[i]))


class ViewSelector:
    """
    Computes the score for using each view as the center, based on coverage
    and geometric quality of its stereo partners.
    """

    def __init__(self, scorer: ICoverageScorer, minimum_quality3d: float = 0.25):
        """
        Args:
            scorer: Coverage scorer, reused for every view
            minimum_quality3d: Pairs below this quality are ignored
        """
        self.scorer = scorer
        self.minimum_quality3d = minimum_quality3d
        self.rectifier = StereoRectifier()

    def score_views(self, scene: SceneStructure, graph: StereoPairGraph,
                    view_infos: List[ViewInfo]) -> np.ndarray:
        """
        Score every view.

        Returns:
            Scores addressed by dense index
        """
        scores = np.full(len(view_infos), INVALID_SCORE)
        for info in view_infos:
            scores[info.index] = self.score_view(scene, graph, view_infos, info)
        return scores

    def score_view(self, scene: SceneStructure, graph: StereoPairGraph,
                   view_infos: List[ViewInfo], center: ViewInfo) -> float:
        """Score a single view as the center of its qualifying neighbors"""
        vertex = graph.vertex_at(center.index)
        camera = scene.camera_of(center.scene_index)

        self.rectifier.set_view1(camera, center.width, center.height)
        self.scorer.initialize(center.width, center.height, camera)

        world_to_view1 = scene.world_to_view(center.scene_index)

        # Statistics for debug output
        total_qualified = 0
        sum_quality = 0.0

        for edge in qualifying_edges(vertex, self.minimum_quality3d):
            connected = view_infos[edge.other(vertex).index]
            connected_camera = scene.camera_of(connected.scene_index)

            # Transform from the center into the connected view
            world_to_view2 = scene.world_to_view(connected.scene_index)
            view1_to_view2 = relative_pose(world_to_view1, world_to_view2)

            try:
                rectified = self.rectifier.process_view2(
                    connected_camera, connected.width, connected.height, view1_to_view2)
            except ComputationError as e:
                logger.warning(f"Pair {center.view_id}-{connected.view_id} skipped in scoring: {e}")
                continue

            self.scorer.add_view(connected.width, connected.height, connected_camera,
                                 rectified, edge.quality3d)
            total_qualified += 1
            sum_quality += edge.quality3d

        score = float(self.scorer.process())

        average_quality = sum_quality / total_qualified if total_qualified > 0 else -1
        logger.debug(
            f"View[{center.view_id}] center score={score:.4f} aveQuality={average_quality:.3f} "
            f"conn={total_qualified}/{len(vertex.pairs)}"
        )
        return score
