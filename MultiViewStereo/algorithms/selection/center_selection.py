"""
Greedy cluster selection around a center view.

The set of claimed views is passed in and returned explicitly; nothing is
marked on shared per-view objects.
"""

from typing import AbstractSet, FrozenSet, Iterable, List

from MultiViewStereo.algorithms.selection.view_selector import qualifying_edges
from MultiViewStereo.core.exceptions import InsufficientDataError
from MultiViewStereo.core.structures import StereoPairGraph, Vertex


def select_cluster(graph: StereoPairGraph,
                   center_index: int,
                   minimum_quality3d: float,
                   claimed: AbstractSet[int],
                   reuse_claimed_neighbors: bool = True) -> List[Vertex]:
    """
    Select the neighbors which form stereo pairs with a center.

    Args:
        graph: Stereo pair graph
        center_index: Dense index of the center view
        minimum_quality3d: Pairs below this quality are ignored
        claimed: Dense indexes already consumed by earlier clusters
        reuse_claimed_neighbors: If False, claimed views can't be neighbors

    Returns:
        Neighbor vertices in the order of the center's edge list

    Raises:
        InsufficientDataError: If no neighbor qualifies
    """
    center = graph.vertex_at(center_index)

    neighbors = []
    for edge in qualifying_edges(center, minimum_quality3d):
        other = edge.other(center)
        if not reuse_claimed_neighbors and other.index in claimed:
            continue
        neighbors.append(other)

    if not neighbors:
        raise InsufficientDataError(
            f"View {center.id!r} has no qualifying neighbors", view_id=center.id)
    return neighbors


def claim_views(claimed: AbstractSet[int], center_index: int,
                neighbors: Iterable[Vertex]) -> FrozenSet[int]:
    """
    Return a new claimed set with the center and its neighbors added.

    Claimed views are never used as centers afterwards.
    """
    return frozenset(claimed) | {center_index} | {v.index for v in neighbors}
