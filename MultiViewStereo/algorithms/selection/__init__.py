"""
Selection Module

Scores each view as a potential "center" of a cluster of stereo pairs, orders
the views and greedily selects non-overlapping clusters.

Usage:
    from MultiViewStereo.algorithms.selection import ViewSelector, order_candidates

    selector = ViewSelector(RectifiedViewCoverageScorer(), minimum_quality3d=0.25)
    scores = selector.score_views(scene, graph, view_infos)
    order = order_candidates(scores, [info.view_id for info in view_infos])
"""

from .view_selector import (
    ViewSelector,
    order_candidates,
    qualifying_edges,
    count_usable_centers
)
from .center_selection import select_cluster, claim_views

__all__ = [
    'ViewSelector',
    'order_candidates',
    'qualifying_edges',
    'count_usable_centers',
    'select_cluster',
    'claim_views',
]
