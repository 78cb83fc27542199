"""
Per-view working state created fresh at the start of every run.
"""

from dataclasses import dataclass, field
from typing import List

# Score of a view which has not been scored yet
INVALID_SCORE = -1.0


@dataclass
class ViewInfo:
    """Information on a view used to select centers, addressed by dense index"""
    index: int
    view_id: str
    scene_index: int
    width: int
    height: int
    score: float = INVALID_SCORE


@dataclass
class CenterView:
    """A view which acted as a "center" and contributed to the cloud"""
    view_id: str
    index: int
    score: float
    neighbors: List[str] = field(default_factory=list)
    points_added: int = 0

    def __repr__(self) -> str:
        return (f"CenterView(view_id={self.view_id!r}, score={self.score:.3f}, "
                f"neighbors={len(self.neighbors)}, points_added={self.points_added})")
