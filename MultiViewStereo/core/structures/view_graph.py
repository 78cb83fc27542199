"""
Graph of candidate stereo pairs.

Vertices are views, edges are pairs of views annotated with quality3D, an
estimate in [0, 1] of how much reliable 3D information the pair yields.
Each vertex is given a dense integer index when it is added so derived
state can live in flat arrays; the id -> index map is only used at the
boundary.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Union

from MultiViewStereo.core.exceptions import ValidationError


@dataclass
class ValidationResult:
    """
    Result of graph validation.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages
        stats: Dictionary of validation statistics
    """
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """Allow truthiness check"""
        return self.is_valid and len(self.errors) == 0

    def add_error(self, message: str):
        """Add an error message"""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a warning message"""
        self.warnings.append(message)


def check_quality3d(quality3d: float) -> float:
    """
    Validate a quality3D value.

    Raises:
        ValidationError: If the value is NaN or outside [0, 1]
    """
    value = float(quality3d)
    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise ValidationError(f"quality3D must be in [0, 1], got {quality3d}")
    return value


@dataclass(eq=False)
class Vertex:
    """A view in the stereo pair graph"""
    id: str
    # Index of the view inside SceneStructure
    scene_index: int
    # Dense index assigned by the graph
    index: int
    pairs: List['Edge'] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Vertex(id={self.id!r}, index={self.index}, pairs={len(self.pairs)})"


@dataclass(eq=False)
class Edge:
    """Unordered stereo pair between two vertices"""
    va: Vertex
    vb: Vertex
    quality3d: float

    def other(self, vertex: Union[Vertex, str]) -> Vertex:
        """
        Return the endpoint opposite to the given one.

        Args:
            vertex: One endpoint, as a Vertex or its id

        Raises:
            ValidationError: If vertex is not an endpoint of this edge
        """
        vid = vertex.id if isinstance(vertex, Vertex) else vertex
        if vid == self.va.id:
            return self.vb
        if vid == self.vb.id:
            return self.va
        raise ValidationError(f"View {vid!r} is not part of edge {self.va.id}-{self.vb.id}")

    def __repr__(self) -> str:
        return f"Edge({self.va.id!r}, {self.vb.id!r}, quality3d={self.quality3d:.3f})"


class StereoPairGraph:
    """
    Views and the stereo pairs between them.

    Supplied once per run and never mutated by the pipeline.
    """

    def __init__(self):
        self.vertices: Dict[str, Vertex] = {}
        self._by_index: List[Vertex] = []
        self._edges: List[Edge] = []

    def add_vertex(self, view_id: str, scene_index: int) -> Vertex:
        """
        Add a view to the graph.

        Args:
            view_id: Unique view identifier (used for image look up)
            scene_index: Index of the view inside the SceneStructure

        Returns:
            The new vertex

        Raises:
            ValidationError: If the id is already present
        """
        if view_id in self.vertices:
            raise ValidationError(f"Duplicate view id {view_id!r}")
        vertex = Vertex(id=view_id, scene_index=int(scene_index), index=len(self._by_index))
        self.vertices[view_id] = vertex
        self._by_index.append(vertex)
        return vertex

    def connect(self, id_a: str, id_b: str, quality3d: float) -> Edge:
        """
        Add a stereo pair between two existing views.

        Raises:
            ValidationError: Unknown ids, self pairs, pairs already connected or
                quality3D outside [0, 1]
        """
        quality3d = check_quality3d(quality3d)
        if id_a == id_b:
            raise ValidationError(f"A view can't be paired with itself: {id_a!r}")
        try:
            va = self.vertices[id_a]
            vb = self.vertices[id_b]
        except KeyError as e:
            raise ValidationError(f"Unknown view id {e.args[0]!r}") from e
        if any(pair.other(va) is vb for pair in va.pairs):
            raise ValidationError(f"Views {id_a!r} and {id_b!r} are already a stereo pair")

        edge = Edge(va=va, vb=vb, quality3d=quality3d)
        va.pairs.append(edge)
        vb.pairs.append(edge)
        self._edges.append(edge)
        return edge

    def index_of(self, view_id: str) -> int:
        """Dense index of a view id"""
        try:
            return self.vertices[view_id].index
        except KeyError as e:
            raise ValidationError(f"Unknown view id {view_id!r}") from e

    def vertex_at(self, index: int) -> Vertex:
        return self._by_index[index]

    def edges(self) -> List[Edge]:
        """Every edge once, in insertion order"""
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._by_index)

    def __contains__(self, view_id: str) -> bool:
        return view_id in self.vertices

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self._by_index)

    def validate(self) -> ValidationResult:
        """
        Check the graph for problems which would silently degrade the cloud.

        Returns:
            ValidationResult with errors for invalid edges and warnings for
            views that can never be part of a stereo pair
        """
        result = ValidationResult()

        for edge in self._edges:
            try:
                check_quality3d(edge.quality3d)
            except ValidationError as e:
                result.add_error(f"{edge}: {e}")

        # A pair of views has at most one edge
        for vertex in self._by_index:
            others = [edge.other(vertex) for edge in vertex.pairs]
            for other in {o.id: o for o in others}.values():
                if other.index > vertex.index and others.count(other) > 1:
                    result.add_error(f"Views {vertex.id!r} and {other.id!r} are paired more than once")

        isolated = [v.id for v in self._by_index if not v.pairs]
        if isolated:
            result.add_warning(f"{len(isolated)} views have no stereo pairs: {isolated[:10]}")

        result.stats = {
            'num_views': len(self._by_index),
            'num_pairs': len(self._edges),
            'num_isolated': len(isolated),
        }
        return result
