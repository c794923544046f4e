"""Undirected adjacency-list graph over boundary points."""
import logging
from typing import Dict, Iterable, List, Optional

from pbnvec.types import BoundarySegment, GraphConsistencyError, Point, Segment

logger = logging.getLogger(__name__)


class PointGraph:
    """
    Undirected graph keyed by Point value.

    Points compare structurally, so equal coordinates always map to the same
    vertex. Vertices with no remaining edges are dropped, which lets tracing
    consume the graph edge by edge until it is empty.
    """

    def __init__(self):
        self._adjacency: Dict[Point, List[Point]] = {}

    @property
    def is_empty(self) -> bool:
        return not self._adjacency

    @property
    def points(self) -> List[Point]:
        return list(self._adjacency)

    @property
    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self._adjacency.values()) // 2

    def any_point(self) -> Point:
        """An arbitrary point that still has edges."""
        if self.is_empty:
            raise GraphConsistencyError("Graph is empty")
        return next(iter(self._adjacency))

    def has_point(self, point: Point) -> bool:
        return point in self._adjacency

    def degree(self, point: Point) -> int:
        return len(self._adjacency.get(point, ()))

    def adjacent_point(self, point: Point) -> Point:
        """The first remaining neighbor of ``point``."""
        neighbors = self._adjacency.get(point)
        if not neighbors:
            raise GraphConsistencyError(f"No remaining edges at {point.to_key()}")
        return neighbors[0]

    def add_edge(self, start: Point, end: Point) -> None:
        self._adjacency.setdefault(start, []).append(end)
        self._adjacency.setdefault(end, []).append(start)

    def remove_edge(self, start: Point, end: Point) -> None:
        if start not in self._adjacency:
            return
        self._remove_directed_edge(start, end)
        self._remove_directed_edge(end, start)

    def _remove_directed_edge(self, start: Point, end: Point) -> None:
        neighbors = self._adjacency.get(start)
        if not neighbors or end not in neighbors:
            raise GraphConsistencyError(
                f"No edge from {start.to_key()} to {end.to_key()}"
            )
        neighbors.remove(end)
        if not neighbors:
            del self._adjacency[start]

    def add_segments_as_edges(
        self,
        segments: Iterable[Segment],
        subdivision_length: Optional[int] = None
    ) -> None:
        """
        Add each axis-aligned segment as a run of edges.

        Segments longer than ``subdivision_length`` are split at evenly spaced
        integer points so later curve fitting has samples along long runs.
        """
        for segment in segments:
            points = subdivide_segment(segment, subdivision_length)
            for start, end in zip(points, points[1:]):
                self.add_edge(start, end)

    def clone(self) -> "PointGraph":
        """Deep copy of the adjacency lists."""
        clone = PointGraph()
        clone._adjacency = {point: list(neighbors) for point, neighbors in self._adjacency.items()}
        return clone

    def sanity_check(self) -> None:
        """
        Raises:
            GraphConsistencyError: For an isolated vertex, duplicate neighbor
                entries, or a missing reverse edge
        """
        for point, neighbors in self._adjacency.items():
            if not neighbors:
                raise GraphConsistencyError(f"Missing adjacencies for {point.to_key()}")
            if len(neighbors) != len(set(neighbors)):
                raise GraphConsistencyError(f"Duplicate adjacencies for {point.to_key()}")
            for other in neighbors:
                if point not in self._adjacency.get(other, ()):
                    raise GraphConsistencyError(
                        f"No reverse adjacency between {point.to_key()} and {other.to_key()}"
                    )

    def __len__(self) -> int:
        return len(self._adjacency)

    def __repr__(self) -> str:
        return f"PointGraph(points={len(self)}, edges={self.edge_count})"


def subdivide_segment(segment: Segment, subdivision_length: Optional[int] = None) -> List[Point]:
    """Endpoints of ``segment`` plus evenly spaced intermediate points."""
    start, end = segment.start, segment.end
    length = segment.length
    if not subdivision_length or length <= subdivision_length:
        return [start, end]

    pieces = -(-length // subdivision_length)
    dx = (end.x - start.x) // length
    dy = (end.y - start.y) // length
    points = []
    for k in range(pieces + 1):
        offset = k * length // pieces
        points.append(Point(start.x + dx * offset, start.y + dy * offset))
    return points


def compute_from_boundary_segments(
    boundary_segments: Iterable[BoundarySegment],
    subdivision_length: Optional[int] = None
) -> PointGraph:
    """Build and validate the point graph for a set of boundary segments."""
    graph = PointGraph()
    graph.add_segments_as_edges(
        (boundary.segment for boundary in boundary_segments),
        subdivision_length=subdivision_length,
    )
    graph.sanity_check()
    logger.debug(f"Built {graph!r}")
    return graph
