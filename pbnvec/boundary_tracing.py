"""Decomposition of the boundary point graph into chains and loops."""
import logging
from collections import deque
from typing import Iterable, List, Set

from pbnvec.point_graph import PointGraph
from pbnvec.simplify import simplify_polyline
from pbnvec.types import BoundaryPiece, Point

logger = logging.getLogger(__name__)


def compute_junction_points(graph: PointGraph) -> List[Point]:
    """
    Points where chains start and end.

    Points joining three or more edges are junctions by definition; points
    with a single edge are dead ends and count too.
    """
    return [point for point in graph.points if graph.degree(point) != 2]


def compute_boundary_chains(
    full_graph: PointGraph,
    junction_points: Iterable[Point]
) -> List[BoundaryPiece]:
    """
    Split the graph into simple chains between junctions, then closed loops.

    The input graph is not modified; a clone is consumed edge by edge, so each
    edge lands in exactly one chain.

    Returns:
        Open (junction-to-junction) chains first, then junction-free loops
    """
    graph = full_graph.clone()
    junctions: Set[Point] = set(junction_points)

    chains = []
    for start in junctions_in_order(junctions, full_graph):
        # Every chain leaving this junction, including ones that come back.
        while graph.has_point(start):
            chain = deque([start])
            while True:
                chain.append(_extract_next_point(chain[-1], graph))
                if chain[-1] in junctions:
                    break
            chains.append(chain)

    loops = []
    while not graph.is_empty:
        start = graph.any_point()
        loop = deque([start])
        while True:
            loop.append(_extract_next_point(loop[-1], graph))
            if loop[-1] == start:
                break
        loops.append(loop)

    logger.info(f"Traced {len(chains)} chains and {len(loops)} closed loops")
    return (
        [BoundaryPiece(chain=chain, is_loop=chain[0] == chain[-1]) for chain in chains]
        + [BoundaryPiece(chain=loop, is_loop=True) for loop in loops]
    )


def junctions_in_order(junctions: Set[Point], graph: PointGraph) -> List[Point]:
    """Junctions in graph insertion order, so tracing is deterministic."""
    return [point for point in graph.points if point in junctions]


def _extract_next_point(point: Point, graph: PointGraph) -> Point:
    next_point = graph.adjacent_point(point)
    graph.remove_edge(point, next_point)
    return next_point


def simplify_pieces(
    pieces: Iterable[BoundaryPiece],
    tolerance: float,
    high_quality: bool = True
) -> None:
    """Fill in ``simplified_chain`` for each piece."""
    for piece in pieces:
        piece.simplified_chain = deque(
            simplify_polyline(list(piece.chain), tolerance, high_quality)
        )


def trace_boundaries(
    graph: PointGraph,
    tolerance: float,
    high_quality: bool = True
) -> List[BoundaryPiece]:
    """Trace every chain and loop in ``graph`` and simplify each one."""
    junctions = compute_junction_points(graph)
    pieces = compute_boundary_chains(graph, junctions)
    simplify_pieces(pieces, tolerance, high_quality)
    return pieces
