"""Side-neighbor resolution for quadtree leaves."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from pbnvec.position import (
    CORNERS,
    SIDES,
    Position,
    after_moving_towards,
    is_rotationally_adjacent_to,
    opposite,
)
from pbnvec.quadtree import (
    DegenerateRegion,
    HeterogeneousRegion,
    HomogeneousRegion,
    QuadTree,
    Region,
    flatten_to_homogeneous,
)
from pbnvec.types import AdjacencyError, PreconditionError

logger = logging.getLogger(__name__)


class SpecialAdjacency(Enum):
    """Adjacency markers that are not tree nodes."""
    NONE = "none"


NO_NEIGHBOR = SpecialAdjacency.NONE

Adjacency = Union[QuadTree, SpecialAdjacency]


class Adjacencies(Mapping):
    """Immutable side -> neighbor mapping covering exactly the four sides."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[Position, Adjacency]):
        self._entries = dict(entries)

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[Position, Adjacency]]) -> "Adjacencies":
        entries = list(entries)
        sides = [side for side, _ in entries]
        if sorted(sides) != sorted(SIDES):
            raise PreconditionError(
                f"Invalid or missing Position in entries: {[Position(s).name for s in sides]}"
            )
        return cls(dict(entries))

    def __getitem__(self, side: Position) -> Adjacency:
        return self._entries[side]

    def __iter__(self) -> Iterator[Position]:
        return iter(SIDES)

    def __len__(self) -> int:
        return len(SIDES)

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{side.name}={_describe(self._entries[side])}" for side in SIDES
        )
        return f"Adjacencies({parts})"


TRIVIAL_ADJACENCIES = Adjacencies({side: NO_NEIGHBOR for side in SIDES})

AdjacencyMap = Dict[HomogeneousRegion, Adjacencies]


@dataclass(frozen=True)
class AdjacencyPair:
    """A homogeneous leaf, one of its homogeneous neighbors, and the side between."""
    source: HomogeneousRegion
    target: HomogeneousRegion
    side: Position


def _describe(adjacency: Adjacency) -> str:
    if adjacency is NO_NEIGHBOR:
        return "none"
    region = adjacency.region
    return (
        f"{type(adjacency).__name__}({region.x},{region.y},"
        f"{region.width}x{region.height})"
    )


def find_adjacencies(tree: QuadTree) -> AdjacencyMap:
    """
    Resolve the four side-neighbors of every homogeneous leaf.

    Adjacency is carried top-down: each child derives its neighbors from its
    siblings and from the parent's neighbors, so the tree is walked once.
    A neighbor is the node of the same size or larger across that side; when
    the far side is subdivided more finely the neighbor is heterogeneous and
    its own leaves resolve back to this leaf.

    Returns:
        Dict mapping each homogeneous leaf (by identity) to its Adjacencies
    """
    adjacency_map: AdjacencyMap = {}
    stack: List[Tuple[QuadTree, Adjacencies]] = [(tree, TRIVIAL_ADJACENCIES)]
    while stack:
        node, incoming = stack.pop()
        if isinstance(node, DegenerateRegion):
            continue
        if isinstance(node, HomogeneousRegion):
            adjacency_map[node] = incoming
            continue
        for corner in CORNERS:
            child_adjacencies = Adjacencies.from_entries(
                (side, _subtree_adjacency_on_side(node, corner, incoming, side))
                for side in SIDES
            )
            stack.append((node[corner], child_adjacencies))

    logger.debug(f"Resolved adjacencies for {len(adjacency_map)} leaves")
    return adjacency_map


def _subtree_adjacency_on_side(
    tree: HeterogeneousRegion,
    subtree_corner: Position,
    parent_adjacencies: Adjacencies,
    side: Position
) -> Adjacency:
    # For the TOP_LEFT child, TOP and LEFT are external sides shared with
    # the parent; RIGHT and BOTTOM face siblings inside the parent.
    if is_rotationally_adjacent_to(side, subtree_corner):
        return _external_adjacency_on_side(subtree_corner, parent_adjacencies, side)

    adjacent_corner = after_moving_towards(subtree_corner, side)
    sibling = tree[adjacent_corner]
    if not isinstance(sibling, DegenerateRegion):
        return sibling

    # A degenerate sibling has no extent, so the neighbor lies past it,
    # outside the parent, as seen from the sibling's corner.
    return _external_adjacency_on_side(adjacent_corner, parent_adjacencies, side)


def _external_adjacency_on_side(
    starting_corner: Position,
    parent_adjacencies: Adjacencies,
    side: Position
) -> Adjacency:
    parent_adjacency = parent_adjacencies[side]
    if parent_adjacency is NO_NEIGHBOR or not isinstance(parent_adjacency, HeterogeneousRegion):
        return parent_adjacency

    # Descend one level: the LEFT neighbor of a TOP_LEFT child is the
    # TOP_RIGHT child of the parent's LEFT neighbor.
    first_corner = after_moving_towards(starting_corner, side)
    candidate = parent_adjacency[first_corner]
    if not isinstance(candidate, DegenerateRegion):
        return candidate
    # Moving toward the same side twice comes back to the starting corner.
    return parent_adjacency[starting_corner]


def sanity_check_adjacencies(
    tree: QuadTree,
    adjacency_map: AdjacencyMap,
    image_width: int,
    image_height: int
) -> None:
    """
    Validate an adjacency map against its tree.

    Raises:
        AdjacencyError: On a non-homogeneous key, a missing leaf, a misplaced
            image-edge marker, a degenerate neighbor, or a neighbor that does
            not abut its leaf
    """
    for leaf, adjacencies in adjacency_map.items():
        if not isinstance(leaf, HomogeneousRegion):
            raise AdjacencyError(
                f"Invalid ({type(leaf).__name__}) tree in adjacency map: {leaf.region}"
            )
        for side in SIDES:
            _check_side(leaf.region, side, adjacencies[side], image_width, image_height)

    for leaf in flatten_to_homogeneous(tree):
        if leaf not in adjacency_map:
            raise AdjacencyError(f"Homogeneous tree missing from adjacency map: {leaf.region}")


def _check_side(
    region: Region,
    side: Position,
    adjacency: Adjacency,
    image_width: int,
    image_height: int
) -> None:
    name = side.name.lower()
    if adjacency is NO_NEIGHBOR:
        at_edge = {
            Position.TOP: region.y == 0,
            Position.LEFT: region.x == 0,
            Position.BOTTOM: region.bottom == image_height,
            Position.RIGHT: region.right == image_width,
        }[side]
        if not at_edge:
            raise AdjacencyError(f"No neighbor at {name} of {region}")
        return

    if isinstance(adjacency, DegenerateRegion):
        raise AdjacencyError(
            f"Degenerate adjacency to {name} of {region} which is {adjacency.region}"
        )

    other = adjacency.region
    if side in (Position.TOP, Position.BOTTOM):
        span_ok = other.x <= region.x and region.right <= other.right
        touching = region.y == other.bottom if side == Position.TOP else region.bottom == other.y
    else:
        span_ok = other.y <= region.y and region.bottom <= other.bottom
        touching = region.x == other.right if side == Position.LEFT else region.right == other.x
    if not (span_ok and touching):
        raise AdjacencyError(f"Adjacency mismatch to {name} of {region} which is {other}")


def flatten_adjacencies(adjacency_map: AdjacencyMap) -> List[AdjacencyPair]:
    """
    List each homogeneous-to-homogeneous adjacency once.

    Pairs go from the region with the shorter extent along the shared edge.
    Between equal extents only the RIGHT and BOTTOM directions are kept,
    unless the neighbor does not resolve back to this leaf (its own neighbor
    on that side is a coarser ancestor), in which case this is the only
    direction that sees the pair.
    """
    pairs = []
    for leaf, adjacencies in adjacency_map.items():
        for side in SIDES:
            neighbor = adjacencies[side]
            if neighbor is NO_NEIGHBOR or not isinstance(neighbor, HomogeneousRegion):
                continue
            leaf_span = _span_along(leaf.region, side)
            neighbor_span = _span_along(neighbor.region, side)
            if leaf_span > neighbor_span:
                continue
            if leaf_span == neighbor_span and side not in (Position.RIGHT, Position.BOTTOM):
                reverse = adjacency_map.get(neighbor)
                if reverse is not None and reverse[opposite(side)] is leaf:
                    continue
            pairs.append(AdjacencyPair(source=leaf, target=neighbor, side=side))
    return pairs


def _span_along(region: Region, side: Position) -> int:
    """Length of the region's edge on ``side``."""
    return region.width if side in (Position.TOP, Position.BOTTOM) else region.height
