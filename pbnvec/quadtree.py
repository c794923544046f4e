"""Region quadtree: recursive partition of an image into uniform-color leaves."""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

import numpy as np

from pbnvec.position import CORNERS, Position
from pbnvec.types import PreconditionError

logger = logging.getLogger(__name__)

Accessor = Callable[[int, int], Any]


@dataclass(frozen=True)
class Region:
    """Axis-aligned integer rectangle."""
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise PreconditionError(
                f"Region dimensions must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def subdivide(self) -> Dict[Position, "Region"]:
        """
        Split into four sub-regions keyed by corner.

        The top/left halves take ceil(n/2) so the four always tile the parent,
        including odd dimensions (some sub-regions may then have zero area).
        """
        left_width = math.ceil(self.width / 2)
        top_height = math.ceil(self.height / 2)
        right_width = self.width - left_width
        bottom_height = self.height - top_height

        return {
            Position.TOP_LEFT: Region(self.x, self.y, left_width, top_height),
            Position.TOP_RIGHT: Region(self.x + left_width, self.y, right_width, top_height),
            Position.BOTTOM_LEFT: Region(self.x, self.y + top_height, left_width, bottom_height),
            Position.BOTTOM_RIGHT: Region(
                self.x + left_width, self.y + top_height, right_width, bottom_height
            ),
        }


# Nodes compare by identity so they can key the adjacency side table.

@dataclass(frozen=True, eq=False)
class HomogeneousRegion:
    """Leaf whose whole region shares one property value."""
    region: Region
    properties: Any


@dataclass(frozen=True, eq=False)
class HeterogeneousRegion:
    """Interior node with four children keyed by corner."""
    region: Region
    children: Dict[Position, "QuadTree"]

    def __post_init__(self):
        if set(self.children) != set(CORNERS):
            raise PreconditionError(
                f"Heterogeneous region needs exactly the four corners, got "
                f"{sorted(p.name for p in self.children)}"
            )

    def child(self, corner: Position) -> "QuadTree":
        return self.children[corner]

    __getitem__ = child


@dataclass(frozen=True, eq=False)
class DegenerateRegion:
    """Zero-area placeholder."""
    region: Region


QuadTree = Union[HomogeneousRegion, HeterogeneousRegion, DegenerateRegion]


def _as_accessor(atoms_or_accessor) -> Accessor:
    if callable(atoms_or_accessor):
        return atoms_or_accessor
    if isinstance(atoms_or_accessor, np.ndarray):
        return lambda x, y: atoms_or_accessor[x, y]
    return lambda x, y: atoms_or_accessor[x][y]


def build_tree(
    atoms_or_accessor: Union[Accessor, np.ndarray, List[List[Any]]],
    region: Region,
    workers: int = 1
) -> QuadTree:
    """
    Build the quadtree covering ``region``.

    Args:
        atoms_or_accessor: Either a ``(x, y) -> value`` callable, or a grid
            indexed ``[x][y]`` (nested sequences or a 2D array)
        region: Region to cover
        workers: If > 1, the four root subtrees are built on a thread pool

    Returns:
        Root node covering exactly ``region``
    """
    accessor = _as_accessor(atoms_or_accessor)

    if workers <= 1 or region.width <= 1 and region.height <= 1:
        return _build(accessor, region)

    sub_regions = region.subdivide()
    with ThreadPoolExecutor(max_workers=min(workers, len(CORNERS))) as executor:
        futures = {
            corner: executor.submit(_build, accessor, sub_regions[corner])
            for corner in CORNERS
        }
        children = {corner: future.result() for corner, future in futures.items()}
    return _join(region, children)


def _build(accessor: Accessor, region: Region) -> QuadTree:
    if region.is_empty:
        return DegenerateRegion(region)
    if region.width == 1 and region.height == 1:
        return HomogeneousRegion(region, accessor(region.x, region.y))

    sub_regions = region.subdivide()
    children = {corner: _build(accessor, sub_regions[corner]) for corner in CORNERS}
    return _join(region, children)


def _join(region: Region, children: Dict[Position, QuadTree]) -> QuadTree:
    properties = properties_if_homogeneous(children)
    if properties is not None:
        return HomogeneousRegion(region, properties)
    return HeterogeneousRegion(region, children)


def properties_if_homogeneous(children: Dict[Position, QuadTree]) -> Optional[Any]:
    """
    The shared property value if the four children collapse into one leaf.

    The top-left child is never degenerate for a non-empty parent, so it must
    be homogeneous; every other child must be degenerate or share its value.
    """
    top_left = children[Position.TOP_LEFT]
    if not isinstance(top_left, HomogeneousRegion):
        return None
    for corner in CORNERS[1:]:
        child = children[corner]
        if isinstance(child, DegenerateRegion):
            continue
        if not isinstance(child, HomogeneousRegion):
            return None
        if child.properties != top_left.properties:
            return None
    return top_left.properties


def traverse_pre_order(
    tree: QuadTree,
    on_heterogeneous: Callable[[HeterogeneousRegion], None] = lambda node: None,
    on_homogeneous: Callable[[HomogeneousRegion], None] = lambda node: None,
    on_degenerate: Callable[[DegenerateRegion], None] = lambda node: None
) -> None:
    """Visit every node, parents before children, dispatching on variant."""
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, HeterogeneousRegion):
            on_heterogeneous(node)
            # Reversed so corners are visited in CORNERS order.
            stack.extend(node[corner] for corner in reversed(CORNERS))
        elif isinstance(node, HomogeneousRegion):
            on_homogeneous(node)
        elif isinstance(node, DegenerateRegion):
            on_degenerate(node)
        else:
            raise PreconditionError(f"Not a quadtree node: {node!r}")


def iter_leaves(tree: QuadTree) -> Iterator[HomogeneousRegion]:
    """Yield homogeneous leaves in pre-order."""
    leaves: List[HomogeneousRegion] = []
    traverse_pre_order(tree, on_homogeneous=leaves.append)
    return iter(leaves)


def flatten_to_homogeneous(tree: QuadTree) -> List[HomogeneousRegion]:
    return list(iter_leaves(tree))


def count_nodes(tree: QuadTree) -> Dict[str, int]:
    """Count nodes per variant."""
    counts = {"heterogeneous": 0, "homogeneous": 0, "degenerate": 0}

    def bump(key):
        def inner(_node):
            counts[key] += 1
        return inner

    traverse_pre_order(
        tree,
        on_heterogeneous=bump("heterogeneous"),
        on_homogeneous=bump("homogeneous"),
        on_degenerate=bump("degenerate"),
    )
    return counts
