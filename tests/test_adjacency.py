"""Tests for quadtree adjacency resolution."""
import pytest
from pbnvec.adjacency import (
    NO_NEIGHBOR,
    TRIVIAL_ADJACENCIES,
    Adjacencies,
    find_adjacencies,
    flatten_adjacencies,
    sanity_check_adjacencies,
)
from pbnvec.position import SIDES, Position, opposite
from pbnvec.quadtree import (
    DegenerateRegion,
    HeterogeneousRegion,
    HomogeneousRegion,
    Region,
    build_tree,
    flatten_to_homogeneous,
)
from pbnvec.types import AdjacencyError, Color, PreconditionError

RED = Color(255, 0, 0)
BLUE = Color(0, 0, 255)


def checkerboard(x, y):
    return RED if (x + y) % 2 == 0 else BLUE


def half_checkered(x, y):
    """Left half solid red, right half a checkerboard."""
    return RED if x < 2 else checkerboard(x, y)


def build(accessor, width, height):
    tree = build_tree(accessor, Region(0, 0, width, height))
    return tree, find_adjacencies(tree)


def leaf_at(adjacency_map, x, y):
    for leaf in adjacency_map:
        r = leaf.region
        if r.x <= x < r.right and r.y <= y < r.bottom:
            return leaf
    raise AssertionError(f"No leaf covers ({x}, {y})")


def contains(outer: Region, inner: Region) -> bool:
    return (
        outer.x <= inner.x and inner.right <= outer.right
        and outer.y <= inner.y and inner.bottom <= outer.bottom
    )


class TestAdjacencies:
    """Test the side -> neighbor mapping."""

    def test_from_entries_requires_all_sides(self):
        with pytest.raises(PreconditionError):
            Adjacencies.from_entries([(Position.TOP, NO_NEIGHBOR)])

    def test_from_entries_rejects_corners(self):
        entries = [(side, NO_NEIGHBOR) for side in SIDES[:3]] + [(Position.TOP_LEFT, NO_NEIGHBOR)]
        with pytest.raises(PreconditionError):
            Adjacencies.from_entries(entries)

    def test_trivial_adjacencies(self):
        assert list(TRIVIAL_ADJACENCIES) == list(SIDES)
        assert all(TRIVIAL_ADJACENCIES[side] is NO_NEIGHBOR for side in SIDES)


class TestFindAdjacencies:
    """Test resolving the neighbors of each leaf."""

    def test_single_color(self):
        tree, adjacency_map = build(lambda x, y: RED, 6, 6)
        assert list(adjacency_map) == [tree]
        assert all(adjacency_map[tree][side] is NO_NEIGHBOR for side in SIDES)
        sanity_check_adjacencies(tree, adjacency_map, 6, 6)

    def test_quadrant_blocks(self):
        tree, adjacency_map = build(lambda x, y: (x // 2 + y // 2) % 2, 4, 4)
        assert isinstance(tree, HeterogeneousRegion)
        for corner in (Position.TOP_LEFT, Position.TOP_RIGHT,
                       Position.BOTTOM_LEFT, Position.BOTTOM_RIGHT):
            assert isinstance(tree[corner], HomogeneousRegion)
        assert adjacency_map[tree[Position.TOP_LEFT]][Position.RIGHT] is tree[Position.TOP_RIGHT]
        assert adjacency_map[tree[Position.TOP_LEFT]][Position.BOTTOM] is tree[Position.BOTTOM_LEFT]
        assert adjacency_map[tree[Position.TOP_LEFT]][Position.LEFT] is NO_NEIGHBOR
        sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_covers_every_leaf(self):
        tree, adjacency_map = build(checkerboard, 5, 3)
        leaves = flatten_to_homogeneous(tree)
        assert set(adjacency_map) == set(leaves)

    def test_checkerboard_neighbors(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        assert len(adjacency_map) == 16
        leaf = leaf_at(adjacency_map, 1, 2)
        adjacencies = adjacency_map[leaf]
        assert adjacencies[Position.TOP].region == Region(1, 1, 1, 1)
        assert adjacencies[Position.RIGHT].region == Region(2, 2, 1, 1)
        assert adjacencies[Position.BOTTOM].region == Region(1, 3, 1, 1)
        assert adjacencies[Position.LEFT].region == Region(0, 2, 1, 1)

        corner = leaf_at(adjacency_map, 0, 0)
        assert adjacency_map[corner][Position.TOP] is NO_NEIGHBOR
        assert adjacency_map[corner][Position.LEFT] is NO_NEIGHBOR
        sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_equal_size_neighbors_are_symmetric(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        for leaf, adjacencies in adjacency_map.items():
            for side in SIDES:
                neighbor = adjacencies[side]
                if neighbor is NO_NEIGHBOR:
                    continue
                assert adjacency_map[neighbor][opposite(side)] is leaf

    def test_finer_leaves_resolve_to_coarser_neighbor(self):
        tree, adjacency_map = build(half_checkered, 4, 4)
        sanity_check_adjacencies(tree, adjacency_map, 4, 4)

        coarse = leaf_at(adjacency_map, 0, 0)
        assert coarse.region == Region(0, 0, 2, 2)
        # The far side is subdivided further, so the neighbor is its parent.
        assert isinstance(adjacency_map[coarse][Position.RIGHT], HeterogeneousRegion)

        fine = leaf_at(adjacency_map, 2, 1)
        assert adjacency_map[fine][Position.LEFT] is coarse

    def test_neighbor_of_neighbor_contains_leaf(self):
        def accessor(x, y):
            return RED if (x // 3 + y) % 3 == 0 else BLUE

        tree, adjacency_map = build(accessor, 7, 5)
        sanity_check_adjacencies(tree, adjacency_map, 7, 5)
        for leaf, adjacencies in adjacency_map.items():
            for side in SIDES:
                neighbor = adjacencies[side]
                if not isinstance(neighbor, HomogeneousRegion):
                    continue
                back = adjacency_map[neighbor][opposite(side)]
                assert back is not NO_NEIGHBOR
                assert contains(back.region, leaf.region)

    def test_degenerate_siblings_are_skipped(self):
        # Width 3 leaves empty right-hand children on the 1-wide column.
        tree, adjacency_map = build(checkerboard, 3, 3)
        sanity_check_adjacencies(tree, adjacency_map, 3, 3)
        for adjacencies in adjacency_map.values():
            for side in SIDES:
                assert not isinstance(adjacencies[side], DegenerateRegion)


class TestSanityCheck:
    """Test adjacency map validation."""

    def test_interior_leaf_without_neighbor(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        adjacency_map[leaf_at(adjacency_map, 1, 1)] = TRIVIAL_ADJACENCIES
        with pytest.raises(AdjacencyError):
            sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_missing_leaf(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        del adjacency_map[leaf_at(adjacency_map, 3, 3)]
        with pytest.raises(AdjacencyError):
            sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_degenerate_neighbor(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        leaf = leaf_at(adjacency_map, 0, 0)
        entries = dict(adjacency_map[leaf])
        entries[Position.RIGHT] = DegenerateRegion(Region(1, 0, 0, 1))
        adjacency_map[leaf] = Adjacencies(entries)
        with pytest.raises(AdjacencyError):
            sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_neighbor_that_does_not_touch(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        leaf = leaf_at(adjacency_map, 0, 0)
        entries = dict(adjacency_map[leaf])
        entries[Position.RIGHT] = leaf_at(adjacency_map, 3, 0)
        adjacency_map[leaf] = Adjacencies(entries)
        with pytest.raises(AdjacencyError):
            sanity_check_adjacencies(tree, adjacency_map, 4, 4)

    def test_non_homogeneous_key(self):
        tree, adjacency_map = build(checkerboard, 4, 4)
        adjacency_map[tree] = TRIVIAL_ADJACENCIES
        with pytest.raises(AdjacencyError):
            sanity_check_adjacencies(tree, adjacency_map, 4, 4)


class TestFlattenAdjacencies:
    """Test listing each adjacency once."""

    def test_single_color_has_no_pairs(self):
        _, adjacency_map = build(lambda x, y: RED, 4, 4)
        assert flatten_adjacencies(adjacency_map) == []

    def test_checkerboard_pairs(self):
        _, adjacency_map = build(checkerboard, 4, 4)
        pairs = flatten_adjacencies(adjacency_map)
        assert len(pairs) == 24
        assert {pair.side for pair in pairs} == {Position.RIGHT, Position.BOTTOM}
        assert len({(id(p.source), id(p.target)) for p in pairs}) == 24

    def test_pairs_run_from_the_shorter_edge(self):
        _, adjacency_map = build(half_checkered, 4, 4)
        coarse = leaf_at(adjacency_map, 0, 0)
        pairs = [
            pair for pair in flatten_adjacencies(adjacency_map)
            if pair.target is coarse and pair.side == Position.LEFT
        ]
        assert sorted(pair.source.region.y for pair in pairs) == [0, 1]
