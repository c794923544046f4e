"""Tests for the boundary point graph."""
import pytest
from pbnvec.point_graph import PointGraph, compute_from_boundary_segments, subdivide_segment
from pbnvec.types import BoundarySegment, Color, GraphConsistencyError, Point, Segment

RED = Color(255, 0, 0)
BLUE = Color(0, 0, 255)


class TestPointGraph:
    """Test graph editing."""

    def test_add_and_remove_edge(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(1, 0))
        graph.add_edge(Point(1, 0), Point(1, 1))
        assert graph.degree(Point(1, 0)) == 2
        assert graph.edge_count == 2
        graph.sanity_check()

        graph.remove_edge(Point(0, 0), Point(1, 0))
        assert not graph.has_point(Point(0, 0))
        assert graph.degree(Point(1, 0)) == 1
        assert graph.adjacent_point(Point(1, 0)) == Point(1, 1)
        assert graph.edge_count == 1

    def test_removing_last_edge_empties_graph(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(0, 1))
        graph.remove_edge(Point(0, 1), Point(0, 0))
        assert graph.is_empty
        with pytest.raises(GraphConsistencyError):
            graph.any_point()

    def test_remove_missing_edge(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(0, 1))
        with pytest.raises(GraphConsistencyError):
            graph.remove_edge(Point(0, 0), Point(5, 5))

    def test_adjacent_point_without_edges(self):
        with pytest.raises(GraphConsistencyError):
            PointGraph().adjacent_point(Point(3, 3))

    def test_points_are_value_keyed(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(0, 1))
        graph.add_edge(Point.from_key("(0,1)"), Point(1, 1))
        assert graph.degree(Point(0, 1)) == 2
        assert len(graph) == 3

    def test_clone_is_independent(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(0, 1))
        clone = graph.clone()
        clone.remove_edge(Point(0, 0), Point(0, 1))
        assert clone.is_empty
        assert graph.edge_count == 1

    def test_sanity_check_duplicate_neighbors(self):
        graph = PointGraph()
        graph.add_edge(Point(0, 0), Point(0, 1))
        graph.add_edge(Point(0, 0), Point(0, 1))
        with pytest.raises(GraphConsistencyError):
            graph.sanity_check()


class TestSubdivision:
    """Test splitting long segments."""

    def test_short_segment_unchanged(self):
        segment = Segment(Point(0, 0), Point(5, 0))
        assert subdivide_segment(segment, 8) == [Point(0, 0), Point(5, 0)]

    def test_long_segment_split_evenly(self):
        segment = Segment(Point(0, 0), Point(0, 12))
        assert subdivide_segment(segment, 8) == [Point(0, 0), Point(0, 6), Point(0, 12)]

    def test_split_points_are_integers(self):
        segment = Segment(Point(3, 1), Point(20, 1))
        points = subdivide_segment(segment, 4)
        assert points[0] == Point(3, 1)
        assert points[-1] == Point(20, 1)
        assert len(points) == 6
        assert all(isinstance(p.x, int) for p in points)
        assert all(b.x - a.x in (3, 4) for a, b in zip(points, points[1:]))

    def test_no_subdivision_length(self):
        segment = Segment(Point(0, 0), Point(100, 0))
        assert subdivide_segment(segment, None) == [Point(0, 0), Point(100, 0)]


class TestComputeFromBoundarySegments:
    """Test building the graph from boundary segments."""

    def test_square_loop(self):
        segments = [
            BoundarySegment(Segment(Point(2, 2), Point(4, 2)), BLUE, RED),
            BoundarySegment(Segment(Point(2, 4), Point(4, 4)), RED, BLUE),
            BoundarySegment(Segment(Point(2, 2), Point(2, 4)), BLUE, RED),
            BoundarySegment(Segment(Point(4, 2), Point(4, 4)), RED, BLUE),
        ]
        graph = compute_from_boundary_segments(segments, subdivision_length=8)
        assert len(graph) == 4
        assert graph.edge_count == 4
        assert all(graph.degree(p) == 2 for p in graph.points)

    def test_subdivided_edges(self):
        segments = [BoundarySegment(Segment(Point(0, 0), Point(0, 20)), RED, BLUE)]
        graph = compute_from_boundary_segments(segments, subdivision_length=8)
        assert graph.edge_count == 3
        assert graph.has_point(Point(0, 6))
