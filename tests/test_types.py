"""Tests for core value types."""
import pytest
import numpy as np
from pbnvec.fitting.curves import first_derivative
from pbnvec.types import BezierCurve, Color, Point, PreconditionError, Segment


class TestValueTypes:
    """Test color and point identity."""

    def test_color_hex(self):
        assert Color(255, 16, 0).to_hex() == "ff1000"
        assert Color.from_hex("#ff1000") == Color(255, 16, 0)
        with pytest.raises(PreconditionError):
            Color.from_hex("fff")

    def test_equal_colors_hash_equal(self):
        assert len({Color(1, 2, 3), Color(1, 2, 3)}) == 1

    def test_point_key(self):
        assert Point(3, -4).to_key() == "(3,-4)"
        assert Point.from_key("(3,-4)") == Point(3, -4)
        with pytest.raises(PreconditionError):
            Point.from_key("3,4")
        with pytest.raises(PreconditionError):
            Point.from_key("(a,b)")

    def test_segment_geometry(self):
        segment = Segment(Point(2, 5), Point(2, 9))
        assert segment.is_vertical
        assert not segment.is_horizontal
        assert segment.length == 4


class TestBezierCurve:
    """Test curve evaluation."""

    def test_endpoints(self):
        curve = BezierCurve((0, 0), (1, 2), (3, 2), (4, 0))
        np.testing.assert_allclose(curve.point_at(0.0), [0, 0])
        np.testing.assert_allclose(curve.point_at(1.0), [4, 0])
        assert curve.point_at(np.linspace(0, 1, 5)).shape == (5, 2)

    def test_derivative_at_ends(self):
        curve = BezierCurve((0, 0), (1, 2), (3, 2), (4, 0))
        velocity = first_derivative(curve.as_array(), np.array([0.0, 1.0]))
        np.testing.assert_allclose(velocity[0], [3, 6])
        np.testing.assert_allclose(velocity[-1], [3, -6])
