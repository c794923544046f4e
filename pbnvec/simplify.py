"""Polyline simplification using Douglas-Peucker algorithm."""
from typing import List, Sequence

import cv2
import numpy as np

from pbnvec.types import Point


def simplify_polyline(
    points: Sequence[Point],
    tolerance: float,
    high_quality: bool = True
) -> List[Point]:
    """Simplify an open polyline, keeping its first and last point.

    High quality runs Douglas-Peucker directly. Otherwise a cheaper radial
    distance pass thins the points first, which can shift vertices slightly.
    The result is always a subsequence of ``points``.

    Args:
        points: Ordered points; a closed loop repeats its first point at the end
        tolerance: Maximum distance (pixels) a dropped point may lie from the result
        high_quality: Skip the radial distance pre-pass

    Returns:
        Simplified points
    """
    points = list(points)
    if len(points) < 3 or tolerance <= 0:
        return points

    if points[0] == points[-1]:
        # A closed loop has a zero-length baseline; split it at the point
        # farthest from the start and simplify each half.
        split = _farthest_from(points[0], points)
        if split in (0, len(points) - 1):
            return points
        head = simplify_polyline(points[:split + 1], tolerance, high_quality)
        tail = simplify_polyline(points[split:], tolerance, high_quality)
        return head + tail[1:]

    if not high_quality:
        points = _radial_distance_pass(points, tolerance)
        if len(points) < 3:
            return points

    curve = np.array(points, dtype=np.float32).reshape(-1, 1, 2)
    simplified = cv2.approxPolyDP(curve, tolerance, closed=False)

    result = [Point(int(round(x)), int(round(y))) for x, y in simplified.reshape(-1, 2)]
    # approxPolyDP keeps both endpoints of an open curve; make sure of it.
    if result[0] != points[0]:
        result.insert(0, points[0])
    if result[-1] != points[-1] or len(result) == 1:
        result.append(points[-1])
    return result


def _farthest_from(origin: Point, points: List[Point]) -> int:
    distances = [(p.x - origin.x) ** 2 + (p.y - origin.y) ** 2 for p in points]
    return max(range(len(points)), key=distances.__getitem__)


def _radial_distance_pass(points: List[Point], tolerance: float) -> List[Point]:
    squared_tolerance = tolerance * tolerance
    kept = [points[0]]
    for point in points[1:-1]:
        previous = kept[-1]
        if (point.x - previous.x) ** 2 + (point.y - previous.y) ** 2 > squared_tolerance:
            kept.append(point)
    kept.append(points[-1])
    return kept
