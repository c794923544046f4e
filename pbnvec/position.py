"""Cyclic corner/side positions of a square and their rotation algebra."""
from enum import IntEnum
from typing import Tuple

from pbnvec.types import InvalidPositionError


class Position(IntEnum):
    """The 8 positions around a square, clockwise from the top-left corner.

    Corners sit at even indices and sides at odd indices.
    """
    TOP_LEFT = 0
    TOP = 1
    TOP_RIGHT = 2
    RIGHT = 3
    BOTTOM_RIGHT = 4
    BOTTOM = 5
    BOTTOM_LEFT = 6
    LEFT = 7

    @property
    def is_corner(self) -> bool:
        return self % 2 == 0

    @property
    def is_side(self) -> bool:
        return self % 2 == 1


CORNERS: Tuple[Position, ...] = (
    Position.TOP_LEFT,
    Position.TOP_RIGHT,
    Position.BOTTOM_RIGHT,
    Position.BOTTOM_LEFT,
)

SIDES: Tuple[Position, ...] = (
    Position.TOP,
    Position.RIGHT,
    Position.BOTTOM,
    Position.LEFT,
)


def rotate(position: Position, count: int) -> Position:
    """Rotate ``count`` steps clockwise (negative counts rotate counter-clockwise)."""
    return Position((position + count) % 8)


def adjacent_to(position: Position) -> Tuple[Position, Position]:
    """The two positions one rotation away."""
    return rotate(position, -1), rotate(position, 1)


def is_rotationally_adjacent_to(first: Position, second: Position) -> bool:
    """True when the positions are exactly one rotation apart."""
    return (first - second) % 8 in (1, 7)


def between(first: Position, second: Position) -> Position:
    """
    The position between two positions that are exactly two rotations apart.

    Raises:
        InvalidPositionError: If the positions are not two rotations apart
    """
    if (second - first) % 8 == 2:
        return rotate(first, 1)
    if (first - second) % 8 == 2:
        return rotate(second, 1)
    raise InvalidPositionError(
        f"Cannot find position between {Position(first).name} and {Position(second).name}"
    )


def opposite(position: Position) -> Position:
    return rotate(position, 4)


def after_moving_towards(start: Position, toward: Position) -> Position:
    """
    The position reached by moving from ``start`` across ``toward``.

    This reflects ``start`` through ``toward``: moving from a corner toward one
    of its non-adjacent sides lands on the corner on that side, e.g. moving
    from BOTTOM_LEFT toward RIGHT reaches BOTTOM_RIGHT. Moving toward the same
    side twice returns to the starting position.
    """
    return Position((2 * toward + 12 - start) % 8)
