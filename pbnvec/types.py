"""Core types for the paint-by-numbers vectorization pipeline."""
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, NamedTuple, Optional, Tuple
import numpy as np


class Color(NamedTuple):
    """RGB color with value equality; the hex form doubles as a map key."""
    red: int
    green: int
    blue: int

    def to_hex(self) -> str:
        return f"{self.red:02x}{self.green:02x}{self.blue:02x}"

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        value = value.lstrip('#')
        if len(value) != 6:
            raise PreconditionError(f"Invalid color hex string: {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


class Point(NamedTuple):
    """2D integer point; structurally equal points are the same graph vertex."""
    x: int
    y: int

    def to_key(self) -> str:
        return f"({self.x},{self.y})"

    @classmethod
    def from_key(cls, key: str) -> "Point":
        inner = key.strip()
        if not (inner.startswith('(') and inner.endswith(')')):
            raise PreconditionError(f'Invalid point string "{key}"')
        try:
            x, y = (int(part) for part in inner[1:-1].split(','))
        except ValueError:
            raise PreconditionError(f'Invalid point string "{key}"')
        return cls(x, y)


@dataclass(frozen=True)
class Segment:
    """Axis-aligned segment between two points."""
    start: Point
    end: Point

    @property
    def is_horizontal(self) -> bool:
        return self.start.y == self.end.y

    @property
    def is_vertical(self) -> bool:
        return self.start.x == self.end.x

    @property
    def length(self) -> int:
        return abs(self.end.x - self.start.x) + abs(self.end.y - self.start.y)


@dataclass(frozen=True)
class BoundarySegment:
    """A segment plus the colors observed on either side of it."""
    segment: Segment
    before_color: Color
    after_color: Color


@dataclass
class BezierCurve:
    """Cubic bezier curve segment."""
    p0: Tuple[float, float]
    p1: Tuple[float, float]  # Control point
    p2: Tuple[float, float]  # Control point
    p3: Tuple[float, float]

    def as_array(self) -> np.ndarray:
        """Control points as a (4, 2) array."""
        return np.array([self.p0, self.p1, self.p2, self.p3], dtype=float)

    def point_at(self, t):
        """Evaluate the curve at scalar or array ``t``."""
        t = np.asarray(t, dtype=float)
        s = 1.0 - t
        ctrl = self.as_array()
        basis = np.stack([s ** 3, 3 * s ** 2 * t, 3 * s * t ** 2, t ** 3], axis=-1)
        return basis @ ctrl


@dataclass
class BoundaryPiece:
    """A traced chain of boundary points, plus its simplified and fitted forms."""
    chain: Deque[Point]
    is_loop: bool = False
    simplified_chain: Deque[Point] = field(default_factory=deque)
    curves: List[BezierCurve] = field(default_factory=list)
    fit_error: Optional[float] = None
    fit_iterations: int = 0

    @property
    def edge_count(self) -> int:
        return max(0, len(self.chain) - 1)


@dataclass
class FitConfig:
    """Configuration for the iterative bezier fitter."""
    # Outer loop
    error_threshold: float = 25.0
    max_iterations: int = 40

    # Closest-point projection
    newton_iterations: int = 40
    newton_tolerance: float = 1e-5

    # Below this a pivot or diagonal entry counts as zero
    singular_epsilon: float = 1e-8


@dataclass
class PipelineConfig:
    """Configuration for the paint-by-numbers pipeline."""
    # Simplification
    simplify_tolerance: float = 1.0
    high_quality: bool = True

    # Point graph
    subdivision_length: int = 8

    # Stage toggles
    validate: bool = True
    fit_curves: bool = True

    # Performance
    workers: int = 1

    fit: FitConfig = field(default_factory=FitConfig)

    def __post_init__(self):
        if self.simplify_tolerance < 0:
            raise PreconditionError(
                f"simplify_tolerance must be >= 0, got {self.simplify_tolerance}"
            )
        if self.subdivision_length < 1:
            raise PreconditionError(
                f"subdivision_length must be >= 1, got {self.subdivision_length}"
            )
        if self.workers < 1:
            raise PreconditionError(f"workers must be >= 1, got {self.workers}")
        if self.fit.max_iterations < 1:
            raise PreconditionError(
                f"max_iterations must be >= 1, got {self.fit.max_iterations}"
            )


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class PreconditionError(VectorizationError):
    """Raised when an operation is called with arguments it does not accept."""
    pass


class InvalidPositionError(PreconditionError):
    """Raised for position arguments outside an operation's domain."""
    pass


class AdjacencyError(VectorizationError):
    """Raised when an adjacency map fails validation."""
    pass


class GraphConsistencyError(VectorizationError):
    """Raised when the boundary point graph is malformed."""
    pass


class FittingError(VectorizationError):
    """Raised when curve fitting cannot recover from a degenerate system."""
    pass
