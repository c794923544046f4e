"""Paint-by-numbers vectorizer package."""
from pbnvec.types import (
    BezierCurve,
    BoundaryPiece,
    BoundarySegment,
    Color,
    FitConfig,
    PipelineConfig,
    Point,
    Segment,
    VectorizationError,
)
from pbnvec.pipeline import PaintByNumbersPipeline, PipelineResult

__all__ = [
    "BezierCurve",
    "BoundaryPiece",
    "BoundarySegment",
    "Color",
    "FitConfig",
    "PaintByNumbersPipeline",
    "PipelineConfig",
    "PipelineResult",
    "Point",
    "Segment",
    "VectorizationError",
]
