"""Paint-by-numbers vectorization pipeline: bitmap to fitted boundary curves."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
import time
import logging
from concurrent.futures import ThreadPoolExecutor

from pbnvec.adjacency import AdjacencyMap, find_adjacencies, sanity_check_adjacencies
from pbnvec.boundary_extraction import compute_sorted_boundaries
from pbnvec.boundary_tracing import compute_junction_points, trace_boundaries
from pbnvec.fitting import fit_piece
from pbnvec.point_graph import PointGraph, compute_from_boundary_segments
from pbnvec.quadtree import QuadTree, Region, build_tree, count_nodes
from pbnvec.raster_ingest import Bitmap, ingest
from pbnvec.types import BoundaryPiece, BoundarySegment, PipelineConfig, Point

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Every intermediate product of one pipeline run."""
    width: int
    height: int
    tree: QuadTree
    adjacency_map: AdjacencyMap
    boundary_segments: List[BoundarySegment]
    graph: PointGraph
    junction_points: List[Point]
    pieces: List[BoundaryPiece]
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def leaf_count(self) -> int:
        return count_nodes(self.tree).get('homogeneous', 0)

    @property
    def curve_count(self) -> int:
        return sum(len(piece.curves) for piece in self.pieces)


class PaintByNumbersPipeline:
    """Quadtree, adjacency, boundary and curve stages over one bitmap."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize the pipeline.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or PipelineConfig()

    def process(self, source: Union[Bitmap, str, Path]) -> PipelineResult:
        """
        Run every stage on ``source``.

        Args:
            source: A Bitmap, or a path to an image file

        Returns:
            PipelineResult with the tree, adjacencies, boundaries and pieces

        Raises:
            FileNotFoundError: If ``source`` is a missing path
            VectorizationError: If any stage fails
        """
        bitmap = source if isinstance(source, Bitmap) else ingest(source)
        config = self.config
        timings = {}
        logger.info(
            f"Processing {bitmap.width}x{bitmap.height} bitmap with {bitmap.unique_colors()} colors"
        )

        start = time.time()
        region = Region(0, 0, bitmap.width, bitmap.height)
        tree = build_tree(bitmap.color_at, region, workers=config.workers)
        timings['tree'] = time.time() - start
        logger.info(f"Quadtree: {count_nodes(tree)}")

        start = time.time()
        adjacency_map = find_adjacencies(tree)
        if config.validate:
            sanity_check_adjacencies(tree, adjacency_map, bitmap.width, bitmap.height)
        timings['adjacency'] = time.time() - start
        logger.info(f"Adjacency map covers {len(adjacency_map)} leaves")

        start = time.time()
        boundary_segments = compute_sorted_boundaries(adjacency_map)
        graph = compute_from_boundary_segments(boundary_segments, config.subdivision_length)
        timings['boundaries'] = time.time() - start
        logger.info(
            f"Boundary graph: {len(boundary_segments)} segments, "
            f"{len(graph)} points, {graph.edge_count} edges"
        )

        start = time.time()
        pieces = trace_boundaries(graph, config.simplify_tolerance, config.high_quality)
        junction_points = compute_junction_points(graph)
        timings['tracing'] = time.time() - start

        if config.fit_curves:
            start = time.time()
            self._fit_pieces(pieces)
            timings['fitting'] = time.time() - start

        logger.info(
            "Pipeline timings: "
            + ", ".join(f"{stage}={seconds:.3f}s" for stage, seconds in timings.items())
        )
        return PipelineResult(
            width=bitmap.width,
            height=bitmap.height,
            tree=tree,
            adjacency_map=adjacency_map,
            boundary_segments=boundary_segments,
            graph=graph,
            junction_points=junction_points,
            pieces=pieces,
            timings=timings,
        )

    def _fit_pieces(self, pieces: List[BoundaryPiece]) -> None:
        fit_config = self.config.fit
        workers = self.config.workers
        if workers > 1 and len(pieces) > 1:
            logger.info(f"Fitting {len(pieces)} pieces using {workers} workers...")
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # Pieces are fitted in place; consume results to surface errors.
                list(executor.map(lambda piece: fit_piece(piece, fit_config), pieces))
        else:
            for piece in pieces:
                fit_piece(piece, fit_config)

        unconverged = sum(
            1 for piece in pieces
            if piece.fit_error is not None and piece.fit_error >= fit_config.error_threshold
        )
        logger.info(
            f"Fitted {sum(len(p.curves) for p in pieces)} curves across {len(pieces)} pieces"
            f" ({unconverged} above error threshold)"
        )
