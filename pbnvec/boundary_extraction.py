"""Boundary segment extraction between differently-colored quadtree leaves."""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from pbnvec.adjacency import AdjacencyMap, AdjacencyPair, flatten_adjacencies
from pbnvec.position import Position
from pbnvec.types import BoundarySegment, Point, Segment

logger = logging.getLogger(__name__)


def compute_sorted_boundaries(adjacency_map: AdjacencyMap) -> List[BoundarySegment]:
    """
    Extract merged boundary segments from an adjacency map.

    Args:
        adjacency_map: Leaf -> Adjacencies, as built by find_adjacencies

    Returns:
        Deduplicated boundary segments with collinear abutting runs merged
    """
    pairs = flatten_adjacencies(adjacency_map)
    raw_segments = segments_from_pairs(pairs)
    consolidated = consolidate_segments(raw_segments)
    logger.info(
        f"Boundary extraction: {len(pairs)} pairs -> {len(raw_segments)} segments "
        f"-> {len(consolidated)} merged"
    )
    return consolidated


def segments_from_pairs(pairs: Iterable[AdjacencyPair]) -> List[BoundarySegment]:
    """
    Convert differently-colored adjacency pairs into oriented segments.

    Every segment runs left-to-right or top-to-bottom; ``before_color`` is the
    color above (horizontal) or to the left (vertical) of the segment.
    """
    segments = []
    for pair in pairs:
        if pair.source.properties == pair.target.properties:
            continue

        before, after = pair.source, pair.target
        region = pair.source.region
        start_x, start_y = region.x, region.y
        if pair.side == Position.BOTTOM:
            start_y += region.height
        elif pair.side == Position.RIGHT:
            start_x += region.width
        else:
            # Going up or left, the source is the region below / to the right.
            before, after = after, before

        if pair.side in (Position.TOP, Position.BOTTOM):
            end = Point(start_x + region.width, start_y)
        else:
            end = Point(start_x, start_y + region.height)

        segments.append(BoundarySegment(
            segment=Segment(Point(start_x, start_y), end),
            before_color=before.properties,
            after_color=after.properties,
        ))
    return segments


def consolidate_segments(raw_segments: Iterable[BoundarySegment]) -> List[BoundarySegment]:
    """
    Merge end-to-end segments that share an axis line and a color pair.

    Inputs are left untouched; exact duplicates are dropped.
    """
    horizontal: List[BoundarySegment] = []
    vertical: List[BoundarySegment] = []
    seen = set()
    for boundary in raw_segments:
        if boundary in seen:
            continue
        seen.add(boundary)
        if boundary.segment.is_horizontal:
            horizontal.append(boundary)
        else:
            vertical.append(boundary)

    return _consolidate_axis(horizontal, axis=0) + _consolidate_axis(vertical, axis=1)


def _consolidate_axis(segments: List[BoundarySegment], axis: int) -> List[BoundarySegment]:
    # axis is the coordinate index the segments run along (0 = x, 1 = y).
    other = 1 - axis
    groups: Dict[Tuple[int, str, str], List[BoundarySegment]] = defaultdict(list)
    for boundary in segments:
        key = (
            boundary.segment.start[other],
            _color_key(boundary.before_color),
            _color_key(boundary.after_color),
        )
        groups[key].append(boundary)

    consolidated = []
    for key in sorted(groups):
        group = sorted(groups[key], key=lambda b: b.segment.start[axis])
        current = group[0]
        for boundary in group[1:]:
            if current.segment.end[axis] == boundary.segment.start[axis]:
                current = BoundarySegment(
                    segment=Segment(current.segment.start, boundary.segment.end),
                    before_color=current.before_color,
                    after_color=current.after_color,
                )
            else:
                consolidated.append(current)
                current = boundary
        consolidated.append(current)
    return consolidated


def _color_key(color) -> str:
    to_hex = getattr(color, "to_hex", None)
    return to_hex() if to_hex is not None else repr(color)
