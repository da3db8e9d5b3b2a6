"""
Decomposition of a polyline into measured segments.

Each consecutive vertex pair becomes one Segment. Straight spans are
measured as chord length, arc spans along the span's own circular
parameterization (radius x subtended angle).
"""

import logging
from typing import Callable, List, Sequence

from polyline_report.config import ARC_PARAMETER_TOLERANCE
from polyline_report.geometry.primitives import (
    CircularArc,
    Point,
    Polyline,
    Segment,
    SegmentKind,
    as_point,
    distance,
)

logger = logging.getLogger(__name__)


def segment_vertices(
    vertices: Sequence[Sequence[float]],
    segment_kind_at: Callable[[int], SegmentKind],
    arc_at: Callable[[int], CircularArc],
    curve_index: int = 0,
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
) -> List[Segment]:
    """Split a vertex sequence into measured segments.

    Args:
        vertices: ordered polyline vertices (WCS).
        segment_kind_at: span type of the span starting at vertex i.
        arc_at: arc parameterization of span i; called only for ARC spans.
        curve_index: provenance tag written to every segment.
        arc_tolerance: tolerance for locating a vertex on its arc.

    Returns:
        max(len(vertices) - 1, 0) segments; segment i runs from vertex i
        to vertex i+1.

    Raises:
        ArcParameterError: if a vertex does not lie on its arc span.
    """
    points: List[Point] = [as_point(v) for v in vertices]
    segments: List[Segment] = []

    for i in range(len(points) - 1):
        start, end = points[i], points[i + 1]
        kind = segment_kind_at(i)

        if kind is SegmentKind.ARC:
            arc = arc_at(i)
            length = arc.length_between(
                arc.parameter_of(start, arc_tolerance),
                arc.parameter_of(end, arc_tolerance),
            )
        else:
            length = distance(start, end)

        segments.append(Segment(
            start=start,
            end=end,
            length=length,
            kind=kind,
            source_curve_index=curve_index,
        ))

    return segments


def segment_polyline(
    polyline: Polyline,
    curve_index: int = 0,
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
) -> List[Segment]:
    """Segment a Polyline (see segment_vertices)."""
    segments = segment_vertices(
        polyline.vertices,
        polyline.segment_kind_at,
        polyline.arc_at,
        curve_index=curve_index,
        arc_tolerance=arc_tolerance,
    )
    logger.debug(
        "Polyline %s: %d segments (%d arcs)",
        polyline.handle or "<unnamed>",
        len(segments),
        sum(1 for s in segments if s.kind is SegmentKind.ARC),
    )
    return segments
