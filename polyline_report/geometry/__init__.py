"""Geometry primitives and polyline segmentation."""

from polyline_report.geometry.primitives import (
    Annotation,
    ArcParameterError,
    CircularArc,
    Marker,
    Point,
    Polyline,
    Segment,
    SegmentKind,
    distance,
)
from polyline_report.geometry.segmenter import segment_polyline, segment_vertices

__all__ = [
    "Annotation",
    "ArcParameterError",
    "CircularArc",
    "Marker",
    "Point",
    "Polyline",
    "Segment",
    "SegmentKind",
    "distance",
    "segment_polyline",
    "segment_vertices",
]
