"""
Layer connection report.

For every polyline on the chosen layers: which block sits at its start,
which at its end, the label text next to those blocks, and the length
of each segment plus the total.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from polyline_report.association.associator import EndpointAssociation, associate_endpoint
from polyline_report.config import (
    ARC_PARAMETER_TOLERANCE,
    ASSOCIATION_TOLERANCE,
    END_BLOCK_COLUMN,
    LABEL_SEARCH_RADIUS,
    LEADER_TEXT_COLUMN,
    START_BLOCK_COLUMN,
    TOTAL_LENGTH_COLUMN,
)
from polyline_report.geometry.primitives import Annotation, ArcParameterError, Marker, Polyline, Segment
from polyline_report.geometry.segmenter import segment_polyline
from polyline_report.report.table import ReportTable, TableSchema, format_length

logger = logging.getLogger(__name__)


@dataclass
class CurveConnection:
    """Blocks connected by one polyline and its measured segments."""
    handle: str
    start: EndpointAssociation = field(default_factory=EndpointAssociation)
    end: EndpointAssociation = field(default_factory=EndpointAssociation)
    segments: List[Segment] = field(default_factory=list)

    @property
    def total_length(self) -> float:
        return sum(segment.length for segment in self.segments)

    @property
    def leader_text(self) -> Optional[str]:
        """Start block's text, falling back to the end block's text."""
        return self.start.text or self.end.text


def analyze_connection(
    polyline: Polyline,
    markers: Sequence[Marker],
    annotations: Sequence[Annotation],
    name_mapping: Optional[Mapping[str, str]] = None,
    tolerance: float = ASSOCIATION_TOLERANCE,
    search_radius: float = LABEL_SEARCH_RADIUS,
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
) -> CurveConnection:
    """Associate both endpoints of one polyline and measure it."""
    vertices = polyline.vertices
    connection = CurveConnection(handle=polyline.handle)
    if not vertices:
        return connection

    connection.start = associate_endpoint(
        vertices[0], markers, annotations, name_mapping, tolerance, search_radius
    )
    connection.end = associate_endpoint(
        vertices[-1], markers, annotations, name_mapping, tolerance, search_radius
    )
    connection.segments = segment_polyline(polyline, arc_tolerance=arc_tolerance)
    return connection


def analyze_connections(
    polylines: Sequence[Polyline],
    markers: Sequence[Marker],
    annotations: Sequence[Annotation],
    name_mapping: Optional[Mapping[str, str]] = None,
    tolerance: float = ASSOCIATION_TOLERANCE,
    search_radius: float = LABEL_SEARCH_RADIUS,
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
) -> List[CurveConnection]:
    """Analyze every polyline; ones that cannot be measured are skipped."""
    connections: List[CurveConnection] = []
    for polyline in polylines:
        try:
            connections.append(analyze_connection(
                polyline, markers, annotations, name_mapping,
                tolerance, search_radius, arc_tolerance,
            ))
        except ArcParameterError as exc:
            logger.warning("Skipping polyline %s: %s", polyline.handle, exc)

    linked = sum(1 for c in connections if c.start.found and c.end.found)
    logger.info("Analyzed %d polylines, %d linked at both ends", len(connections), linked)
    return connections


def build_connection_table(
    connections: Sequence[CurveConnection],
    factor: float = 1.0,
    unit: Optional[str] = None,
) -> ReportTable:
    """Table with start/end block, leader text, segment lengths and total."""
    total_column = TOTAL_LENGTH_COLUMN + (f"({unit})" if unit else "")
    schema = TableSchema(
        leading_columns=(START_BLOCK_COLUMN, END_BLOCK_COLUMN, LEADER_TEXT_COLUMN),
        max_segments=max((len(c.segments) for c in connections), default=0),
        unit=unit,
        trailing_columns=(total_column,),
    )
    table = ReportTable(columns=schema.columns)

    for connection in connections:
        lengths = [segment.length for segment in connection.segments]
        table.add_row(
            (connection.start.name, connection.end.name, connection.leader_text)
            + schema.segment_cells(lengths, factor)
            + (format_length(connection.total_length * factor),)
        )

    return table
