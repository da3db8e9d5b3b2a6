"""
Analysis groups and the session that accumulates them.

A group is one selection pass: one or more polylines measured together
plus the label texts picked for them. Groups accumulate in an
AnalysisSession in call order until the session is closed and reported.

Failure to analyze one group never touches the groups already collected:
a group is fully built before it is appended.

Usage:
    session = AnalysisSession(source_unit="mm")
    session.add_group([pipe_a, pipe_b], ["H-101"])
    session.close()
    table = session.build_report()
    session.export("report.csv")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from polyline_report.config import (
    ARC_PARAMETER_TOLERANCE,
    DEFAULT_SOURCE_UNIT,
    UNLABELED_GROUP_LABEL,
)
from polyline_report.geometry.primitives import ArcParameterError, Polyline, Segment
from polyline_report.geometry.segmenter import segment_polyline
from polyline_report.report.builder import build_report
from polyline_report.report.csv_writer import write_csv
from polyline_report.report.table import ReportTable
from polyline_report.report.units import convert_report, normalize_unit

logger = logging.getLogger(__name__)


class GroupAnalysisError(Exception):
    """A selection could not be turned into an analysis group."""


class EmptySelectionError(GroupAnalysisError):
    """No curves selected, or the selected curves have no segments."""


class SessionClosedError(RuntimeError):
    """Group added after the session received its final selection."""


class NoGroupsCollectedError(Exception):
    """Report or export requested for a session without groups."""


@dataclass
class AnalysisGroup:
    """Result of one selection pass.

    Attributes:
        label_texts: label strings in the order they were picked.
        segments: segments of all curves, curve order then vertex order.
        curve_count: number of curves measured.
    """
    label_texts: List[str]
    segments: List[Segment] = field(default_factory=list)
    curve_count: int = 0

    @property
    def total_length(self) -> float:
        """Sum of segment lengths, recomputed on every access."""
        return sum(segment.length for segment in self.segments)

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def summary(self, unit: str = "units") -> str:
        """Human-readable summary of the group."""
        lines = ["=== Polyline segment analysis ===", ""]

        if self.label_texts:
            lines.append("Labels:")
            lines.extend(f"  - {text}" for text in self.label_texts)
            lines.append("")

        lines.append("Segments:")
        for i, segment in enumerate(self.segments, start=1):
            lines.append(f"  Segment {i}: {segment.length:.2f} {unit}")
        lines.append("")

        lines.append(f"Total length:   {self.total_length:.2f} {unit}")
        lines.append(f"Segment count:  {self.segment_count}")
        lines.append(f"Polyline count: {self.curve_count}")
        return "\n".join(lines)


def analyze_group(
    curves: Sequence[Polyline],
    label_texts: Sequence[str] = (),
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
) -> AnalysisGroup:
    """Measure the curves of one selection.

    Each curve is segmented independently; its segments are tagged with
    the curve's position in ``curves``.

    Raises:
        EmptySelectionError: if ``curves`` is empty or yields no segments.
        GroupAnalysisError: if a curve cannot be measured.
    """
    if not curves:
        raise EmptySelectionError("No polylines selected")

    segments: List[Segment] = []
    for index, curve in enumerate(curves):
        try:
            segments.extend(segment_polyline(curve, curve_index=index, arc_tolerance=arc_tolerance))
        except ArcParameterError as exc:
            raise GroupAnalysisError(
                f"Polyline {curve.handle or index!r} could not be measured: {exc}"
            ) from exc

    if not segments:
        raise EmptySelectionError(
            f"Selected polylines ({len(curves)}) contain no segments"
        )

    return AnalysisGroup(
        label_texts=list(label_texts),
        segments=segments,
        curve_count=len(curves),
    )


class AnalysisSession:
    """Ordered collection of analysis groups for one interactive session.

    Also holds the most recently built report table so that a failed unit
    conversion or export leaves the displayed table in place.
    """

    def __init__(
        self,
        source_unit: str = DEFAULT_SOURCE_UNIT,
        unlabeled_label: str = UNLABELED_GROUP_LABEL,
        arc_tolerance: float = ARC_PARAMETER_TOLERANCE,
    ):
        self.source_unit = normalize_unit(source_unit)
        self.unlabeled_label = unlabeled_label
        self.arc_tolerance = arc_tolerance
        self._groups: List[AnalysisGroup] = []
        self._closed = False
        self.table: Optional[ReportTable] = None
        self.display_unit: Optional[str] = None
        self._display_from: Optional[str] = None

    @property
    def groups(self) -> Tuple[AnalysisGroup, ...]:
        return tuple(self._groups)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._groups)

    def add_group(self, curves: Sequence[Polyline], label_texts: Sequence[str] = ()) -> AnalysisGroup:
        """Analyze one selection and append it to the session.

        Raises:
            SessionClosedError: if close() was already called.
            EmptySelectionError: nothing to measure; session unchanged.
            GroupAnalysisError: a curve could not be measured; session unchanged.
        """
        if self._closed:
            raise SessionClosedError("Session is closed; no more selections accepted")

        group = analyze_group(curves, label_texts, arc_tolerance=self.arc_tolerance)
        self._groups.append(group)
        self.table = None
        logger.info(
            "Group %d added: %d polylines, %d segments, total %.2f",
            len(self._groups), group.curve_count, group.segment_count, group.total_length,
            extra={"labels": list(group.label_texts)},
        )
        return group

    def close(self) -> None:
        """Signal that no more selections follow."""
        self._closed = True
        logger.debug("Session closed with %d groups", len(self._groups))

    def build_report(self) -> ReportTable:
        """Build (or rebuild) the report in the drawing's own units."""
        self.table = build_report(self._groups, unlabeled_label=self.unlabeled_label)
        self.display_unit = None
        return self.table

    def convert_units(self, from_unit: str, to_unit: str) -> ReportTable:
        """Rebuild the report with lengths converted from the groups.

        Raises:
            UnknownUnitError: either unit is unsupported; the current
                table is kept.
        """
        table = convert_report(
            self._groups, from_unit, to_unit, unlabeled_label=self.unlabeled_label
        )
        self.table = table
        self.display_unit = normalize_unit(to_unit)
        self._display_from = normalize_unit(from_unit)
        return table

    def convert_to(self, to_unit: str) -> ReportTable:
        """convert_units() from the session's source unit."""
        return self.convert_units(self.source_unit, to_unit)

    def export(self, path: Union[str, Path], bom: bool = True) -> Path:
        """Write the report table as CSV.

        The table is rebuilt when groups were added since it was last
        built, keeping the current display unit.

        Raises:
            NoGroupsCollectedError: the session has no groups.
            ExportError: the file could not be written; table kept.
        """
        if not self._groups:
            raise NoGroupsCollectedError("No analysis groups collected; nothing to export")
        if self.table is None:
            if self.display_unit:
                self.convert_units(self._display_from, self.display_unit)
            else:
                self.build_report()
        return write_csv(self.table, path, bom=bom)
