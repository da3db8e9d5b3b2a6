"""
Report table synthesis for analysis groups.

Two passes: infer_schema() fixes the column count from the longest group,
then build_report() fills one primary row per group plus one label-only
row per extra label.
"""

import logging
from typing import Optional, Sequence, TYPE_CHECKING

from polyline_report.config import LABEL_COLUMN, UNLABELED_GROUP_LABEL
from polyline_report.report.table import ReportTable, TableSchema

if TYPE_CHECKING:
    from polyline_report.analysis.aggregator import AnalysisGroup

logger = logging.getLogger(__name__)


def infer_schema(groups: Sequence['AnalysisGroup'], unit: Optional[str] = None) -> TableSchema:
    """Column layout for a group report: Label + one column per segment position."""
    max_segments = max((len(g.segments) for g in groups), default=0)
    return TableSchema(
        leading_columns=(LABEL_COLUMN,),
        max_segments=max_segments,
        unit=unit,
    )


def build_report(
    groups: Sequence['AnalysisGroup'],
    factor: float = 1.0,
    unit: Optional[str] = None,
    unlabeled_label: Optional[str] = None,
) -> ReportTable:
    """Build the group report table.

    Args:
        groups: analysis groups in session order.
        factor: multiplier applied to every length before rounding.
        unit: unit shown in segment headers (None for no suffix).
        unlabeled_label: label for groups without label texts.

    Returns:
        ReportTable; identical for identical input.
    """
    fallback = unlabeled_label or UNLABELED_GROUP_LABEL
    schema = infer_schema(groups, unit)
    table = ReportTable(columns=schema.columns)
    empty_segments = (None,) * schema.max_segments

    for group in groups:
        label = group.label_texts[0] if group.label_texts else fallback
        lengths = [segment.length for segment in group.segments]
        table.add_row((label,) + schema.segment_cells(lengths, factor))

        for extra_label in group.label_texts[1:]:
            table.add_row((extra_label,) + empty_segments)

    logger.debug(
        "Report built: %d groups, %d rows, %d segment columns",
        len(groups), table.row_count, schema.max_segments,
    )
    return table
