"""
Length unit conversion for reports.

Conversions always rebuild the table from the original group lengths,
so repeated conversions never compound rounding error.
"""

import logging
from typing import Optional, Sequence, TYPE_CHECKING

from polyline_report.config import UNIT_TO_METERS
from polyline_report.report.builder import build_report
from polyline_report.report.table import ReportTable

if TYPE_CHECKING:
    from polyline_report.analysis.aggregator import AnalysisGroup

logger = logging.getLogger(__name__)

SUPPORTED_UNITS = tuple(UNIT_TO_METERS.keys())


class UnknownUnitError(ValueError):
    """Unit token not in SUPPORTED_UNITS."""


def normalize_unit(unit: Optional[str]) -> str:
    """Validate and normalize a unit token ("M " -> "m").

    Raises:
        UnknownUnitError: for unsupported or empty tokens.
    """
    token = (unit or "").strip().lower()
    if token not in UNIT_TO_METERS:
        raise UnknownUnitError(
            f"Unknown unit {unit!r}; expected one of {', '.join(SUPPORTED_UNITS)}"
        )
    return token


def conversion_factor(from_unit: str, to_unit: str) -> float:
    """Multiplier turning lengths in ``from_unit`` into ``to_unit``."""
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    return UNIT_TO_METERS[source] / UNIT_TO_METERS[target]


def convert_report(
    groups: Sequence['AnalysisGroup'],
    from_unit: str,
    to_unit: str,
    unlabeled_label: Optional[str] = None,
) -> ReportTable:
    """Build the group report with lengths expressed in ``to_unit``.

    Segment headers carry the target unit, e.g. ``Segment_1(m)``.

    Raises:
        UnknownUnitError: if either unit is unsupported.
    """
    factor = conversion_factor(from_unit, to_unit)
    target = normalize_unit(to_unit)
    logger.info("Converting report %s -> %s (factor %g)", normalize_unit(from_unit), target, factor)
    return build_report(groups, factor=factor, unit=target, unlabeled_label=unlabeled_label)
