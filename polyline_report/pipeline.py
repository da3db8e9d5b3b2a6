"""
End-to-end report runs on a DXF drawing.

Two modes:
  - group report:      user selections (polyline handles + label handles)
                       are measured into an AnalysisSession and reported
                       one row per group;
  - connection report: every polyline on the chosen layers is reported
                       with the blocks at its ends.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from polyline_report.analysis.aggregator import AnalysisSession, GroupAnalysisError
from polyline_report.config import DEFAULT_SOURCE_UNIT
from polyline_report.analysis.connections import analyze_connections, build_connection_table
from polyline_report.io.dxf_reader import DrawingData, EntityNotFoundError, load_drawing
from polyline_report.logging_config import LogContext, log_timing
from polyline_report.project_config import ProjectConfig
from polyline_report.report.csv_writer import write_csv
from polyline_report.report.table import ReportTable
from polyline_report.report.units import UnknownUnitError, conversion_factor, normalize_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupSelection:
    """Handles picked for one analysis group."""
    curve_handles: Tuple[str, ...]
    label_handles: Tuple[str, ...] = ()


def _split_handles(text: str) -> Tuple[str, ...]:
    return tuple(h.strip().upper() for h in text.split(",") if h.strip())


def parse_group_argument(text: str) -> GroupSelection:
    """Parse "CURVE[,CURVE...][=LABEL[,LABEL...]]" into a GroupSelection.

    Example:
        "2A,2B=3F" -> curves ("2A", "2B"), labels ("3F",)
    """
    curves, _, labels = text.partition("=")
    return GroupSelection(curve_handles=_split_handles(curves), label_handles=_split_handles(labels))


def resolve_labels(drawing: DrawingData, handles: Sequence[str], leader_radius: float) -> List[str]:
    """Label texts of the picked entities; entities without text are skipped."""
    texts = []
    for handle in handles:
        text = drawing.entity_text(handle, leader_radius=leader_radius)
        if text:
            texts.append(text)
            logger.debug("Label %s: %r", handle, text)
        else:
            logger.warning("Entity %s has no label text; skipped", handle)
    return texts


def collect_session(
    drawing: DrawingData,
    selections: Sequence[GroupSelection],
    config: ProjectConfig,
    source_unit: Optional[str] = None,
) -> AnalysisSession:
    """Run every selection through a new session.

    Selections that fail (unknown handles, nothing to measure) are logged
    and skipped; the session keeps the groups collected so far.
    """
    session = AnalysisSession(
        source_unit=source_unit or config.report.source_unit,
        unlabeled_label=config.report.unlabeled_label,
        arc_tolerance=config.analysis.arc_tolerance,
    )

    for number, selection in enumerate(selections, 1):
        try:
            curves = [drawing.polyline(h) for h in selection.curve_handles]
            labels = resolve_labels(
                drawing, selection.label_handles, config.analysis.leader_search_radius
            )
            session.add_group(curves, labels)
        except (GroupAnalysisError, EntityNotFoundError) as exc:
            logger.warning("Selection %d skipped: %s", number, exc)

    session.close()
    return session


def report_units(config: ProjectConfig) -> Tuple[str, Optional[str]]:
    """Drawing unit and report unit (None: no conversion) of ``config``.

    An unknown unit token is reported and the conversion skipped, so the
    report stays in drawing units.
    """
    target = config.report.target_unit or None
    try:
        source = normalize_unit(config.report.source_unit)
        if target:
            target = normalize_unit(target)
    except UnknownUnitError as exc:
        logger.warning("Unit conversion skipped: %s", exc)
        return DEFAULT_SOURCE_UNIT, None
    return source, target


@dataclass
class ReportRun:
    """Outcome of one report run."""
    table: ReportTable
    output_path: Optional[Path] = None
    groups: int = 0
    skipped: int = 0


def run_group_report(
    dxf_path: Union[str, Path],
    selections: Sequence[GroupSelection],
    output_csv: Optional[Union[str, Path]] = None,
    config: Optional[ProjectConfig] = None,
    drawing: Optional[DrawingData] = None,
) -> ReportRun:
    """Measure the selections of one drawing and export the group report.

    Raises:
        DxfLoadError: drawing cannot be read.
        NoGroupsCollectedError: no selection produced a group and an
            export was requested.
        ExportError: the CSV cannot be written.
    """
    config = config or ProjectConfig()

    with LogContext(drawing=Path(dxf_path).name):
        source, target = report_units(config)
        if drawing is None:
            drawing = load_drawing(dxf_path)

        with log_timing(logger, "Group analysis", level=logging.INFO, selections=len(selections)):
            session = collect_session(drawing, selections, config, source_unit=source)

        if target:
            table = session.convert_to(target)
        else:
            table = session.build_report()

        run = ReportRun(table=table, groups=len(session), skipped=len(selections) - len(session))
        if output_csv is not None:
            run.output_path = session.export(output_csv, bom=config.output.write_bom)

    return run


def run_layer_report(
    dxf_path: Union[str, Path],
    output_csv: Optional[Union[str, Path]] = None,
    config: Optional[ProjectConfig] = None,
    layers: Optional[Sequence[str]] = None,
    drawing: Optional[DrawingData] = None,
) -> ReportRun:
    """Report every polyline on ``layers`` with the blocks at its ends.

    With no layers given (argument or config), all LWPOLYLINEs are used.
    """
    config = config or ProjectConfig()
    layers = list(layers or config.analysis.layers)

    with LogContext(drawing=Path(dxf_path).name):
        source, target = report_units(config)
        if drawing is None:
            drawing = load_drawing(dxf_path)

        polylines = drawing.polylines_on_layers(layers) if layers else drawing.polylines()
        if not polylines:
            logger.warning("No polylines found on layers %s", layers or "<all>")

        connections = analyze_connections(
            polylines,
            drawing.markers,
            drawing.annotations,
            name_mapping=config.block_mapping,
            tolerance=config.analysis.tolerance,
            search_radius=config.analysis.label_search_radius,
            arc_tolerance=config.analysis.arc_tolerance,
        )

        factor, unit = 1.0, None
        if target:
            factor, unit = conversion_factor(source, target), target
        table = build_connection_table(connections, factor=factor, unit=unit)

        run = ReportRun(table=table, groups=len(connections))
        if output_csv is not None:
            run.output_path = write_csv(table, output_csv, bom=config.output.write_bom)

    return run
