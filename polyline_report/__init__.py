"""
polyline_report: segment lengths of DXF polylines as CSV reports.

The command line entry point is main.py; batch export lives in
polyline_report.batch.
"""

from polyline_report.logging_config import (
    setup_logging,
    get_logger,
    log_timing,
    LogContext,
)
from polyline_report.analysis.aggregator import AnalysisSession, AnalysisGroup
from polyline_report.io.dxf_reader import load_drawing
from polyline_report.pipeline import (
    GroupSelection,
    parse_group_argument,
    run_group_report,
    run_layer_report,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_timing",
    "LogContext",
    "AnalysisSession",
    "AnalysisGroup",
    "load_drawing",
    "GroupSelection",
    "parse_group_argument",
    "run_group_report",
    "run_layer_report",
]
