"""Analysis groups, the session that collects them, and layer connections."""

from polyline_report.analysis.aggregator import (
    AnalysisGroup,
    AnalysisSession,
    EmptySelectionError,
    GroupAnalysisError,
    NoGroupsCollectedError,
    SessionClosedError,
    analyze_group,
)
from polyline_report.analysis.connections import (
    CurveConnection,
    analyze_connection,
    analyze_connections,
    build_connection_table,
)

__all__ = [
    "AnalysisGroup",
    "AnalysisSession",
    "EmptySelectionError",
    "GroupAnalysisError",
    "NoGroupsCollectedError",
    "SessionClosedError",
    "analyze_group",
    "CurveConnection",
    "analyze_connection",
    "analyze_connections",
    "build_connection_table",
]
