"""
Built-in constants for polyline analysis and reporting.

Values here are the defaults; a project file (.plreport.json) can override
the analysis and report settings through project_config.
"""

# ---------------------------------------------------------------------------
# Association
# ---------------------------------------------------------------------------

# Max distance between a polyline endpoint and a block insert point
ASSOCIATION_TOLERANCE = 1.0

# Radius around a block insert point searched for its label text
LABEL_SEARCH_RADIUS = 10.0

# Radius around a leader's arrow tip searched for its label text
LEADER_SEARCH_RADIUS = 5.0

# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

# Absolute tolerance (radians) when locating a vertex on its arc span
ARC_PARAMETER_TOLERANCE = 1e-10

# Bulge values below this are treated as straight spans
BULGE_EPSILON = 1e-12

# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

LABEL_COLUMN = "Label"
SEGMENT_COLUMN_PREFIX = "Segment_"
UNLABELED_GROUP_LABEL = "unlabeled analysis"
LENGTH_DECIMALS = 2

# Layer connection report
START_BLOCK_COLUMN = "Start Block"
END_BLOCK_COLUMN = "End Block"
LEADER_TEXT_COLUMN = "Leader Text"
TOTAL_LENGTH_COLUMN = "Total Length"

# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

UNIT_TO_METERS = {
    "mm": 0.001,
    "cm": 0.01,
    "m": 1.0,
    "km": 1000.0,
}

DEFAULT_SOURCE_UNIT = "mm"

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

CSV_SUFFIX = ".csv"
DEFAULT_REPORT_FILENAME = "polyline_report.csv"
