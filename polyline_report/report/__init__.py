"""
Report tables: synthesis, unit conversion and CSV export.

Modules:
  - table:      fixed-schema table and length formatting
  - builder:    group report (schema inference, then row fill)
  - units:      mm/cm/m/km conversion
  - csv_writer: CSV text and file export
"""

from polyline_report.report.builder import build_report, infer_schema
from polyline_report.report.csv_writer import ExportError, to_delimited_text, write_csv
from polyline_report.report.table import ReportTable, TableSchema, format_length
from polyline_report.report.units import (
    SUPPORTED_UNITS,
    UnknownUnitError,
    conversion_factor,
    convert_report,
)

__all__ = [
    "build_report",
    "infer_schema",
    "ExportError",
    "to_delimited_text",
    "write_csv",
    "ReportTable",
    "TableSchema",
    "format_length",
    "SUPPORTED_UNITS",
    "UnknownUnitError",
    "conversion_factor",
    "convert_report",
]
