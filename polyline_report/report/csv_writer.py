"""
CSV serialization of report tables.

Fields are quoted (inner quotes doubled) only when they contain a comma,
a double quote, a CR or an LF. Files are written as UTF-8 with a BOM by
default so spreadsheet tools detect the encoding of non-ASCII labels.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Sequence, Union

from polyline_report.config import CSV_SUFFIX
from polyline_report.report.table import ReportTable

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Report could not be written; the underlying OSError is chained."""

    def __init__(self, path: Path, cause: Exception):
        super().__init__(f"Failed to write report {str(path)!r}: {cause}")
        self.path = path
        self.cause = cause


def _csv_line(row: Sequence[str]) -> str:
    buffer = io.StringIO()
    # The writer quotes fields holding any lineterminator character, so
    # "\r\n" makes it quote a bare "\r" as well as "\n".
    csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n").writerow(row)
    return buffer.getvalue()[:-2] + "\n"


def to_delimited_text(table: ReportTable) -> str:
    """Serialize a table as CSV text: header line, then one line per row."""
    lines = [_csv_line(table.columns)]
    lines.extend(_csv_line(row) for row in table.rendered_rows())
    return "".join(lines)


def csv_path_for(path: Union[str, Path]) -> Path:
    """Same path with the extension forced to .csv."""
    return Path(path).with_suffix(CSV_SUFFIX)


def write_csv(table: ReportTable, path: Union[str, Path], bom: bool = True) -> Path:
    """Write a table to ``path`` (extension forced to .csv).

    Args:
        table: report table.
        path: target path; any other extension is replaced.
        bom: prepend a UTF-8 byte-order mark.

    Returns:
        Path actually written.

    Raises:
        ExportError: if the file cannot be written.
    """
    target = csv_path_for(path)
    encoding = "utf-8-sig" if bom else "utf-8"
    payload = to_delimited_text(table)

    try:
        with open(target, "w", encoding=encoding, newline="") as f:
            f.write(payload)
    except OSError as exc:
        raise ExportError(target, exc) from exc

    logger.info("Report written: %s (%d rows)", target, table.row_count)
    return target
