"""
Fixed-schema report table.

The column set is decided before any row is filled (see TableSchema), and
every row has exactly one cell per column. Cells hold ``None`` for "no
value"; the empty string appears only in rendered output.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from polyline_report.config import LENGTH_DECIMALS, SEGMENT_COLUMN_PREFIX

Cell = Optional[str]
Row = Tuple[Cell, ...]


def format_length(value: float, decimals: int = LENGTH_DECIMALS) -> str:
    """Round and render a length as plain decimal text.

    Trailing zeros are dropped: 5.0 -> "5", 3.10 -> "3.1", 7.854 -> "7.85".
    """
    text = f"{round(value, decimals):.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def segment_column(position: int, unit: Optional[str] = None) -> str:
    """Header of the 1-based segment column, e.g. Segment_1 or Segment_1(m)."""
    name = f"{SEGMENT_COLUMN_PREFIX}{position}"
    if unit:
        name += f"({unit})"
    return name


@dataclass(frozen=True)
class TableSchema:
    """Column layout inferred from the data before rows are built."""
    leading_columns: Tuple[str, ...]
    max_segments: int
    unit: Optional[str] = None
    trailing_columns: Tuple[str, ...] = ()

    @property
    def columns(self) -> Tuple[str, ...]:
        segments = tuple(segment_column(i, self.unit) for i in range(1, self.max_segments + 1))
        return self.leading_columns + segments + self.trailing_columns

    def segment_cells(self, lengths: Sequence[float], factor: float = 1.0) -> Tuple[Cell, ...]:
        """Formatted lengths padded with None up to max_segments."""
        cells: List[Cell] = [format_length(length * factor) for length in lengths]
        cells.extend([None] * (self.max_segments - len(cells)))
        return tuple(cells)


@dataclass
class ReportTable:
    """Report grid: column names plus rows of optional string cells."""
    columns: Tuple[str, ...]
    rows: List[Row] = field(default_factory=list)

    def add_row(self, cells: Sequence[Cell]) -> None:
        if len(cells) != len(self.columns):
            raise ValueError(
                f"Row has {len(cells)} cells, table has {len(self.columns)} columns"
            )
        self.rows.append(tuple(cells))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def rendered_rows(self) -> List[List[str]]:
        """Rows with absent cells rendered as empty strings."""
        return [["" if cell is None else cell for cell in row] for row in self.rows]
