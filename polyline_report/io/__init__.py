"""DXF input."""

from polyline_report.io.dxf_reader import (
    DrawingData,
    DxfLoadError,
    EntityNotFoundError,
    drawing_from_document,
    load_drawing,
    read_polyline,
)

__all__ = [
    "DrawingData",
    "DxfLoadError",
    "EntityNotFoundError",
    "drawing_from_document",
    "load_drawing",
    "read_polyline",
]
