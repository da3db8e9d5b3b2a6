"""
Pytest configuration and fixtures for the polyline report tests.

Provides:
- In-memory polylines (lines, quarter arc, mixed)
- DXF drawings synthesized with ezdxf in tmp_path
- Logging reset between tests
"""

import logging
import math
from pathlib import Path
from typing import Dict

import ezdxf
import pytest

from polyline_report.geometry.primitives import Polyline
from polyline_report.logging_config import PACKAGE_LOGGER

# Bulge of a counter-clockwise quarter circle
QUARTER_BULGE = math.tan(math.pi / 8)


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging() in a previous test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ============================================================================
# In-memory polylines
# ============================================================================

@pytest.fixture
def line_polyline() -> Polyline:
    """Single 3-4-5 straight span."""
    return Polyline(points=[(0.0, 0.0), (3.0, 4.0)], handle="L1")


@pytest.fixture
def quarter_arc_polyline() -> Polyline:
    """Quarter circle of radius 5 around (5, 0), from (10, 0) to (5, 5)."""
    return Polyline(points=[(10.0, 0.0), (5.0, 5.0)], bulges=[QUARTER_BULGE, 0.0], handle="A1")


@pytest.fixture
def mixed_polyline() -> Polyline:
    """Spans of length 5, 3 and a quarter arc of radius 5 (5*pi/2)."""
    return Polyline(
        points=[(0.0, -8.0), (0.0, -3.0), (0.0, 0.0), (5.0, 5.0)],
        bulges=[0.0, 0.0, QUARTER_BULGE, 0.0],
        handle="M1",
    )


# ============================================================================
# DXF drawings
# ============================================================================

def _add_block(doc, name: str) -> None:
    block = doc.blocks.new(name=name)
    block.add_circle((0, 0), radius=0.5)


@pytest.fixture
def plant_dxf(tmp_path: Path) -> Path:
    """Drawing with one pipe between two blocks, an unconnected cable and labels.

    PIPES:  (0,0) -> (100,0) -> (100,50); VALVE at (0,0), PUMP at (100.5,50)
    CABLES: (200,0) -> (210,0); no blocks nearby
    Texts:  TEXT "V-101" near the valve, MTEXT "P-7" near the pump
    """
    doc = ezdxf.new("R2010")
    doc.layers.add("PIPES")
    doc.layers.add("CABLES")
    _add_block(doc, "VALVE")
    _add_block(doc, "PUMP")

    msp = doc.modelspace()
    msp.add_lwpolyline(
        [(0, 0, 0), (100, 0, 0), (100, 50, 0)],
        format="xyb",
        dxfattribs={"layer": "PIPES"},
    )
    msp.add_lwpolyline(
        [(200, 0, 0), (210, 0, 0)],
        format="xyb",
        dxfattribs={"layer": "CABLES"},
    )
    msp.add_blockref("VALVE", (0, 0))
    msp.add_blockref("PUMP", (100.5, 50))
    msp.add_text("V-101", dxfattribs={"insert": (3, 3), "height": 2.5})
    msp.add_mtext("P-7", dxfattribs={"insert": (102, 52), "char_height": 2.5})

    path = tmp_path / "plant.dxf"
    doc.saveas(path)
    return path


@pytest.fixture
def group_drawing(tmp_path: Path) -> Dict[str, object]:
    """Drawing for group reports; returns the path and entity handles.

    Keys: path, mixed (5, 3, 7.85), line (3-4-5), label_a, label_b,
    label_c (MTEXT), leader (arrow ending next to label_b), circle.
    """
    doc = ezdxf.new("R2010", setup=True)
    msp = doc.modelspace()

    mixed = msp.add_lwpolyline(
        [(0, -8, 0), (0, -3, 0), (0, 0, QUARTER_BULGE), (5, 5, 0)],
        format="xyb",
    )
    line = msp.add_lwpolyline([(20, 0, 0), (23, 4, 0)], format="xyb")
    label_a = msp.add_text("A", dxfattribs={"insert": (-5, 0)})
    label_b = msp.add_text("B", dxfattribs={"insert": (40, 40)})
    label_c = msp.add_mtext("C", dxfattribs={"insert": (60, 60)})
    leader = msp.add_leader(vertices=[(30, 10), (39, 39)])
    circle = msp.add_circle((100, 100), radius=1)

    path = tmp_path / "groups.dxf"
    doc.saveas(path)
    return {
        "path": path,
        "mixed": mixed.dxf.handle,
        "line": line.dxf.handle,
        "label_a": label_a.dxf.handle,
        "label_b": label_b.dxf.handle,
        "label_c": label_c.dxf.handle,
        "leader": leader.dxf.handle,
        "circle": circle.dxf.handle,
    }
