"""
Unit tests for polyline_report.io.dxf_reader.

Tests:
- Loading drawings and load errors
- Polylines, markers and annotations
- Entity lookup by handle and label text extraction
"""

import math

import ezdxf
import pytest
from ezdxf.math import Vec2
from ezdxf.render import mleader

from polyline_report.geometry.primitives import SegmentKind
from polyline_report.geometry.segmenter import segment_polyline
from polyline_report.io.dxf_reader import (
    DxfLoadError,
    EntityNotFoundError,
    drawing_from_document,
    load_drawing,
    read_polyline,
)


class TestLoadDrawing:
    """Tests for load_drawing."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(DxfLoadError):
            load_drawing(tmp_path / "missing.dxf")

    def test_not_a_dxf(self, tmp_path):
        path = tmp_path / "broken.dxf"
        path.write_text("this is not a drawing\n", encoding="utf-8")

        with pytest.raises(DxfLoadError):
            load_drawing(path)

    def test_markers_and_annotations(self, plant_dxf):
        drawing = load_drawing(plant_dxf)

        assert [m.name for m in drawing.markers] == ["VALVE", "PUMP"]
        assert drawing.markers[1].position == pytest.approx((100.5, 50.0, 0.0))
        assert sorted(a.text for a in drawing.annotations) == ["P-7", "V-101"]

    def test_layer_names(self, plant_dxf):
        names = load_drawing(plant_dxf).layer_names()

        assert "PIPES" in names
        assert "CABLES" in names
        assert names == sorted(names)

    def test_polylines_on_layers(self, plant_dxf):
        drawing = load_drawing(plant_dxf)

        assert len(drawing.polylines()) == 2
        pipes = drawing.polylines_on_layers(["PIPES"])
        assert len(pipes) == 1
        assert pipes[0].layer == "PIPES"
        assert drawing.polylines_on_layers(["NOPE"]) == []


class TestReadPolyline:
    """Tests for read_polyline."""

    def test_bulges_and_metadata(self):
        doc = ezdxf.new()
        entity = doc.modelspace().add_lwpolyline(
            [(10, 0, math.tan(math.pi / 8)), (5, 5, 0)],
            format="xyb",
            dxfattribs={"layer": "ARCS", "elevation": 2.0},
        )
        entity.closed = True

        polyline = read_polyline(entity)

        assert polyline.points == [(10.0, 0.0), (5.0, 5.0)]
        assert polyline.bulges[0] == pytest.approx(math.tan(math.pi / 8))
        assert polyline.layer == "ARCS"
        assert polyline.handle == entity.dxf.handle
        assert polyline.closed
        assert polyline.vertices[0] == (10.0, 0.0, 2.0)

    def test_arc_measured(self):
        doc = ezdxf.new()
        entity = doc.modelspace().add_lwpolyline(
            [(10, 0, math.tan(math.pi / 8)), (5, 5, 0)], format="xyb"
        )
        segment = segment_polyline(read_polyline(entity))[0]

        assert segment.kind is SegmentKind.ARC
        assert segment.length == pytest.approx(5 * math.pi / 2)


class TestEntityLookup:
    """Tests for DrawingData.polyline and DrawingData.entity_text."""

    @pytest.fixture
    def drawing(self, group_drawing):
        return load_drawing(group_drawing["path"])

    def test_polyline_by_handle(self, drawing, group_drawing):
        polyline = drawing.polyline(group_drawing["mixed"])
        assert polyline.vertex_count == 4

    def test_handle_case_insensitive(self, drawing, group_drawing):
        polyline = drawing.polyline(group_drawing["line"].lower())
        assert polyline.handle == group_drawing["line"]

    def test_unknown_handle(self, drawing):
        with pytest.raises(EntityNotFoundError):
            drawing.polyline("FFFFFF")

    def test_wrong_entity_type(self, drawing, group_drawing):
        with pytest.raises(EntityNotFoundError):
            drawing.polyline(group_drawing["label_a"])

    def test_text(self, drawing, group_drawing):
        assert drawing.entity_text(group_drawing["label_a"]) == "A"

    def test_mtext(self, drawing, group_drawing):
        assert drawing.entity_text(group_drawing["label_c"]) == "C"

    def test_leader_picks_text_at_arrow(self, drawing, group_drawing):
        assert drawing.entity_text(group_drawing["leader"]) == "B"

    def test_leader_without_nearby_text(self, drawing, group_drawing):
        assert drawing.entity_text(group_drawing["leader"], leader_radius=0.5) == ""

    def test_entity_without_text(self, drawing, group_drawing):
        assert drawing.entity_text(group_drawing["circle"]) == ""


class TestDrawingFromDocument:
    """Tests for drawing_from_document."""

    def test_in_memory_document(self):
        doc = ezdxf.new()
        doc.blocks.new(name="TAG")
        msp = doc.modelspace()
        msp.add_blockref("TAG", (1, 2))
        msp.add_text("hello", dxfattribs={"insert": (1, 3)})

        drawing = drawing_from_document(doc)

        assert drawing.path == ""
        assert drawing.markers[0].name == "TAG"
        assert drawing.markers[0].position == (1.0, 2.0, 0.0)
        assert drawing.annotations[0].text == "hello"

    def test_multileader_text_is_plain(self):
        doc = ezdxf.new("R2010", setup=True)
        builder = doc.modelspace().add_multileader_mtext("Standard")
        builder.set_content("{\\fArial|b1;Tag-9}")
        builder.add_leader_line(mleader.ConnectionSide.left, [Vec2(-10, 5)])
        builder.build(insert=Vec2(0, 0))

        drawing = drawing_from_document(doc)

        assert drawing.entity_text(builder.multileader.dxf.handle) == "Tag-9"
