"""
Reading polylines, blocks and texts from DXF drawings.

Uses the ezdxf library. Only modelspace entities are considered:
- LWPOLYLINE       -> Polyline (vertices in OCS + bulges)
- INSERT           -> Marker (block name at insert point, WCS)
- TEXT / MTEXT     -> Annotation (plain text at insert point, WCS)
- LEADER / MULTILEADER are read on demand as label entities.

Usage:
    from polyline_report.io.dxf_reader import load_drawing

    drawing = load_drawing("plant.dxf")
    pipes = drawing.polylines_on_layers(["PIPES"])
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

import ezdxf
from ezdxf.document import Drawing
from ezdxf.lldxf.const import DXFStructureError
from ezdxf.tools.text import plain_mtext

from polyline_report.association.associator import find_nearby_text
from polyline_report.config import LEADER_SEARCH_RADIUS
from polyline_report.geometry.primitives import Annotation, Marker, Polyline, as_point

logger = logging.getLogger(__name__)


class DxfLoadError(Exception):
    """DXF file is missing, unreadable or malformed."""


class EntityNotFoundError(KeyError):
    """No modelspace entity with the requested handle, or wrong type."""


def read_polyline(entity) -> Polyline:
    """Convert an ezdxf LWPOLYLINE to a Polyline."""
    points = entity.get_points(format="xyb")
    return Polyline(
        points=[(float(x), float(y)) for x, y, _ in points],
        bulges=[float(b) for _, _, b in points],
        elevation=float(entity.dxf.get("elevation", 0.0)),
        extrusion=as_point(entity.dxf.get("extrusion", (0.0, 0.0, 1.0))),
        handle=entity.dxf.handle,
        layer=entity.dxf.layer,
        closed=bool(entity.closed),
    )


def read_markers(msp) -> List[Marker]:
    """Block references in modelspace, in drawing order."""
    markers = []
    for insert in msp.query("INSERT"):
        position = insert.ocs().to_wcs(insert.dxf.insert)
        markers.append(Marker(position=as_point(position), name=insert.dxf.name))
    return markers


def read_annotations(msp) -> List[Annotation]:
    """TEXT and MTEXT entities in modelspace, in drawing order."""
    annotations = []
    for entity in msp.query("TEXT MTEXT"):
        if entity.dxftype() == "TEXT":
            position = entity.ocs().to_wcs(entity.dxf.insert)
            text = entity.dxf.text
        else:
            position = entity.dxf.insert
            text = entity.plain_text()
        annotations.append(Annotation(position=as_point(position), text=text))
    return annotations


@dataclass
class DrawingData:
    """A loaded drawing with its markers and annotations extracted."""
    doc: Drawing
    path: str = ""
    markers: List[Marker] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    @property
    def modelspace(self):
        return self.doc.modelspace()

    def layer_names(self) -> List[str]:
        return sorted(layer.dxf.name for layer in self.doc.layers)

    def polylines(self) -> List[Polyline]:
        return [read_polyline(e) for e in self.modelspace.query("LWPOLYLINE")]

    def polylines_on_layers(self, layers: Sequence[str]) -> List[Polyline]:
        """All LWPOLYLINEs whose layer is in ``layers``, in drawing order."""
        wanted = set(layers)
        return [p for p in self.polylines() if p.layer in wanted]

    def _entity(self, handle: str):
        entity = self.doc.entitydb.get(handle.strip().upper())
        if entity is None or not entity.is_alive:
            raise EntityNotFoundError(f"No entity with handle {handle!r}")
        return entity

    def polyline(self, handle: str) -> Polyline:
        """LWPOLYLINE by handle.

        Raises:
            EntityNotFoundError: unknown handle or not an LWPOLYLINE.
        """
        entity = self._entity(handle)
        if entity.dxftype() != "LWPOLYLINE":
            raise EntityNotFoundError(
                f"Entity {handle!r} is {entity.dxftype()}, not LWPOLYLINE"
            )
        return read_polyline(entity)

    def entity_text(self, handle: str, leader_radius: float = LEADER_SEARCH_RADIUS) -> str:
        """Label text carried by a picked entity.

        TEXT and MTEXT give their own text, MULTILEADER its MText
        content, both without formatting codes. A LEADER with an
        arrowhead gives the first text within ``leader_radius`` of its
        last vertex. Anything else gives "".
        """
        entity = self._entity(handle)
        kind = entity.dxftype()

        if kind == "TEXT":
            return entity.dxf.text
        if kind == "MTEXT":
            return entity.plain_text()
        if kind == "MULTILEADER":
            return plain_mtext(entity.get_mtext_content())
        if kind == "LEADER":
            vertices = list(entity.vertices)
            if not vertices or not entity.dxf.get("has_arrowhead", 1):
                return ""
            text = find_nearby_text(vertices[-1], self.annotations, leader_radius)
            return text or ""

        logger.debug("Entity %s (%s) carries no label text", handle, kind)
        return ""


def load_drawing(path: Union[str, Path]) -> DrawingData:
    """Read a DXF file and extract its markers and annotations.

    Raises:
        DxfLoadError: if the file is missing or not a valid DXF.
    """
    path = str(path)
    if not Path(path).is_file():
        raise DxfLoadError(f"File not found: {path!r}")

    try:
        doc = ezdxf.readfile(path)
    except IOError as exc:
        raise DxfLoadError(f"Cannot read DXF file {path!r}: {exc}") from exc
    except DXFStructureError as exc:
        raise DxfLoadError(f"Malformed DXF file {path!r}: {exc}") from exc

    msp = doc.modelspace()
    drawing = DrawingData(
        doc=doc,
        path=path,
        markers=read_markers(msp),
        annotations=read_annotations(msp),
    )
    logger.info(
        "Loaded %s: %d polylines, %d blocks, %d texts",
        path, len(msp.query("LWPOLYLINE")), len(drawing.markers), len(drawing.annotations),
    )
    return drawing


def drawing_from_document(doc: Drawing, path: Optional[str] = None) -> DrawingData:
    """Wrap an in-memory ezdxf document (e.g. one built with ezdxf.new())."""
    msp = doc.modelspace()
    return DrawingData(
        doc=doc,
        path=path or "",
        markers=read_markers(msp),
        annotations=read_annotations(msp),
    )
