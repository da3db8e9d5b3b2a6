"""
Geometry primitives for polyline measurement.

Types:
  - Point: (x, y, z) in world coordinates
  - SegmentKind: LINE or ARC
  - Segment: one measured span of a polyline
  - Marker: block reference used as an endpoint anchor
  - Annotation: positioned text
  - CircularArc: parameterization of one bulged span
  - Polyline: curve reference: OCS vertices, bulges, elevation, extrusion
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np
from ezdxf.math import OCS, Vec3, bulge_to_arc

from polyline_report.config import ARC_PARAMETER_TOLERANCE, BULGE_EPSILON

logger = logging.getLogger(__name__)

Point = Tuple[float, float, float]

TWO_PI = 2.0 * math.pi


class ArcParameterError(ValueError):
    """A point does not lie within the sweep of an arc span."""


class SegmentKind(Enum):
    """Span type between two consecutive polyline vertices."""
    LINE = "line"
    ARC = "arc"


@dataclass(frozen=True)
class Segment:
    """One measured span of a polyline.

    Attributes:
        start: first vertex of the span.
        end: second vertex of the span.
        length: measured length (chord for lines, arc length for arcs).
        kind: LINE or ARC.
        source_curve_index: 0-based position of the producing curve
            within the selection that built the group.
    """
    start: Point
    end: Point
    length: float
    kind: SegmentKind = SegmentKind.LINE
    source_curve_index: int = 0


@dataclass(frozen=True)
class Marker:
    """Block reference: insert point and block name."""
    position: Point
    name: str


@dataclass(frozen=True)
class Annotation:
    """Single-line or multi-line text placed at a point."""
    position: Point
    text: str


def as_point(value: Sequence[float]) -> Point:
    """Coerce any 2D/3D sequence (tuple, Vec3, ndarray) to a Point."""
    coords = [float(c) for c in value]
    if len(coords) == 2:
        coords.append(0.0)
    return (coords[0], coords[1], coords[2])


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


@dataclass(frozen=True)
class CircularArc:
    """Counter-clockwise circular arc in a plane.

    The arc lives in the plane spanned by ``u_axis`` and ``v_axis`` around
    ``center``. Angles are measured from ``u_axis`` towards ``v_axis``; the
    arc runs from ``start_angle`` over ``sweep`` radians.
    """
    center: Point
    radius: float
    start_angle: float
    sweep: float
    u_axis: Point = (1.0, 0.0, 0.0)
    v_axis: Point = (0.0, 1.0, 0.0)

    @classmethod
    def from_bulge(
        cls,
        start: Sequence[float],
        end: Sequence[float],
        bulge: float,
        elevation: float = 0.0,
        extrusion: Sequence[float] = (0.0, 0.0, 1.0),
    ) -> 'CircularArc':
        """Build the arc of a bulged LWPOLYLINE span.

        Args:
            start: span start in OCS (x, y).
            end: span end in OCS (x, y).
            bulge: tan(sweep / 4); negative for clockwise spans.
            elevation: OCS z of the polyline.
            extrusion: OCS z-axis in WCS.
        """
        center_2d, start_angle, end_angle, radius = bulge_to_arc(
            (start[0], start[1]), (end[0], end[1]), bulge
        )
        ocs = OCS(Vec3(extrusion))
        center = ocs.to_wcs(Vec3(center_2d.x, center_2d.y, elevation))
        sweep = (end_angle - start_angle) % TWO_PI
        return cls(
            center=as_point(center),
            radius=float(radius),
            start_angle=float(start_angle),
            sweep=float(sweep),
            u_axis=as_point(ocs.ux),
            v_axis=as_point(ocs.uy),
        )

    @property
    def length(self) -> float:
        return self.radius * self.sweep

    def parameter_of(self, point: Sequence[float], tolerance: float = ARC_PARAMETER_TOLERANCE) -> float:
        """Angular offset of ``point`` from the arc start, in [0, sweep].

        Raises:
            ArcParameterError: if the point falls outside the sweep by
                more than ``tolerance`` radians.
        """
        d = np.asarray(point, dtype=np.float64) - np.asarray(self.center)
        angle = math.atan2(float(d @ np.asarray(self.v_axis)), float(d @ np.asarray(self.u_axis)))
        t = (angle - self.start_angle) % TWO_PI

        if t <= self.sweep + tolerance:
            return min(t, self.sweep)
        # Just below the start angle wraps to almost a full turn
        if TWO_PI - t <= tolerance:
            return 0.0
        raise ArcParameterError(
            f"Point {tuple(point)} is outside arc sweep "
            f"(offset {t:.6g} rad, sweep {self.sweep:.6g} rad)"
        )

    def length_between(self, t0: float, t1: float) -> float:
        """Arc length between two angular offsets."""
        return self.radius * abs(t1 - t0)


@dataclass
class Polyline:
    """Lightweight polyline as stored in a DXF LWPOLYLINE.

    Vertices are in OCS; ``vertices`` gives them in WCS. ``bulges[i]``
    describes the span from vertex i to vertex i+1.
    """
    points: List[Tuple[float, float]]
    bulges: List[float] = field(default_factory=list)
    elevation: float = 0.0
    extrusion: Point = (0.0, 0.0, 1.0)
    handle: str = ""
    layer: str = "0"
    closed: bool = False

    def __post_init__(self) -> None:
        if len(self.bulges) < len(self.points):
            self.bulges = list(self.bulges) + [0.0] * (len(self.points) - len(self.bulges))

    @property
    def vertex_count(self) -> int:
        return len(self.points)

    @property
    def vertices(self) -> List[Point]:
        ocs = OCS(Vec3(self.extrusion))
        return [as_point(ocs.to_wcs(Vec3(x, y, self.elevation))) for x, y in self.points]

    def segment_kind_at(self, index: int) -> SegmentKind:
        if abs(self.bulges[index]) > BULGE_EPSILON:
            return SegmentKind.ARC
        return SegmentKind.LINE

    def arc_at(self, index: int) -> CircularArc:
        """Arc parameterization of the span starting at vertex ``index``."""
        if self.segment_kind_at(index) is not SegmentKind.ARC:
            raise ValueError(f"Span {index} of polyline {self.handle!r} is not an arc")
        return CircularArc.from_bulge(
            self.points[index],
            self.points[index + 1],
            self.bulges[index],
            elevation=self.elevation,
            extrusion=self.extrusion,
        )
