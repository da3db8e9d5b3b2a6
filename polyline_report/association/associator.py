"""
Association of polyline endpoints with nearby blocks and texts.

Nearest-marker search is a fold over the candidates with an explicit
running minimum. A candidate wins only when it is strictly closer than
both the tolerance and the best so far, so among equally distant
candidates the first one encountered is kept.
"""

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from polyline_report.config import ASSOCIATION_TOLERANCE, LABEL_SEARCH_RADIUS
from polyline_report.geometry.primitives import Annotation, Marker, distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerMatch:
    """Nearest marker found for a point."""
    marker: Marker
    distance: float


@dataclass(frozen=True)
class EndpointAssociation:
    """Block and text associated with one polyline endpoint.

    ``None`` means nothing was found; it is rendered as an empty cell
    only when the report is serialized.
    """
    name: Optional[str] = None
    text: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.name is not None


_NO_MATCH: Tuple[float, Optional[Marker]] = (math.inf, None)


def nearest_marker(
    point: Sequence[float],
    candidates: Iterable[Marker],
    tolerance: float = ASSOCIATION_TOLERANCE,
) -> Optional[MarkerMatch]:
    """Find the marker nearest to ``point`` within ``tolerance``.

    Args:
        point: query point.
        candidates: markers in iteration order.
        tolerance: exclusive distance limit.

    Returns:
        MarkerMatch, or None if no candidate is closer than ``tolerance``.
    """
    def step(best: Tuple[float, Optional[Marker]], marker: Marker) -> Tuple[float, Optional[Marker]]:
        d = distance(point, marker.position)
        if d < tolerance and d < best[0]:
            return d, marker
        return best

    best_distance, best_marker = reduce(step, candidates, _NO_MATCH)
    if best_marker is None:
        return None
    return MarkerMatch(marker=best_marker, distance=best_distance)


def find_nearby_text(
    position: Sequence[float],
    annotations: Iterable[Annotation],
    search_radius: float = LABEL_SEARCH_RADIUS,
) -> Optional[str]:
    """Text of the first annotation within ``search_radius`` (inclusive)."""
    for annotation in annotations:
        if distance(position, annotation.position) <= search_radius:
            return annotation.text
    return None


def apply_name_mapping(name: str, mapping: Optional[Mapping[str, str]]) -> str:
    """Rewrite a block name through a user mapping; unknown names pass through."""
    if not mapping:
        return name
    return mapping.get(name, name)


def associate_endpoint(
    point: Sequence[float],
    markers: Sequence[Marker],
    annotations: Sequence[Annotation],
    name_mapping: Optional[Mapping[str, str]] = None,
    tolerance: float = ASSOCIATION_TOLERANCE,
    search_radius: float = LABEL_SEARCH_RADIUS,
) -> EndpointAssociation:
    """Associate a polyline endpoint with its block and the block's label.

    The label is looked up around the matched block's insert point, and
    the block name is rewritten through ``name_mapping`` afterwards.
    """
    match = nearest_marker(point, markers, tolerance)
    if match is None:
        return EndpointAssociation()

    text = find_nearby_text(match.marker.position, annotations, search_radius)
    name = apply_name_mapping(match.marker.name, name_mapping)
    logger.debug("Endpoint %s -> block %r (d=%.4f)", tuple(point), name, match.distance)
    return EndpointAssociation(name=name, text=text)
