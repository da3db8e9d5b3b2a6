"""Endpoint association with blocks (markers) and texts (annotations)."""

from polyline_report.association.associator import (
    EndpointAssociation,
    MarkerMatch,
    apply_name_mapping,
    associate_endpoint,
    find_nearby_text,
    nearest_marker,
)

__all__ = [
    "EndpointAssociation",
    "MarkerMatch",
    "apply_name_mapping",
    "associate_endpoint",
    "find_nearby_text",
    "nearest_marker",
]
