"""
Geometry module - GPS trace reduction for map rendering.
"""
from sectionstats.services.geometry.cache import TraceCache
from sectionstats.services.geometry.simplify import (
    perpendicular_distance,
    simplify_polyline,
)

__all__ = [
    "TraceCache",
    "perpendicular_distance",
    "simplify_polyline",
]
