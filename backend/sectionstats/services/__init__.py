"""
Services module - Section analysis business logic.

Modules:
- performance: Lap flattening, range filtering, bucketing, ranking, deltas
- geometry: Polyline simplification and the simplified-trace cache
"""
from sectionstats.services.performance import SectionPerformanceCalculator
from sectionstats.services.geometry import TraceCache, simplify_polyline

__all__ = [
    "SectionPerformanceCalculator",
    "TraceCache",
    "simplify_polyline",
]
