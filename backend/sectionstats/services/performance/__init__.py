"""
Performance module - Section traversal leaderboards and charts.

This module provides:
- An adapter normalizing route-engine results into performance records
- The lap flattener, range filter, bucketer and ranker
- Sport-specific delta strategies
- Calendar summary annotation
- The calculator orchestrating the whole pipeline
"""
from sectionstats.services.performance.adapter import (
    Direction,
    Lap,
    PerformanceRecord,
    SectionDescriptor,
    ActivityPortion,
    MeasuredPerformances,
    EstimatedPerformances,
    Unavailable,
    EngineResult,
    EnginePerformanceAdapter,
)
from sectionstats.services.performance.bucketer import (
    Bucket,
    BucketResult,
    BucketType,
    DirectionStats,
    bucket_candidates,
)
from sectionstats.services.performance.calculator import (
    SectionPerformanceCalculator,
    SectionPerformanceReport,
)
from sectionstats.services.performance.calendar import (
    CalendarSummary,
    annotate_calendar,
)
from sectionstats.services.performance.delta import DeltaResult
from sectionstats.services.performance.flattener import (
    DirectionalCandidate,
    flatten_records,
)
from sectionstats.services.performance.range_filter import (
    RangeFilterResult,
    filter_by_days,
    filter_by_range,
)
from sectionstats.services.performance.ranker import (
    RankedEntry,
    RankedView,
    rank_buckets,
    rank_candidates,
)

__all__ = [
    # Data structures
    "Direction",
    "Lap",
    "PerformanceRecord",
    "SectionDescriptor",
    "ActivityPortion",
    "DirectionalCandidate",
    "Bucket",
    "BucketResult",
    "BucketType",
    "DirectionStats",
    "RankedEntry",
    "RankedView",
    "DeltaResult",
    "RangeFilterResult",
    "CalendarSummary",
    # Engine results
    "MeasuredPerformances",
    "EstimatedPerformances",
    "Unavailable",
    "EngineResult",
    "EnginePerformanceAdapter",
    # Pipeline
    "flatten_records",
    "filter_by_days",
    "filter_by_range",
    "bucket_candidates",
    "rank_candidates",
    "rank_buckets",
    "annotate_calendar",
    # Calculator
    "SectionPerformanceCalculator",
    "SectionPerformanceReport",
]
