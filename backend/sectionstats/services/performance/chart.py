"""
Chart Series - Points and axis bounds for the performance chart.
"""
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from sectionstats.core.config import settings
from sectionstats.services.performance.adapter import Direction
from sectionstats.services.performance.bucketer import Bucket
from sectionstats.services.performance.flattener import DirectionalCandidate


@dataclass(frozen=True)
class ChartPoint:
    """One plotted traversal (or bucket representative)."""
    x: int
    activity_id: str
    activity_name: str
    speed: float  # m/s
    date_unix: int
    direction: Direction
    section_time: int
    section_distance: float
    lap_count: int = 1


@dataclass
class ChartSeries:
    """Chronological points plus the y-axis range to draw them in."""
    points: List[ChartPoint] = field(default_factory=list)
    min_speed: float = 0.0
    max_speed: float = 1.0
    best_index: int = 0
    has_reverse: bool = False


def _build_series(points: List[ChartPoint], padding_ratio: float) -> ChartSeries:
    points = [p for p in points if math.isfinite(p.speed)]
    points = [replace(p, x=idx) for idx, p in enumerate(points)]

    if not points:
        return ChartSeries()

    speeds = [p.speed for p in points]
    low = min(speeds)
    high = max(speeds)
    padding = (high - low) * padding_ratio or 0.5

    # First occurrence wins on equal speed
    best_index = 0
    for idx, point in enumerate(points):
        if point.speed > points[best_index].speed:
            best_index = idx

    return ChartSeries(
        points=points,
        min_speed=max(0.0, low - padding),
        max_speed=high + padding,
        best_index=best_index,
        has_reverse=any(p.direction is Direction.REVERSE for p in points),
    )


def _point(candidate: DirectionalCandidate, lap_count: int) -> ChartPoint:
    return ChartPoint(
        x=0,
        activity_id=candidate.activity_id,
        activity_name=candidate.activity_name,
        speed=candidate.best_pace,
        date_unix=candidate.activity_date_unix,
        direction=candidate.direction,
        section_time=round(candidate.best_time_seconds),
        section_distance=candidate.section_distance_meters,
        lap_count=lap_count,
    )


def chart_series(
    candidates: Sequence[DirectionalCandidate],
    padding_ratio: Optional[float] = None
) -> ChartSeries:
    """
    Chart series for individual traversals, oldest first.

    Args:
        candidates: Candidates to plot
        padding_ratio: Fraction of the speed range added above and below

    Returns:
        ChartSeries; points with non-finite speed are dropped
    """
    if padding_ratio is None:
        padding_ratio = settings.CHART_PADDING_RATIO
    ordered = sorted(candidates, key=lambda c: c.activity_date_unix)
    return _build_series([_point(c, 1) for c in ordered], padding_ratio)


def bucket_chart_series(
    buckets: Sequence[Bucket],
    padding_ratio: Optional[float] = None
) -> ChartSeries:
    """Chart series with one point per bucket, in bucket order."""
    if padding_ratio is None:
        padding_ratio = settings.CHART_PADDING_RATIO
    points = [_point(b.candidate, b.occurrence_count) for b in buckets]
    return _build_series(points, padding_ratio)


def best_per_direction(buckets: Sequence[Bucket]) -> Dict[Direction, Optional[Bucket]]:
    """Fastest bucket (by pace) in each direction, ignoring zero times."""
    best: Dict[Direction, Optional[Bucket]] = {
        Direction.SAME: None,
        Direction.REVERSE: None,
    }
    for bucket in buckets:
        if bucket.best_time_seconds <= 0:
            continue
        current = best[bucket.direction]
        if current is None or bucket.best_pace > current.best_pace:
            best[bucket.direction] = bucket
    return best
