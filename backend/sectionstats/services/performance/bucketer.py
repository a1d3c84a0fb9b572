"""
Bucketer - Group candidates into calendar buckets per direction.

Sections with hundreds of traversals are charted as one point per
bucket: the fastest traversal in each (bucket, direction) pair, along
with how many traversals fell into it.

Bucket keys:
- weekly: rolling 7-day index from the Unix epoch (not ISO weeks)
- monthly: year * 12 + month (0-based)
- quarterly: year * 4 + quarter (0-based)
- yearly: year

Calendar fields are taken in UTC so keys do not depend on the host.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from sectionstats.core.config import DEFAULT_BUCKET_TYPE
from sectionstats.core.logging import get_logger
from sectionstats.services.performance.adapter import Direction
from sectionstats.services.performance.flattener import DirectionalCandidate
from sectionstats.services.performance.range_filter import find_global_pr

logger = get_logger(__name__)

SECONDS_PER_WEEK = 86400 * 7


class BucketType(str, Enum):
    """Calendar granularity of a bucketed chart."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def for_range(cls, time_range: str) -> "BucketType":
        """Default granularity for a time range key."""
        try:
            return cls(DEFAULT_BUCKET_TYPE[time_range])
        except KeyError:
            raise ValueError(f"Unknown time range: {time_range}")


@dataclass
class Bucket:
    """Fastest candidate of one (bucket, direction) pair."""
    bucket_key: int
    direction: Direction
    candidate: DirectionalCandidate
    occurrence_count: int = 1

    @property
    def best_time_seconds(self) -> float:
        return self.candidate.best_time_seconds

    @property
    def best_pace(self) -> float:
        return self.candidate.best_pace

    @property
    def activity_date_unix(self) -> int:
        return self.candidate.activity_date_unix


@dataclass
class DirectionStats:
    """Aggregates over the filtered candidates of one direction."""
    avg_time: Optional[float]
    last_activity_date: int
    count: int


@dataclass
class BucketResult:
    """Output of the bucketer for one granularity."""
    buckets: List[Bucket]
    total_traversals: int
    window_pr: Optional[DirectionalCandidate]
    forward_stats: Optional[DirectionStats]
    reverse_stats: Optional[DirectionStats]

    def for_direction(self, direction: Direction) -> List[Bucket]:
        return [b for b in self.buckets if b.direction is direction]

    @property
    def has_reverse(self) -> bool:
        return any(b.direction is Direction.REVERSE for b in self.buckets)


def bucket_key(timestamp: int, bucket_type: BucketType) -> int:
    """
    Calendar bucket index of a Unix timestamp.

    Args:
        timestamp: Unix seconds
        bucket_type: Granularity

    Returns:
        Integer bucket index, increasing with time
    """
    if bucket_type is BucketType.WEEKLY:
        return timestamp // SECONDS_PER_WEEK

    date = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    month = date.month - 1

    if bucket_type is BucketType.MONTHLY:
        return date.year * 12 + month
    if bucket_type is BucketType.QUARTERLY:
        return date.year * 4 + month // 3
    return date.year


def _faster(candidate: DirectionalCandidate, current: DirectionalCandidate) -> bool:
    """Zero-duration candidates only hold a bucket until a real time arrives."""
    if current.best_time_seconds <= 0:
        return candidate.best_time_seconds > 0
    return 0 < candidate.best_time_seconds < current.best_time_seconds


def direction_stats(
    candidates: Sequence[DirectionalCandidate]
) -> Optional[DirectionStats]:
    """
    Average time, latest date and count for one direction's candidates.

    Zero-duration candidates are counted but left out of the average.
    """
    if not candidates:
        return None

    times = [c.best_time_seconds for c in candidates if c.best_time_seconds > 0]

    return DirectionStats(
        avg_time=sum(times) / len(times) if times else None,
        last_activity_date=max(c.activity_date_unix for c in candidates),
        count=len(candidates),
    )


def bucket_candidates(
    candidates: Sequence[DirectionalCandidate],
    bucket_type: BucketType
) -> BucketResult:
    """
    Keep the fastest candidate per (bucket, direction) and count occurrences.

    Args:
        candidates: Range-filtered candidates
        bucket_type: Granularity

    Returns:
        BucketResult with buckets sorted by the retained candidate's date
    """
    bucket_type = BucketType(bucket_type)
    bucket_map: Dict[Tuple[int, Direction], Bucket] = {}

    for candidate in candidates:
        key = (bucket_key(candidate.activity_date_unix, bucket_type), candidate.direction)
        existing = bucket_map.get(key)

        if existing is None:
            bucket_map[key] = Bucket(
                bucket_key=key[0],
                direction=key[1],
                candidate=candidate,
            )
            continue

        if _faster(candidate, existing.candidate):
            existing.candidate = candidate
        existing.occurrence_count += 1

    buckets = sorted(bucket_map.values(), key=lambda b: b.activity_date_unix)

    forward = [c for c in candidates if not c.is_reverse]
    reverse = [c for c in candidates if c.is_reverse]

    logger.debug(
        "Bucketed candidates",
        bucket_type=bucket_type.value,
        candidates_count=len(candidates),
        buckets_count=len(buckets)
    )

    return BucketResult(
        buckets=buckets,
        total_traversals=len(candidates),
        window_pr=find_global_pr(candidates),
        forward_stats=direction_stats(forward),
        reverse_stats=direction_stats(reverse),
    )
