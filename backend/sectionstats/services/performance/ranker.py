"""
Ranker - Order candidates by speed and derive leaderboard values.

Rank 1 is the fastest candidate (highest pace in m/s). Equal paces keep
their input order; no secondary key is applied.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from sectionstats.core.logging import get_logger
from sectionstats.services.performance.bucketer import Bucket, BucketResult
from sectionstats.services.performance.flattener import DirectionalCandidate

logger = get_logger(__name__)


@dataclass(frozen=True)
class RankedEntry:
    """A candidate with its 1-based leaderboard position."""
    rank: int
    candidate: DirectionalCandidate
    occurrence_count: int = 1

    @property
    def is_best(self) -> bool:
        return self.rank == 1


@dataclass
class RankedView:
    """Candidates sorted fastest first."""
    entries: List[RankedEntry] = field(default_factory=list)
    average_time: Optional[float] = None

    @property
    def best(self) -> Optional[DirectionalCandidate]:
        return self.entries[0].candidate if self.entries else None

    @property
    def best_time(self) -> Optional[float]:
        return self.best.best_time_seconds if self.best else None

    @property
    def best_pace(self) -> Optional[float]:
        return self.best.best_pace if self.best else None

    def rank_map(self) -> Dict[str, int]:
        """Activity ID -> rank; an activity ranked twice keeps its better rank."""
        ranks: Dict[str, int] = {}
        for entry in self.entries:
            ranks.setdefault(entry.candidate.activity_id, entry.rank)
        return ranks

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class ChartSummaryStats:
    """Header values for a section performance chart."""
    best_time: Optional[float]
    avg_time: Optional[float]
    total_activities: int
    last_activity: Optional[int]  # Unix seconds


def average_time(candidates: Sequence[DirectionalCandidate]) -> Optional[float]:
    """Mean section time over positive times only."""
    times = [
        c.best_time_seconds for c in candidates
        if math.isfinite(c.best_time_seconds) and c.best_time_seconds > 0
    ]
    if not times:
        return None
    return sum(times) / len(times)


def _rank(
    candidates: Sequence[DirectionalCandidate],
    counts: Sequence[int]
) -> RankedView:
    rows = [
        (candidate, count) for candidate, count in zip(candidates, counts)
        if math.isfinite(candidate.best_pace)
    ]
    dropped = len(candidates) - len(rows)
    if dropped:
        logger.debug("Dropped candidates with non-finite pace", dropped=dropped)

    # sorted() is stable, so equal paces keep input order
    rows = sorted(rows, key=lambda row: row[0].best_pace, reverse=True)

    entries = [
        RankedEntry(rank=idx + 1, candidate=candidate, occurrence_count=count)
        for idx, (candidate, count) in enumerate(rows)
    ]

    return RankedView(
        entries=entries,
        average_time=average_time([candidate for candidate, _ in rows]),
    )


def rank_candidates(candidates: Sequence[DirectionalCandidate]) -> RankedView:
    """
    Rank raw candidates by pace, fastest first.

    Args:
        candidates: Flattened (optionally range-filtered) candidates

    Returns:
        RankedView; non-finite paces are left out, zero paces rank last
    """
    return _rank(candidates, [1] * len(candidates))


def rank_buckets(buckets: Sequence[Bucket]) -> RankedView:
    """Rank the retained candidate of each bucket, keeping its occurrence count."""
    return _rank(
        [b.candidate for b in buckets],
        [b.occurrence_count for b in buckets],
    )


def summary_stats(
    candidates: Sequence[DirectionalCandidate],
    view: Optional[RankedView] = None
) -> ChartSummaryStats:
    """
    Summary values for the un-bucketed chart.

    Args:
        candidates: Candidates shown on the chart
        view: Ranked view of the same candidates, computed if None

    Returns:
        ChartSummaryStats with the window best as best time
    """
    if view is None:
        view = rank_candidates(candidates)

    return ChartSummaryStats(
        best_time=view.best_time,
        avg_time=view.average_time,
        total_activities=len(view),
        last_activity=max((c.activity_date_unix for c in candidates), default=None),
    )


def bucket_summary_stats(
    result: BucketResult,
    global_pr: Optional[DirectionalCandidate]
) -> ChartSummaryStats:
    """
    Summary values for the bucketed chart.

    The best time is the all-time PR so it stays visible when the
    selected window excludes it.
    """
    times = [b.best_time_seconds for b in result.buckets if b.best_time_seconds > 0]

    return ChartSummaryStats(
        best_time=global_pr.best_time_seconds if global_pr else None,
        avg_time=sum(times) / len(times) if times else None,
        total_activities=result.total_traversals,
        last_activity=result.buckets[-1].activity_date_unix if result.buckets else None,
    )
