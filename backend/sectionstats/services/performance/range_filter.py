"""
Range Filter - Restrict candidates to a trailing time window.
"""
import math
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sectionstats.core.config import settings
from sectionstats.core.logging import get_logger
from sectionstats.services.performance.flattener import DirectionalCandidate

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class RangeFilterResult:
    """Candidates inside the window plus the all-time record."""
    in_range: List[DirectionalCandidate]
    global_pr: Optional[DirectionalCandidate]
    cutoff: float


def compute_cutoff(days: int, now: float) -> float:
    """
    Earliest Unix time included in a trailing window.

    Args:
        days: Window length in days, 0 for unbounded
        now: Reference time (Unix seconds)

    Returns:
        Cutoff timestamp, -inf when unbounded
    """
    if days < 0:
        raise ValueError(f"Window length must not be negative: {days}")
    if days == 0:
        return -math.inf
    return now - days * SECONDS_PER_DAY


def find_global_pr(
    candidates: Sequence[DirectionalCandidate]
) -> Optional[DirectionalCandidate]:
    """Fastest candidate over all time; earliest in input order on ties."""
    best = None
    for candidate in candidates:
        if candidate.best_time_seconds <= 0:
            continue
        if best is None or candidate.best_time_seconds < best.best_time_seconds:
            best = candidate
    return best


def filter_by_days(
    candidates: Sequence[DirectionalCandidate],
    days: int,
    now: Optional[float] = None
) -> RangeFilterResult:
    """
    Keep candidates whose activity falls inside the trailing window.

    Args:
        candidates: Flattened candidates
        days: Window length in days, 0 for unbounded
        now: Reference time (Unix seconds), defaults to the current time

    Returns:
        RangeFilterResult with in-range candidates and the global PR
    """
    reference = time.time() if now is None else now
    cutoff = compute_cutoff(days, reference)

    in_range = [c for c in candidates if c.activity_date_unix >= cutoff]

    logger.debug(
        "Filtered candidates by range",
        days=days,
        total=len(candidates),
        in_range=len(in_range)
    )

    return RangeFilterResult(
        in_range=in_range,
        global_pr=find_global_pr(candidates),
        cutoff=cutoff,
    )


def filter_by_range(
    candidates: Sequence[DirectionalCandidate],
    time_range: str,
    now: Optional[float] = None
) -> RangeFilterResult:
    """Filter by a named time range (1m, 3m, 6m, 1y, all)."""
    return filter_by_days(candidates, settings.range_days(time_range), now)
