"""
Running Strategy - Pace-based deltas for running-style sections.

Runners read their splits as pace, so rows are compared in seconds per
kilometre rather than in raw section time.
"""
import math
from typing import Optional

from sectionstats.services.performance.delta import (
    DeltaResult,
    pace_delta,
    seconds_per_km,
)
from sectionstats.services.performance.flattener import DirectionalCandidate
from sectionstats.services.performance.strategies.timed import TimedStrategy


def _has_speed(pace: float) -> bool:
    return math.isfinite(pace) and pace > 0


class RunningStrategy(TimedStrategy):
    """
    Strategy comparing traversals by pace.

    Rows without a usable speed on either side fall back to the
    section-time delta.
    """

    metric = "pace"

    def compute_delta(
        self,
        candidate: DirectionalCandidate,
        best: DirectionalCandidate,
        threshold: Optional[float] = None
    ) -> DeltaResult:
        if _has_speed(candidate.best_pace) and _has_speed(best.best_pace):
            return pace_delta(candidate.best_pace, best.best_pace, threshold)
        return super().compute_delta(candidate, best, threshold)

    def display_value(self, candidate: DirectionalCandidate) -> float:
        return seconds_per_km(candidate.best_pace)
