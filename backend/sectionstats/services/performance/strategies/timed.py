"""
Timed Strategy - Section-time deltas for rides and other sports.
"""
from typing import Optional

from sectionstats.services.performance.delta import DeltaResult, time_delta
from sectionstats.services.performance.flattener import DirectionalCandidate
from sectionstats.services.performance.strategies.base import DeltaStrategy


class TimedStrategy(DeltaStrategy):
    """
    Strategy comparing traversals by elapsed section time.

    Used for every sport that is not running-style.
    """

    metric = "time"

    def compute_delta(
        self,
        candidate: DirectionalCandidate,
        best: DirectionalCandidate,
        threshold: Optional[float] = None
    ) -> DeltaResult:
        if candidate.best_time_seconds <= 0:
            return DeltaResult.hidden()
        return time_delta(
            candidate.best_time_seconds,
            best.best_time_seconds,
            threshold,
        )

    def display_value(self, candidate: DirectionalCandidate) -> float:
        return candidate.best_time_seconds
