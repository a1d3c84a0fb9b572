"""
Base Strategy - Abstract interface for sport-specific delta display.
"""
from abc import ABC, abstractmethod
from typing import Optional

from sectionstats.services.performance.delta import DeltaResult
from sectionstats.services.performance.flattener import DirectionalCandidate


class DeltaStrategy(ABC):
    """
    Abstract base class for comparing a traversal with the best one.

    Subclasses decide which metric rows are compared on:
    - Pace (seconds per km) for running-style sports
    - Section time for everything else
    """

    metric: str = "unknown"

    @abstractmethod
    def compute_delta(
        self,
        candidate: DirectionalCandidate,
        best: DirectionalCandidate,
        threshold: Optional[float] = None
    ) -> DeltaResult:
        """
        Compute the delta of a candidate relative to the best.

        Args:
            candidate: Row being labelled
            best: Window best (rank 1)
            threshold: Significance threshold, settings default if None

        Returns:
            DeltaResult for the row badge
        """
        pass

    @abstractmethod
    def display_value(self, candidate: DirectionalCandidate) -> float:
        """
        Numeric value a row shows for this metric.

        Args:
            candidate: Row being displayed

        Returns:
            Seconds per km or section seconds
        """
        pass

    def delta_for(
        self,
        candidate: DirectionalCandidate,
        best: Optional[DirectionalCandidate],
        threshold: Optional[float] = None
    ) -> DeltaResult:
        """Delta with the shared "is the best" and "no best" handling."""
        if best is None or candidate == best:
            return DeltaResult.hidden(is_faster=best is not None)
        return self.compute_delta(candidate, best, threshold)
