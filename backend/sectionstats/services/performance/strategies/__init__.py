"""
Sport-specific delta strategies.

Running-style sections compare rows by pace, everything else by
section time.
"""
from sectionstats.core.config import settings
from sectionstats.core.logging import get_logger
from sectionstats.services.performance.strategies.base import DeltaStrategy
from sectionstats.services.performance.strategies.running import RunningStrategy
from sectionstats.services.performance.strategies.timed import TimedStrategy

logger = get_logger(__name__)


def get_delta_strategy(sport_type: str) -> DeltaStrategy:
    """
    Get the delta strategy for a section's sport type.

    Args:
        sport_type: Sport type of the section (Run, Ride, ...)

    Returns:
        Strategy instance
    """
    if settings.is_running_sport(sport_type):
        return RunningStrategy()

    logger.debug("Using time deltas for sport type", sport_type=sport_type)
    return TimedStrategy()


__all__ = [
    "DeltaStrategy",
    "RunningStrategy",
    "TimedStrategy",
    "get_delta_strategy",
]
