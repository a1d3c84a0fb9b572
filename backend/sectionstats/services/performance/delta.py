"""
Delta Formatter - Signed differences from the best traversal.

Format: "+M:SS" when at least a minute, otherwise "+Ns".
"+" means slower than the best, "-" means faster.
"""
import math
from dataclasses import dataclass
from typing import Optional

from sectionstats.core.config import settings


@dataclass(frozen=True)
class DeltaResult:
    """Display string for a row badge; None hides the badge."""
    display_string: Optional[str]
    is_faster: bool

    @classmethod
    def hidden(cls, is_faster: bool = False) -> "DeltaResult":
        return cls(display_string=None, is_faster=is_faster)


def format_signed_seconds(delta: float) -> str:
    """
    Format a signed number of seconds.

    Args:
        delta: Seconds, positive for slower

    Returns:
        "+1:05", "-42s", ...
    """
    sign = "+" if delta > 0 else "-"
    magnitude = abs(delta)
    if magnitude >= 60:
        minutes = int(magnitude // 60)
        seconds = int(magnitude % 60)
        return f"{sign}{minutes}:{seconds:02d}"
    return f"{sign}{int(magnitude)}s"


def _to_result(delta: float, threshold: Optional[float]) -> DeltaResult:
    if threshold is None:
        threshold = settings.DELTA_SIGNIFICANCE_SECONDS
    if not math.isfinite(delta):
        return DeltaResult.hidden()
    if abs(delta) < threshold:
        return DeltaResult.hidden(is_faster=delta <= 0)
    return DeltaResult(
        display_string=format_signed_seconds(delta),
        is_faster=delta <= 0,
    )


def seconds_per_km(pace: float) -> float:
    """Convert m/s to seconds per kilometre; non-positive speed is infinite."""
    if not math.isfinite(pace) or pace <= 0:
        return math.inf
    return 1000 / pace


def time_delta(
    candidate_time: float,
    best_time: float,
    threshold: Optional[float] = None
) -> DeltaResult:
    """Delta between section times in seconds."""
    return _to_result(candidate_time - best_time, threshold)


def pace_delta(
    candidate_pace: float,
    best_pace: float,
    threshold: Optional[float] = None
) -> DeltaResult:
    """Delta between paces, in seconds per kilometre."""
    candidate_per_km = seconds_per_km(candidate_pace)
    best_per_km = seconds_per_km(best_pace)
    if math.isinf(candidate_per_km) or math.isinf(best_per_km):
        return DeltaResult.hidden()
    return _to_result(candidate_per_km - best_per_km, threshold)
