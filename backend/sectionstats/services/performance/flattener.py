"""
Lap Flattener - Reduce per-activity laps to directional best candidates.

An activity can cross a section several times, in either direction.
Charts and rankings only need the fastest traversal per direction, so
each record collapses to at most two candidates.
"""
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sectionstats.core.logging import get_logger
from sectionstats.services.performance.adapter import (
    Direction,
    Lap,
    PerformanceRecord,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class DirectionalCandidate:
    """Fastest traversal of a section by one activity in one direction."""
    activity_id: str
    activity_name: str
    activity_date_unix: int
    best_time_seconds: float
    best_pace: float  # m/s
    is_reverse: bool
    section_distance_meters: float

    @property
    def direction(self) -> Direction:
        return Direction.REVERSE if self.is_reverse else Direction.SAME


def _is_usable(lap: Lap) -> bool:
    return math.isfinite(lap.time_seconds) and lap.time_seconds >= 0


def _better(lap: Lap, best: Optional[Lap]) -> bool:
    """
    Check if a lap beats the current best.

    Positive times always beat zero-duration laps, which only stand in
    when a direction has nothing else.
    """
    if best is None:
        return True
    if best.time_seconds <= 0:
        return lap.time_seconds > 0
    return 0 < lap.time_seconds < best.time_seconds


def _safe_pace(pace: float) -> float:
    return pace if math.isfinite(pace) and pace > 0 else 0.0


def flatten_record(record: PerformanceRecord) -> List[DirectionalCandidate]:
    """
    Flatten one record into 0-2 directional candidates.

    Args:
        record: Performance record with its laps

    Returns:
        Same-direction candidate (if any) followed by reverse (if any)
    """
    best: Dict[Direction, Optional[Lap]] = {
        Direction.SAME: None,
        Direction.REVERSE: None,
    }

    for lap in record.laps:
        if not _is_usable(lap):
            continue
        direction = lap.direction or Direction.SAME
        if _better(lap, best[direction]):
            best[direction] = lap

    activity_date = record.activity_date_unix
    candidates = []
    for direction in (Direction.SAME, Direction.REVERSE):
        lap = best[direction]
        if lap is None:
            continue
        is_zero_duration = lap.time_seconds <= 0
        candidates.append(DirectionalCandidate(
            activity_id=record.activity_id,
            activity_name=record.activity_name,
            activity_date_unix=activity_date,
            best_time_seconds=lap.time_seconds,
            best_pace=0.0 if is_zero_duration else _safe_pace(lap.pace),
            is_reverse=direction is Direction.REVERSE,
            section_distance_meters=record.section_distance_meters,
        ))

    return candidates


def flatten_records(records: Iterable[PerformanceRecord]) -> List[DirectionalCandidate]:
    """
    Flatten performance records into directional best candidates.

    Args:
        records: Performance records, in any order

    Returns:
        Candidates in record order, same direction before reverse
    """
    candidates: List[DirectionalCandidate] = []
    record_count = 0
    for record in records:
        record_count += 1
        candidates.extend(flatten_record(record))

    logger.debug(
        "Flattened performance records",
        records_count=record_count,
        candidates_count=len(candidates)
    )

    return candidates
