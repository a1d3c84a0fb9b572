"""
Pytest configuration and shared fixtures.

Builders for laps, records and candidates live here so every test module
describes its data the same way.
"""
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from sectionstats.services.performance import (
    Direction,
    DirectionalCandidate,
    Lap,
    PerformanceRecord,
    SectionDescriptor,
)

# 2024-06-01T00:00:00Z
NOW = 1717200000
DAY = 86400


def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


@pytest.fixture
def now() -> int:
    """Reference time used by range-dependent tests."""
    return NOW


@pytest.fixture
def make_lap() -> Callable[..., Lap]:
    """Factory for laps; pace defaults to distance / time."""
    def _make(
        time_seconds: float,
        direction: Direction = Direction.SAME,
        distance: float = 1000.0,
        pace: Optional[float] = None,
    ) -> Lap:
        if pace is None:
            pace = distance / time_seconds if time_seconds > 0 else 0.0
        return Lap(
            time_seconds=time_seconds,
            pace=pace,
            distance_meters=distance,
            direction=direction,
        )
    return _make


@pytest.fixture
def make_record(make_lap) -> Callable[..., PerformanceRecord]:
    """
    Factory for performance records.

    laps is a list of (time_seconds, direction) pairs.
    """
    def _make(
        activity_id: str,
        timestamp: float,
        laps: Sequence[Tuple[float, Direction]],
        name: Optional[str] = None,
        distance: float = 1000.0,
    ) -> PerformanceRecord:
        return PerformanceRecord(
            activity_id=activity_id,
            activity_name=name or f"Activity {activity_id}",
            activity_date=_to_datetime(timestamp),
            section_distance_meters=distance,
            laps=[make_lap(t, d, distance) for t, d in laps],
        )
    return _make


@pytest.fixture
def make_candidate() -> Callable[..., DirectionalCandidate]:
    """Factory for directional candidates; pace defaults to 1000 / time."""
    def _make(
        activity_id: str,
        time_seconds: float,
        timestamp: int = NOW - DAY,
        is_reverse: bool = False,
        pace: Optional[float] = None,
    ) -> DirectionalCandidate:
        if pace is None:
            pace = 1000.0 / time_seconds if time_seconds > 0 else 0.0
        return DirectionalCandidate(
            activity_id=activity_id,
            activity_name=f"Activity {activity_id}",
            activity_date_unix=timestamp,
            best_time_seconds=time_seconds,
            best_pace=pace,
            is_reverse=is_reverse,
            section_distance_meters=1000.0,
        )
    return _make


@pytest.fixture
def make_section() -> Callable[..., SectionDescriptor]:
    """Factory for section descriptors."""
    def _make(
        sport_type: str = "Ride",
        activity_ids: Optional[List[str]] = None,
        section_id: str = "section-1",
    ) -> SectionDescriptor:
        return SectionDescriptor(
            id=section_id,
            sport_type=sport_type,
            distance_meters=1000.0,
            activity_ids=activity_ids or [],
        )
    return _make
