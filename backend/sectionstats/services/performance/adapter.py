"""
Engine Result Adapter - Normalize route-engine performance payloads.

The native route engine reports section performances as camelCase JSON.
This module converts that payload into the domain records the pipeline
works with, once, at the boundary:

- MeasuredPerformances: engine produced per-lap timings
- EstimatedPerformances: no timings, records synthesised from the section
- Unavailable: payload missing or unusable
"""
import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from sectionstats.core.logging import get_logger

logger = get_logger(__name__)


class Direction(str, Enum):
    """Traversal direction relative to the section's canonical polyline."""
    SAME = "same"
    REVERSE = "reverse"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Direction":
        """Map an engine direction label; anything unknown is SAME."""
        if raw and str(raw).lower() in ("reverse", "backward"):
            return cls.REVERSE
        return cls.SAME


@dataclass(frozen=True)
class Lap:
    """Single measured traversal of a section within an activity."""
    time_seconds: float
    pace: float  # m/s
    distance_meters: float
    direction: Direction = Direction.SAME
    lap_id: Optional[str] = None


@dataclass
class PerformanceRecord:
    """All traversals of one section by one activity."""
    activity_id: str
    activity_name: str
    activity_date: datetime
    section_distance_meters: float
    laps: List[Lap] = field(default_factory=list)
    direction: Direction = Direction.SAME  # primary direction

    @property
    def activity_date_unix(self) -> int:
        """Activity start as whole Unix seconds."""
        return math.floor(self.activity_date.timestamp())


@dataclass(frozen=True)
class ActivityPortion:
    """How one activity overlaps the section, as reported by the engine."""
    activity_id: str
    direction: Direction = Direction.SAME
    distance_meters: Optional[float] = None


@dataclass
class SectionDescriptor:
    """Read-only description of a frequently travelled section."""
    id: str
    sport_type: str
    distance_meters: float
    activity_ids: List[str] = field(default_factory=list)
    polyline: List[Tuple[float, float]] = field(default_factory=list)
    activity_portions: Dict[str, ActivityPortion] = field(default_factory=dict)

    @property
    def activity_count(self) -> int:
        return len(self.activity_ids)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SectionDescriptor":
        """Build a descriptor from the engine's camelCase section payload."""
        portions = {}
        for portion in raw.get("activityPortions") or []:
            activity_id = str(portion.get("activityId"))
            portions[activity_id] = ActivityPortion(
                activity_id=activity_id,
                direction=Direction.parse(portion.get("direction")),
                distance_meters=portion.get("distanceMeters"),
            )

        polyline = []
        for point in raw.get("polyline") or []:
            if isinstance(point, dict):
                polyline.append((float(point["lat"]), float(point["lng"])))
            else:
                polyline.append((float(point[0]), float(point[1])))

        return cls(
            id=str(raw.get("id", "")),
            sport_type=str(raw.get("sportType", "")),
            distance_meters=float(raw.get("distanceMeters") or 0.0),
            activity_ids=[str(a) for a in raw.get("activityIds") or []],
            polyline=polyline,
            activity_portions=portions,
        )


# ========================================
# Tagged engine results
# ========================================

@dataclass
class MeasuredPerformances:
    """Engine returned lap timings measured from time streams."""
    records: List[PerformanceRecord]
    kind: str = "measured"


@dataclass
class EstimatedPerformances:
    """Engine had no timings; one lap-less record per section activity."""
    records: List[PerformanceRecord]
    kind: str = "estimated"


@dataclass
class Unavailable:
    """Engine result could not be used at all."""
    reason: str
    kind: str = "unavailable"

    @property
    def records(self) -> List[PerformanceRecord]:
        return []


EngineResult = Union[MeasuredPerformances, EstimatedPerformances, Unavailable]


def lap_pace(distance_meters: float, time_seconds: float) -> float:
    """Speed in m/s; zero-duration laps count as zero speed."""
    if time_seconds <= 0 or not math.isfinite(time_seconds):
        return 0.0
    pace = distance_meters / time_seconds
    return pace if math.isfinite(pace) else 0.0


class EnginePerformanceAdapter:
    """
    Adapter for the route engine's section performance payload.

    Usage:
        adapter = EnginePerformanceAdapter()
        result = adapter.normalize(raw_json, section)
        if isinstance(result, MeasuredPerformances):
            ...
    """

    source_name = "route_engine"

    def normalize(
        self,
        raw: Union[str, Dict[str, Any], None],
        section: SectionDescriptor,
        activity_names: Optional[Dict[str, str]] = None,
        activity_dates: Optional[Dict[str, datetime]] = None,
    ) -> EngineResult:
        """
        Normalize a raw engine payload.

        Args:
            raw: JSON string or already-decoded dict from the engine
            section: Section the performances belong to
            activity_names: Activity names, used for estimated records
            activity_dates: Activity start times, used for estimated records

        Returns:
            One of MeasuredPerformances, EstimatedPerformances, Unavailable
        """
        if raw is None or raw == "":
            return Unavailable(reason="empty engine result")

        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(
                    "Unparseable engine result",
                    section_id=section.id,
                    error=str(e)
                )
                return Unavailable(reason="invalid json")

        if not isinstance(raw, dict):
            return Unavailable(reason="unexpected payload type")

        raw_records = raw.get("records")
        if raw_records and not isinstance(raw_records, list):
            logger.warning(
                "Unexpected engine records type",
                section_id=section.id,
                records_type=type(raw_records).__name__
            )
            return Unavailable(reason="unexpected records type")

        if not raw_records:
            records = self._estimate_records(
                section,
                activity_names or {},
                activity_dates or {},
            )
            logger.debug(
                "Engine returned no records, using section estimates",
                section_id=section.id,
                estimated_count=len(records)
            )
            return EstimatedPerformances(records=records)

        records = []
        skipped = 0
        for raw_record in raw_records:
            record = self._convert_record(raw_record, section)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        logger.debug(
            "Normalized engine performances",
            section_id=section.id,
            records_count=len(records),
            skipped=skipped
        )

        return MeasuredPerformances(records=records)

    def _convert_record(
        self,
        raw_record: Dict[str, Any],
        section: SectionDescriptor
    ) -> Optional[PerformanceRecord]:
        """Convert one engine record; records without laps are dropped."""
        try:
            activity_id = str(raw_record["activityId"])
            activity_date = datetime.fromtimestamp(
                float(raw_record["activityDate"]), tz=timezone.utc
            )
            section_distance = float(
                raw_record.get("sectionDistance") or section.distance_meters
            )
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            logger.warning("Skipping malformed engine record", section_id=section.id)
            return None

        raw_laps = raw_record.get("laps") or []
        if not isinstance(raw_laps, list):
            logger.warning("Skipping engine record with malformed laps", section_id=section.id)
            return None

        laps = []
        for raw_lap in raw_laps:
            lap = self._convert_lap(raw_lap, section_distance)
            if lap is not None:
                laps.append(lap)

        if not laps:
            return None

        return PerformanceRecord(
            activity_id=activity_id,
            activity_name=str(raw_record.get("activityName") or ""),
            activity_date=activity_date,
            section_distance_meters=section_distance,
            laps=laps,
            direction=Direction.parse(raw_record.get("direction") or laps[0].direction.value),
        )

    def _convert_lap(
        self,
        raw_lap: Dict[str, Any],
        section_distance: float
    ) -> Optional[Lap]:
        """Convert one engine lap; laps without a numeric time are dropped."""
        try:
            time_seconds = float(raw_lap["time"])
            distance = float(raw_lap.get("distance") or section_distance)
        except (KeyError, TypeError, ValueError):
            return None

        if not math.isfinite(time_seconds):
            return None

        try:
            pace = float(raw_lap["pace"])
        except (KeyError, TypeError, ValueError):
            pace = math.nan
        if not math.isfinite(pace) or time_seconds <= 0:
            pace = lap_pace(distance, time_seconds)

        return Lap(
            time_seconds=time_seconds,
            pace=pace,
            distance_meters=distance,
            direction=Direction.parse(raw_lap.get("direction")),
            lap_id=raw_lap.get("id"),
        )

    def _estimate_records(
        self,
        section: SectionDescriptor,
        activity_names: Dict[str, str],
        activity_dates: Dict[str, datetime],
    ) -> List[PerformanceRecord]:
        """Build placeholder records from the section descriptor."""
        records = []
        for activity_id in section.activity_ids:
            portion = section.activity_portions.get(activity_id)
            distance = section.distance_meters
            if portion and portion.distance_meters:
                distance = portion.distance_meters

            records.append(PerformanceRecord(
                activity_id=activity_id,
                activity_name=activity_names.get(activity_id, ""),
                activity_date=activity_dates.get(
                    activity_id, datetime.fromtimestamp(0, tz=timezone.utc)
                ),
                section_distance_meters=distance,
                laps=[],
                direction=portion.direction if portion else Direction.SAME,
            ))

        return records
