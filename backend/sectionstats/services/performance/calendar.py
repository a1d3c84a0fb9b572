"""
Calendar Annotation - PR and trophy flags for the Year > Month history.

The route engine computes the calendar summary itself; this module only
reads it and marks which entries are year bests or all-time records.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sectionstats.services.performance.adapter import Direction


@dataclass(frozen=True)
class CalendarBest:
    """Fastest traversal of one direction within a calendar period."""
    best_time: float
    best_pace: float
    best_activity_id: str

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["CalendarBest"]:
        if not raw:
            return None
        return cls(
            best_time=float(raw.get("bestTime", 0.0)),
            best_pace=float(raw.get("bestPace", 0.0)),
            best_activity_id=str(raw.get("bestActivityId", "")),
        )


@dataclass
class CalendarMonth:
    month: int  # 1-12
    traversal_count: int
    forward: Optional[CalendarBest] = None
    reverse: Optional[CalendarBest] = None


@dataclass
class CalendarYear:
    year: int
    traversal_count: int
    forward: Optional[CalendarBest] = None
    reverse: Optional[CalendarBest] = None
    months: List[CalendarMonth] = field(default_factory=list)


@dataclass
class CalendarSummary:
    """Engine-computed history, most recent year first."""
    years: List[CalendarYear] = field(default_factory=list)
    forward_pr: Optional[CalendarBest] = None
    reverse_pr: Optional[CalendarBest] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CalendarSummary":
        """Build a summary from the engine's camelCase payload."""
        years = []
        for raw_year in raw.get("years") or []:
            months = [
                CalendarMonth(
                    month=int(m["month"]),
                    traversal_count=int(m.get("traversalCount", 0)),
                    forward=CalendarBest.from_dict(m.get("forward")),
                    reverse=CalendarBest.from_dict(m.get("reverse")),
                )
                for m in raw_year.get("months") or []
            ]
            years.append(CalendarYear(
                year=int(raw_year["year"]),
                traversal_count=int(raw_year.get("traversalCount", 0)),
                forward=CalendarBest.from_dict(raw_year.get("forward")),
                reverse=CalendarBest.from_dict(raw_year.get("reverse")),
                months=months,
            ))

        return cls(
            years=years,
            forward_pr=CalendarBest.from_dict(raw.get("forwardPr")),
            reverse_pr=CalendarBest.from_dict(raw.get("reversePr")),
        )


@dataclass
class AnnotatedMonth:
    month: CalendarMonth
    forward_is_year_best: bool = False
    reverse_is_year_best: bool = False
    forward_is_overall_pr: bool = False
    reverse_is_overall_pr: bool = False


@dataclass
class AnnotatedYear:
    year: CalendarYear
    best: Optional[CalendarBest]
    best_direction: Optional[Direction]
    forward_is_overall_pr: bool = False
    reverse_is_overall_pr: bool = False
    months: List[AnnotatedMonth] = field(default_factory=list)


def _same_activity(entry: Optional[CalendarBest], other: Optional[CalendarBest]) -> bool:
    return entry is not None and other is not None and entry.best_activity_id == other.best_activity_id


def year_best(year: CalendarYear) -> Tuple[Optional[CalendarBest], Optional[Direction]]:
    """Faster of the year's two directions; forward wins ties."""
    if year.forward and year.reverse:
        if year.forward.best_time <= year.reverse.best_time:
            return year.forward, Direction.SAME
        return year.reverse, Direction.REVERSE
    if year.forward:
        return year.forward, Direction.SAME
    if year.reverse:
        return year.reverse, Direction.REVERSE
    return None, None


def annotate_calendar(summary: CalendarSummary) -> List[AnnotatedYear]:
    """
    Mark year bests and all-time PRs in a calendar summary.

    Args:
        summary: Engine-computed calendar summary (not modified)

    Returns:
        One AnnotatedYear per year, in the summary's order
    """
    annotated = []
    for year in summary.years:
        best, best_direction = year_best(year)

        months = [
            AnnotatedMonth(
                month=month,
                forward_is_year_best=_same_activity(month.forward, year.forward),
                reverse_is_year_best=_same_activity(month.reverse, year.reverse),
                forward_is_overall_pr=_same_activity(month.forward, summary.forward_pr),
                reverse_is_overall_pr=_same_activity(month.reverse, summary.reverse_pr),
            )
            for month in year.months
        ]

        annotated.append(AnnotatedYear(
            year=year,
            best=best,
            best_direction=best_direction,
            forward_is_overall_pr=_same_activity(year.forward, summary.forward_pr),
            reverse_is_overall_pr=_same_activity(year.reverse, summary.reverse_pr),
            months=months,
        ))

    return annotated
