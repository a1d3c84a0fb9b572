"""
Section performance API endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from sectionstats.core.logging import get_logger
from sectionstats.services.geometry import TraceCache, simplify_polyline
from sectionstats.services.performance import (
    Bucket,
    CalendarSummary,
    DirectionalCandidate,
    DirectionStats,
    SectionDescriptor,
    SectionPerformanceCalculator,
    SectionPerformanceReport,
    annotate_calendar,
)
from sectionstats.services.performance.calendar import CalendarBest
from sectionstats.services.performance.chart import ChartSeries
from sectionstats.services.performance.ranker import ChartSummaryStats

logger = get_logger(__name__)
router = APIRouter()


# ========================================
# Request/Response Schemas
# ========================================

class PerformanceRequest(BaseModel):
    """Request to compute a section's leaderboard and charts."""
    section: dict[str, Any] = Field(..., description="Section descriptor from the route engine")
    engineResult: dict[str, Any] | None = Field(None, description="Raw section performance result")
    timeRange: str = Field("1y", description="1m, 3m, 6m, 1y or all")
    bucketType: str | None = Field(None, description="weekly, monthly, quarterly or yearly")
    now: float | None = Field(None, description="Reference Unix time, defaults to server time")


class CandidateResponse(BaseModel):
    """Fastest traversal of one activity in one direction."""
    activityId: str
    activityName: str
    activityDate: int
    bestTime: float
    bestPace: float
    direction: str
    sectionDistance: float


class RankedRowResponse(CandidateResponse):
    """Leaderboard row with its delta badge."""
    rank: int
    isBest: bool
    occurrenceCount: int = 1
    delta: str | None = None
    isFaster: bool = False


class BucketRowResponse(CandidateResponse):
    """Bucket representative with its occurrence count."""
    bucketKey: int
    occurrenceCount: int
    delta: str | None = None
    isFaster: bool = False


class SummaryResponse(BaseModel):
    bestTime: float | None
    avgTime: float | None
    totalActivities: int
    lastActivity: int | None


class DirectionStatsResponse(BaseModel):
    avgTime: float | None
    lastActivity: int
    count: int


class ChartPointResponse(BaseModel):
    x: int
    activityId: str
    speed: float
    date: int
    direction: str
    sectionTime: int
    lapCount: int


class ChartResponse(BaseModel):
    points: list[ChartPointResponse]
    minSpeed: float
    maxSpeed: float
    bestIndex: int
    hasReverseRuns: bool


class PerformanceResponse(BaseModel):
    """Section leaderboard, buckets and chart data."""
    sectionId: str
    resultKind: str
    metric: str
    timeRange: str
    bucketType: str
    useBucketed: bool
    globalPr: CandidateResponse | None
    windowPr: CandidateResponse | None
    ranked: list[RankedRowResponse]
    summary: SummaryResponse
    chart: ChartResponse
    buckets: list[BucketRowResponse]
    bucketSummary: SummaryResponse
    bucketChart: ChartResponse
    forwardStats: DirectionStatsResponse | None
    reverseStats: DirectionStatsResponse | None


class PointModel(BaseModel):
    lat: float
    lng: float


class SimplifyRequest(BaseModel):
    """Request to simplify a GPS trace."""
    points: list[PointModel]
    tolerance: float | None = Field(None, ge=0, description="Tolerance in degrees")
    sectionId: str | None = Field(None, description="Section shown, enables caching")
    activityId: str | None = Field(None, description="Activity the trace belongs to")


class SimplifyResponse(BaseModel):
    points: list[PointModel]
    originalCount: int
    simplifiedCount: int


class CalendarRequest(BaseModel):
    """Engine-computed calendar summary to annotate."""
    summary: dict[str, Any]


# ========================================
# Converters
# ========================================

def _candidate(candidate: DirectionalCandidate) -> dict[str, Any]:
    return {
        "activityId": candidate.activity_id,
        "activityName": candidate.activity_name,
        "activityDate": candidate.activity_date_unix,
        "bestTime": candidate.best_time_seconds,
        "bestPace": candidate.best_pace,
        "direction": candidate.direction.value,
        "sectionDistance": candidate.section_distance_meters,
    }


def _summary(stats: ChartSummaryStats) -> SummaryResponse:
    return SummaryResponse(
        bestTime=stats.best_time,
        avgTime=stats.avg_time,
        totalActivities=stats.total_activities,
        lastActivity=stats.last_activity,
    )


def _direction_stats(stats: Optional[DirectionStats]) -> Optional[DirectionStatsResponse]:
    if stats is None:
        return None
    return DirectionStatsResponse(
        avgTime=stats.avg_time,
        lastActivity=stats.last_activity_date,
        count=stats.count,
    )


def _chart(series: ChartSeries) -> ChartResponse:
    return ChartResponse(
        points=[
            ChartPointResponse(
                x=p.x,
                activityId=p.activity_id,
                speed=p.speed,
                date=p.date_unix,
                direction=p.direction.value,
                sectionTime=p.section_time,
                lapCount=p.lap_count,
            )
            for p in series.points
        ],
        minSpeed=series.min_speed,
        maxSpeed=series.max_speed,
        bestIndex=series.best_index,
        hasReverseRuns=series.has_reverse,
    )


def _bucket_row(report: SectionPerformanceReport, bucket: Bucket) -> BucketRowResponse:
    delta = report.bucket_delta_for(bucket)
    return BucketRowResponse(
        **_candidate(bucket.candidate),
        bucketKey=bucket.bucket_key,
        occurrenceCount=bucket.occurrence_count,
        delta=delta.display_string,
        isFaster=delta.is_faster,
    )


def _calendar_best(best: Optional[CalendarBest]) -> Optional[dict[str, Any]]:
    if best is None:
        return None
    return {
        "bestTime": best.best_time,
        "bestPace": best.best_pace,
        "bestActivityId": best.best_activity_id,
    }


def get_trace_cache(request: Request) -> TraceCache:
    """Trace cache owned by the running application."""
    return request.app.state.trace_cache


# ========================================
# API Endpoints
# ========================================

@router.post("/performance", response_model=PerformanceResponse)
async def section_performance(request: PerformanceRequest):
    """
    Compute ranked traversals, buckets and chart series for a section.
    """
    try:
        section = SectionDescriptor.from_dict(request.section)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid section: {e}")

    calculator = SectionPerformanceCalculator()
    try:
        report = calculator.compute_from_engine(
            section,
            request.engineResult,
            time_range=request.timeRange,
            bucket_type=request.bucketType,
            now=request.now,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    ranked = []
    for entry in report.ranked.entries:
        delta = report.delta_for(entry.candidate)
        ranked.append(RankedRowResponse(
            **_candidate(entry.candidate),
            rank=entry.rank,
            isBest=entry.is_best,
            occurrenceCount=entry.occurrence_count,
            delta=delta.display_string,
            isFaster=delta.is_faster,
        ))

    return PerformanceResponse(
        sectionId=report.section_id,
        resultKind=report.result_kind,
        metric=report.strategy.metric,
        timeRange=report.time_range,
        bucketType=report.bucket_type.value,
        useBucketed=report.use_bucketed,
        globalPr=_candidate(report.global_pr) if report.global_pr else None,
        windowPr=_candidate(report.window_pr) if report.window_pr else None,
        ranked=ranked,
        summary=_summary(report.summary),
        chart=_chart(report.chart),
        buckets=[_bucket_row(report, b) for b in report.buckets.buckets],
        bucketSummary=_summary(report.bucket_summary),
        bucketChart=_chart(report.bucket_chart),
        forwardStats=_direction_stats(report.buckets.forward_stats),
        reverseStats=_direction_stats(report.buckets.reverse_stats),
    )


@router.post("/simplify", response_model=SimplifyResponse)
async def simplify_trace(
    request: SimplifyRequest,
    cache: TraceCache = Depends(get_trace_cache),
):
    """
    Simplify a GPS trace for map rendering.

    Traces identified by section and activity are cached.
    """
    points = [(p.lat, p.lng) for p in request.points]

    if request.sectionId and request.activityId:
        simplified = cache.get_or_simplify(
            request.sectionId,
            request.activityId,
            points,
            request.tolerance,
        )
    else:
        simplified = simplify_polyline(points, request.tolerance)

    logger.debug(
        "Simplified trace",
        original_count=len(points),
        simplified_count=len(simplified)
    )

    return SimplifyResponse(
        points=[PointModel(lat=lat, lng=lng) for lat, lng in simplified],
        originalCount=len(points),
        simplifiedCount=len(simplified),
    )


@router.post("/calendar")
async def annotate_calendar_summary(request: CalendarRequest):
    """
    Mark year bests and all-time PRs in an engine calendar summary.
    """
    try:
        summary = CalendarSummary.from_dict(request.summary)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid calendar summary: {e}")

    years = []
    for annotated in annotate_calendar(summary):
        year = annotated.year
        years.append({
            "year": year.year,
            "traversalCount": year.traversal_count,
            "best": _calendar_best(annotated.best),
            "bestDirection": annotated.best_direction.value if annotated.best_direction else None,
            "forward": _calendar_best(year.forward),
            "reverse": _calendar_best(year.reverse),
            "isForwardPr": annotated.forward_is_overall_pr,
            "isReversePr": annotated.reverse_is_overall_pr,
            "months": [
                {
                    "month": m.month.month,
                    "traversalCount": m.month.traversal_count,
                    "forward": _calendar_best(m.month.forward),
                    "reverse": _calendar_best(m.month.reverse),
                    "isForwardYearBest": m.forward_is_year_best,
                    "isReverseYearBest": m.reverse_is_year_best,
                    "isForwardPr": m.forward_is_overall_pr,
                    "isReversePr": m.reverse_is_overall_pr,
                }
                for m in annotated.months
            ],
        })

    return {"years": years}
