"""
Section Performance Calculator - Main engine for section leaderboards.

Orchestrates:
- Engine result normalization
- Lap flattening
- Time-range filtering
- Calendar bucketing
- Ranking, summary stats and chart series
- Sport-specific delta display
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from sectionstats.core.config import settings
from sectionstats.core.logging import PipelineTimer, PipelineTimings, get_logger
from sectionstats.services.performance.adapter import (
    Direction,
    EngineResult,
    EnginePerformanceAdapter,
    MeasuredPerformances,
    PerformanceRecord,
    SectionDescriptor,
)
from sectionstats.services.performance.bucketer import (
    Bucket,
    BucketResult,
    BucketType,
    bucket_candidates,
)
from sectionstats.services.performance.chart import (
    ChartSeries,
    best_per_direction,
    bucket_chart_series,
    chart_series,
)
from sectionstats.services.performance.delta import DeltaResult
from sectionstats.services.performance.flattener import (
    DirectionalCandidate,
    flatten_records,
)
from sectionstats.services.performance.range_filter import filter_by_range
from sectionstats.services.performance.ranker import (
    ChartSummaryStats,
    RankedView,
    bucket_summary_stats,
    rank_buckets,
    rank_candidates,
    summary_stats,
)
from sectionstats.services.performance.strategies import (
    DeltaStrategy,
    get_delta_strategy,
)

logger = get_logger(__name__)


@dataclass
class SectionPerformanceReport:
    """Everything the section screen renders, for one range and granularity."""
    section_id: str
    sport_type: str
    time_range: str
    bucket_type: BucketType
    use_bucketed: bool
    result_kind: str
    strategy: DeltaStrategy

    # Individual traversals in the selected window
    candidates: List[DirectionalCandidate]
    in_range: List[DirectionalCandidate]
    global_pr: Optional[DirectionalCandidate]
    ranked: RankedView
    chart: ChartSeries
    summary: ChartSummaryStats

    # Bucketed view of the same window
    buckets: BucketResult
    bucket_ranked: RankedView
    bucket_chart: ChartSeries
    bucket_summary: ChartSummaryStats
    bucket_best: Dict[Direction, Optional[Bucket]]

    timings: PipelineTimings = field(default_factory=PipelineTimings)

    @property
    def window_pr(self) -> Optional[DirectionalCandidate]:
        return self.buckets.window_pr

    def delta_for(
        self,
        candidate: DirectionalCandidate,
        threshold: Optional[float] = None
    ) -> DeltaResult:
        """Delta of any candidate against the window best."""
        return self.strategy.delta_for(candidate, self.ranked.best, threshold)

    def bucket_delta_for(
        self,
        bucket: Bucket,
        threshold: Optional[float] = None
    ) -> DeltaResult:
        """Delta of a bucket representative against the bucketed best."""
        return self.strategy.delta_for(bucket.candidate, self.bucket_ranked.best, threshold)


class SectionPerformanceCalculator:
    """
    Main section performance engine.

    Usage:
        calculator = SectionPerformanceCalculator()
        report = calculator.compute(
            section=section,
            records=records,
            time_range="1y",
        )
        for entry in report.ranked.entries:
            badge = report.delta_for(entry.candidate)
    """

    def __init__(self, bucket_threshold: Optional[int] = None):
        self.adapter = EnginePerformanceAdapter()
        self.bucket_threshold = (
            settings.BUCKET_THRESHOLD if bucket_threshold is None else bucket_threshold
        )

    def compute(
        self,
        section: SectionDescriptor,
        records: Sequence[PerformanceRecord],
        time_range: str = "1y",
        bucket_type: Optional[Union[BucketType, str]] = None,
        now: Optional[float] = None,
        result_kind: str = MeasuredPerformances.kind,
    ) -> SectionPerformanceReport:
        """
        Run the full pipeline for one section.

        Args:
            section: Section descriptor from the route engine
            records: Performance records for the section's activities
            time_range: 1m, 3m, 6m, 1y or all
            bucket_type: Granularity, defaults per time range
            now: Reference time in Unix seconds, defaults to the current time
            result_kind: Engine result variant the records came from

        Returns:
            SectionPerformanceReport
        """
        # Resolve up front so bad arguments fail before any work
        days = settings.range_days(time_range)
        if bucket_type is None:
            resolved_type = BucketType.for_range(time_range)
        else:
            resolved_type = BucketType(bucket_type)
        reference = time.time() if now is None else now

        timer = PipelineTimer(logger)
        strategy = self._get_strategy(section.sport_type)

        with timer.stage("flatten") as stage:
            candidates = flatten_records(records)
            stage.item_count = len(candidates)

        with timer.stage("filter", days=days) as stage:
            filtered = filter_by_range(candidates, time_range, reference)
            stage.item_count = len(filtered.in_range)

        with timer.stage("rank") as stage:
            ranked = rank_candidates(filtered.in_range)
            chart = chart_series(filtered.in_range)
            summary = summary_stats(filtered.in_range, ranked)
            stage.item_count = len(ranked)

        with timer.stage("bucket", bucket_type=resolved_type.value) as stage:
            buckets = bucket_candidates(filtered.in_range, resolved_type)
            bucket_ranked = rank_buckets(buckets.buckets)
            bucket_chart = bucket_chart_series(buckets.buckets)
            bucket_summary = bucket_summary_stats(buckets, filtered.global_pr)
            bucket_best = best_per_direction(buckets.buckets)
            stage.item_count = len(buckets.buckets)

        report = SectionPerformanceReport(
            section_id=section.id,
            sport_type=section.sport_type,
            time_range=time_range,
            bucket_type=resolved_type,
            use_bucketed=self.should_bucket(section),
            result_kind=result_kind,
            strategy=strategy,
            candidates=candidates,
            in_range=filtered.in_range,
            global_pr=filtered.global_pr,
            ranked=ranked,
            chart=chart,
            summary=summary,
            buckets=buckets,
            bucket_ranked=bucket_ranked,
            bucket_chart=bucket_chart,
            bucket_summary=bucket_summary,
            bucket_best=bucket_best,
            timings=timer.timings,
        )

        logger.info(
            "Computed section performances",
            section_id=section.id,
            time_range=time_range,
            bucket_type=resolved_type.value,
            candidates_count=len(candidates),
            in_range_count=len(filtered.in_range),
            buckets_count=len(buckets.buckets),
            use_bucketed=report.use_bucketed,
            duration_ms=round(timer.timings.total_ms, 2)
        )

        return report

    def compute_from_engine(
        self,
        section: SectionDescriptor,
        raw_result: Union[str, Dict[str, Any], None],
        time_range: str = "1y",
        bucket_type: Optional[Union[BucketType, str]] = None,
        now: Optional[float] = None,
    ) -> SectionPerformanceReport:
        """
        Normalize a raw engine payload, then run the pipeline.

        Estimated and unavailable results carry no lap timings, so their
        reports have empty views; result_kind tells the caller why.
        """
        result = self.normalize(section, raw_result)
        return self.compute(
            section,
            result.records,
            time_range=time_range,
            bucket_type=bucket_type,
            now=now,
            result_kind=result.kind,
        )

    def normalize(
        self,
        section: SectionDescriptor,
        raw_result: Union[str, Dict[str, Any], None],
    ) -> EngineResult:
        """Normalize raw data using the engine adapter."""
        result = self.adapter.normalize(raw_result, section)
        if not isinstance(result, MeasuredPerformances):
            logger.info(
                "No measured performances for section",
                section_id=section.id,
                result_kind=result.kind
            )
        return result

    def should_bucket(self, section: SectionDescriptor) -> bool:
        """Whether the section has enough traversals for the bucketed chart."""
        return section.activity_count >= self.bucket_threshold

    def _get_strategy(self, sport_type: str) -> DeltaStrategy:
        """Get delta strategy for the section's sport type."""
        return get_delta_strategy(sport_type)
