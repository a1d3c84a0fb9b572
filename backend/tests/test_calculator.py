"""
Integration tests for the section performance calculator.
"""
import pytest

from sectionstats.services.performance import (
    BucketType,
    Direction,
    SectionPerformanceCalculator,
)
from sectionstats.services.performance.strategies import RunningStrategy, TimedStrategy

from conftest import DAY, NOW

SAME = Direction.SAME
REVERSE = Direction.REVERSE


@pytest.fixture
def records(make_record):
    return [
        make_record("old-pr", NOW - 500 * DAY, [(80, SAME)]),
        make_record("a1", NOW - 200 * DAY, [(110, SAME), (120, REVERSE)]),
        make_record("a2", NOW - 60 * DAY, [(100, SAME)]),
        make_record("a3", NOW - 10 * DAY, [(105, SAME), (98, SAME)]),
        make_record("a4", NOW - 2 * DAY, [(115, REVERSE)]),
    ]


class TestCompute:
    """Tests for SectionPerformanceCalculator.compute."""

    def test_pipeline(self, make_section, records):
        section = make_section(activity_ids=[r.activity_id for r in records])

        report = SectionPerformanceCalculator().compute(section, records, "1y", now=NOW)

        assert len(report.candidates) == 6
        assert len(report.in_range) == 5
        assert report.global_pr.activity_id == "old-pr"
        assert report.window_pr.activity_id == "a3"
        assert report.ranked.best.activity_id == "a3"
        assert report.ranked.best_time == 98
        assert report.summary.best_time == 98
        assert report.bucket_summary.best_time == 80
        assert report.bucket_type is BucketType.QUARTERLY
        assert report.result_kind == "measured"
        assert isinstance(report.strategy, TimedStrategy)

    def test_bucket_type_defaults_per_range(self, make_section, records):
        calculator = SectionPerformanceCalculator()

        assert calculator.compute(make_section(), records, "1m", now=NOW).bucket_type is BucketType.WEEKLY
        assert calculator.compute(make_section(), records, "all", now=NOW).bucket_type is BucketType.YEARLY

    def test_explicit_bucket_type(self, make_section, records):
        report = SectionPerformanceCalculator().compute(
            make_section(), records, "all", bucket_type="monthly", now=NOW
        )

        assert report.bucket_type is BucketType.MONTHLY
        assert report.buckets.total_traversals == 6

    def test_use_bucketed_threshold(self, make_section, records):
        section = make_section(activity_ids=["a1", "a2", "a3"])

        assert SectionPerformanceCalculator().compute(section, records, now=NOW).use_bucketed is False
        assert SectionPerformanceCalculator(bucket_threshold=3).compute(
            section, records, now=NOW
        ).use_bucketed is True

    def test_deltas_against_window_best(self, make_section, records):
        report = SectionPerformanceCalculator().compute(make_section(), records, "1y", now=NOW)

        by_id = {
            (e.candidate.activity_id, e.candidate.direction): e.candidate
            for e in report.ranked.entries
        }
        assert report.delta_for(by_id["a3", SAME]).display_string is None
        assert report.delta_for(by_id["a2", SAME]).display_string == "+2s"
        assert report.delta_for(by_id["a1", REVERSE]).display_string == "+22s"

    def test_bucket_deltas(self, make_section, records):
        report = SectionPerformanceCalculator().compute(
            make_section(), records, "1y", bucket_type="yearly", now=NOW
        )

        deltas = {
            (b.candidate.activity_id, b.direction): report.bucket_delta_for(b).display_string
            for b in report.buckets.buckets
        }
        assert deltas["a3", SAME] is None

    def test_running_section_uses_pace(self, make_section, records):
        report = SectionPerformanceCalculator().compute(
            make_section(sport_type="Run"), records, now=NOW
        )

        assert isinstance(report.strategy, RunningStrategy)

    def test_stage_timings_recorded(self, make_section, records):
        report = SectionPerformanceCalculator().compute(make_section(), records, now=NOW)

        assert [t.stage for t in report.timings.stages] == ["flatten", "filter", "rank", "bucket"]
        assert report.timings.total_ms >= 0

    def test_no_records(self, make_section):
        report = SectionPerformanceCalculator().compute(make_section(), [], now=NOW)

        assert report.ranked.best is None
        assert report.global_pr is None
        assert report.chart.points == []
        assert report.buckets.buckets == []

    @pytest.mark.parametrize("kwargs", [
        {"time_range": "2w"},
        {"time_range": "1y", "bucket_type": "daily"},
    ])
    def test_invalid_arguments(self, make_section, records, kwargs):
        with pytest.raises(ValueError):
            SectionPerformanceCalculator().compute(make_section(), records, now=NOW, **kwargs)


class TestComputeFromEngine:
    """Tests for compute_from_engine."""

    def test_measured_payload(self, make_section):
        payload = {
            "records": [
                {
                    "activityId": "a1",
                    "activityDate": NOW - DAY,
                    "laps": [{"time": 100, "pace": 10.0}],
                },
            ],
        }

        report = SectionPerformanceCalculator().compute_from_engine(
            make_section(activity_ids=["a1"]), payload, "1m", now=NOW
        )

        assert report.result_kind == "measured"
        assert report.ranked.best.activity_id == "a1"

    def test_estimated_payload_has_empty_views(self, make_section):
        report = SectionPerformanceCalculator().compute_from_engine(
            make_section(activity_ids=["a1", "a2"]), {"records": []}, now=NOW
        )

        assert report.result_kind == "estimated"
        assert report.candidates == []

    def test_unavailable_payload(self, make_section):
        report = SectionPerformanceCalculator().compute_from_engine(
            make_section(), None, now=NOW
        )

        assert report.result_kind == "unavailable"
        assert len(report.ranked) == 0
