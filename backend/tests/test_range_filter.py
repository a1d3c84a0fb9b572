"""
Unit tests for the range filter and time range settings.
"""
import math

import pytest

from sectionstats.core.config import Settings
from sectionstats.services.performance import filter_by_days, filter_by_range
from sectionstats.services.performance.range_filter import (
    compute_cutoff,
    find_global_pr,
)

from conftest import DAY, NOW


class TestComputeCutoff:
    """Tests for compute_cutoff."""

    def test_trailing_window(self):
        assert compute_cutoff(30, NOW) == NOW - 30 * DAY

    def test_zero_days_is_unbounded(self):
        assert compute_cutoff(0, NOW) == -math.inf

    def test_negative_days_rejected(self):
        with pytest.raises(ValueError):
            compute_cutoff(-1, NOW)


class TestFilterByDays:
    """Tests for filter_by_days."""

    def test_cutoff_is_inclusive(self, make_candidate):
        """A candidate exactly at the cutoff is kept, one second earlier is not."""
        at_cutoff = make_candidate("a1", 100, timestamp=NOW - 30 * DAY)
        just_before = make_candidate("a2", 100, timestamp=NOW - 30 * DAY - 1)

        result = filter_by_days([at_cutoff, just_before], 30, now=NOW)

        assert result.in_range == [at_cutoff]

    def test_zero_days_keeps_everything(self, make_candidate):
        candidates = [
            make_candidate("old", 100, timestamp=0),
            make_candidate("new", 100, timestamp=NOW),
        ]

        result = filter_by_days(candidates, 0, now=NOW)

        assert result.in_range == candidates

    def test_wider_window_is_superset(self, make_candidate):
        candidates = [
            make_candidate(f"a{i}", 100 + i, timestamp=NOW - i * 7 * DAY)
            for i in range(80)
        ]

        previous = set()
        for days in (30, 90, 180, 365, 0):
            kept = {c.activity_id for c in filter_by_days(candidates, days, now=NOW).in_range}
            assert previous <= kept
            previous = kept
        assert len(previous) == len(candidates)

    def test_global_pr_ignores_window(self, make_candidate):
        """The all-time record is found even when it is outside the window."""
        old_pr = make_candidate("old", 80, timestamp=NOW - 400 * DAY)
        recent = make_candidate("recent", 95, timestamp=NOW - 5 * DAY)

        result = filter_by_days([old_pr, recent], 30, now=NOW)

        assert result.in_range == [recent]
        assert result.global_pr is old_pr

    def test_empty_input(self):
        result = filter_by_days([], 30, now=NOW)

        assert result.in_range == []
        assert result.global_pr is None

    def test_input_order_preserved(self, make_candidate):
        candidates = [
            make_candidate("b", 100, timestamp=NOW - 2 * DAY),
            make_candidate("a", 100, timestamp=NOW - 5 * DAY),
            make_candidate("c", 100, timestamp=NOW - 1 * DAY),
        ]

        result = filter_by_days(candidates, 30, now=NOW)

        assert [c.activity_id for c in result.in_range] == ["b", "a", "c"]


class TestFindGlobalPr:
    """Tests for find_global_pr."""

    def test_earliest_wins_ties(self, make_candidate):
        first = make_candidate("first", 90)
        second = make_candidate("second", 90)

        assert find_global_pr([first, second]) is first

    def test_zero_times_ignored(self, make_candidate):
        zero = make_candidate("zero", 0)
        real = make_candidate("real", 120)

        assert find_global_pr([zero, real]) is real
        assert find_global_pr([zero]) is None


class TestFilterByRange:
    """Tests for named time ranges."""

    @pytest.mark.parametrize("time_range,days", [
        ("1m", 30),
        ("3m", 90),
        ("6m", 180),
        ("1y", 365),
    ])
    def test_named_range_matches_days(self, make_candidate, time_range, days):
        inside = make_candidate("inside", 100, timestamp=NOW - days * DAY)
        outside = make_candidate("outside", 100, timestamp=NOW - days * DAY - 1)

        result = filter_by_range([inside, outside], time_range, now=NOW)

        assert result.in_range == [inside]

    def test_all_is_unbounded(self, make_candidate):
        ancient = make_candidate("ancient", 100, timestamp=0)

        assert filter_by_range([ancient], "all", now=NOW).in_range == [ancient]

    def test_unknown_range_rejected(self):
        with pytest.raises(ValueError):
            filter_by_range([], "2w", now=NOW)


class TestSettings:
    """Tests for the range and sport helpers on Settings."""

    def test_range_days(self):
        s = Settings()
        assert s.range_days("1y") == 365
        assert s.range_days("all") == 0

    def test_range_days_unknown(self):
        with pytest.raises(ValueError):
            Settings().range_days("5y")

    @pytest.mark.parametrize("sport_type,expected", [
        ("Run", True),
        ("VirtualRun", True),
        ("Walk", True),
        ("Hike", True),
        ("Ride", False),
        ("Swim", False),
    ])
    def test_running_sports(self, sport_type, expected):
        assert Settings().is_running_sport(sport_type) is expected
