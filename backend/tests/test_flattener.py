"""
Unit tests for the lap flattener.
"""
import math

import pytest

from sectionstats.services.performance import Direction, flatten_records
from sectionstats.services.performance.flattener import flatten_record

from conftest import NOW

SAME = Direction.SAME
REVERSE = Direction.REVERSE


class TestFlattenRecord:
    """Tests for flatten_record."""

    def test_best_lap_per_direction(self, make_record):
        """Each direction keeps the minimum time over its own laps."""
        record = make_record("a1", NOW, [
            (120, SAME), (100, SAME), (130, REVERSE), (110, SAME), (125, REVERSE),
        ])

        candidates = flatten_record(record)

        assert len(candidates) == 2
        same, reverse = candidates
        assert not same.is_reverse
        assert same.best_time_seconds == 100
        assert same.best_pace == pytest.approx(10.0)
        assert reverse.is_reverse
        assert reverse.best_time_seconds == 125
        assert reverse.best_pace == pytest.approx(8.0)

    def test_single_direction_yields_one_candidate(self, make_record):
        record = make_record("a1", NOW, [(200, REVERSE), (190, REVERSE)])

        candidates = flatten_record(record)

        assert len(candidates) == 1
        assert candidates[0].is_reverse
        assert candidates[0].direction is REVERSE
        assert candidates[0].best_time_seconds == 190

    def test_direction_defaults_to_same(self, make_lap, make_record):
        record = make_record("a1", NOW, [])
        record.laps = [make_lap(150)]

        candidates = flatten_record(record)

        assert len(candidates) == 1
        assert candidates[0].direction is SAME

    def test_no_laps_yields_nothing(self, make_record):
        assert flatten_record(make_record("a1", NOW, [])) == []

    def test_activity_date_shared_by_candidates(self, make_record):
        record = make_record("a1", NOW - 3600.7, [(100, SAME), (105, REVERSE)])

        candidates = flatten_record(record)

        assert {c.activity_date_unix for c in candidates} == {record.activity_date_unix}
        assert record.activity_date_unix == math.floor(NOW - 3600.7)

    def test_zero_duration_lap_does_not_beat_real_lap(self, make_record):
        """A zero-time lap only stands in when nothing else exists."""
        record = make_record("a1", NOW, [(0, SAME), (140, SAME)])

        candidates = flatten_record(record)

        assert candidates[0].best_time_seconds == 140

    def test_zero_duration_only_keeps_row_at_zero_speed(self, make_record):
        record = make_record("a1", NOW, [(0, SAME)])

        candidates = flatten_record(record)

        assert len(candidates) == 1
        assert candidates[0].best_time_seconds == 0
        assert candidates[0].best_pace == 0.0

    def test_non_finite_and_negative_laps_ignored(self, make_lap, make_record):
        record = make_record("a1", NOW, [(90, SAME)])
        record.laps += [
            make_lap(float("nan"), pace=5.0),
            make_lap(-5, pace=5.0),
        ]

        candidates = flatten_record(record)

        assert len(candidates) == 1
        assert candidates[0].best_time_seconds == 90

    def test_never_emits_infinite_time(self, make_record):
        record = make_record("a1", NOW, [(float("inf"), SAME)])

        assert flatten_record(record) == []


class TestFlattenRecords:
    """Tests for flatten_records."""

    def test_record_order_preserved(self, make_record):
        records = [
            make_record("a1", NOW - 100, [(100, SAME)]),
            make_record("a2", NOW - 200, [(90, SAME), (95, REVERSE)]),
            make_record("a3", NOW - 300, [(80, REVERSE)]),
        ]

        candidates = flatten_records(records)

        assert [(c.activity_id, c.is_reverse) for c in candidates] == [
            ("a1", False),
            ("a2", False),
            ("a2", True),
            ("a3", True),
        ]

    def test_best_of_matches_min_over_laps(self, make_record):
        laps = [(97.5, SAME), (88.0, REVERSE), (96.1, SAME), (91.2, REVERSE), (99.9, SAME)]
        record = make_record("a1", NOW, laps)

        by_direction = {c.direction: c.best_time_seconds for c in flatten_records([record])}

        for direction in (SAME, REVERSE):
            expected = min(t for t, d in laps if d is direction)
            assert by_direction[direction] == expected

    def test_empty_input(self):
        assert flatten_records([]) == []
