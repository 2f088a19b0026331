"""
Unit tests for the series generator.
"""

from datetime import datetime, timedelta

import pytest

from services.series_generator import (
    CountBoundedHorizon,
    DateBoundedHorizon,
    generate,
    interval_for,
)
from shared_types import Frequency
from utils.datetime_utils import add_months


class TestDateBoundedHorizon:
    """Occurrences used when a series is first created."""

    def test_weekly_three_months_includes_seed(self):
        start = datetime(2026, 1, 1, 10, 0)
        occurrences = generate(start, Frequency.WEEKLY, DateBoundedHorizon()).to_list()

        assert occurrences[0] == start
        assert occurrences[-1] == datetime(2026, 3, 26, 10, 0)
        assert len(occurrences) == 13
        assert all(b - a == timedelta(days=7) for a, b in zip(occurrences, occurrences[1:]))

    def test_biweekly_three_months(self):
        start = datetime(2026, 1, 1, 10, 0)
        occurrences = generate(start, Frequency.BIWEEKLY, DateBoundedHorizon()).to_list()

        assert occurrences == [
            datetime(2026, 1, 1, 10, 0),
            datetime(2026, 1, 15, 10, 0),
            datetime(2026, 1, 29, 10, 0),
            datetime(2026, 2, 12, 10, 0),
            datetime(2026, 2, 26, 10, 0),
            datetime(2026, 3, 12, 10, 0),
            datetime(2026, 3, 26, 10, 0),
        ]

    def test_end_boundary_is_inclusive(self):
        # Feb 2026 has 28 days, so Feb 1 + 4 weeks lands exactly on Mar 1
        start = datetime(2026, 2, 1, 9, 0)
        occurrences = generate(start, Frequency.WEEKLY, DateBoundedHorizon(months=1)).to_list()

        assert occurrences[-1] == datetime(2026, 3, 1, 9, 0)
        assert len(occurrences) == 5

    def test_never_exceeds_horizon(self):
        start = datetime(2026, 11, 30, 18, 30)
        occurrences = generate(start, Frequency.WEEKLY, DateBoundedHorizon()).to_list()

        assert max(occurrences) <= add_months(start, 3)


class TestCountBoundedHorizon:
    """Occurrences used when an edit (re)generates a series."""

    def test_twelve_occurrences_strictly_after_seed(self):
        seed = datetime(2026, 5, 4, 14, 0)
        occurrences = generate(seed, Frequency.WEEKLY, CountBoundedHorizon()).to_list()

        assert len(occurrences) == 12
        assert seed not in occurrences
        assert occurrences[0] == seed + timedelta(days=7)
        assert occurrences[-1] == seed + timedelta(days=84)

    def test_biweekly_count(self):
        seed = datetime(2026, 5, 4, 14, 0)
        occurrences = generate(seed, Frequency.BIWEEKLY, CountBoundedHorizon(count=3)).to_list()

        assert occurrences == [
            datetime(2026, 5, 18, 14, 0),
            datetime(2026, 6, 1, 14, 0),
            datetime(2026, 6, 15, 14, 0),
        ]


class TestNonRecurring:
    def test_supplied_timestamps_returned_unchanged(self):
        times = [datetime(2026, 3, 10, 9, 0), datetime(2026, 3, 2, 9, 0)]
        assert generate(times[0], Frequency.NONE, timestamps=times).to_list() == times

    def test_seed_only_by_default(self):
        seed = datetime(2026, 3, 10, 9, 0)
        assert generate(seed, Frequency.NONE).to_list() == [seed]


class TestGeneratorContract:
    def test_sequence_is_restartable(self):
        occurrences = generate(datetime(2026, 1, 1, 10, 0), Frequency.WEEKLY, DateBoundedHorizon())
        assert list(occurrences) == list(occurrences)

    def test_recurring_without_horizon_rejected(self):
        with pytest.raises(ValueError):
            generate(datetime(2026, 1, 1, 10, 0), Frequency.WEEKLY)

    def test_interval_for(self):
        assert interval_for(Frequency.WEEKLY) == timedelta(days=7)
        assert interval_for(Frequency.BIWEEKLY) == timedelta(days=14)
        with pytest.raises(ValueError):
            interval_for(Frequency.NONE)
