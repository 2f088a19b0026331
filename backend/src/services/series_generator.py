"""
Series generator: expands a recurrence rule into occurrence timestamps.

Two horizon policies are supported:

- DateBoundedHorizon: used when a series is created. Occurrences start at the
  seed time and continue while the running date does not exceed
  seed + N months.
- CountBoundedHorizon: used when an existing appointment is converted to, or
  re-intervalled as, a recurring series. Exactly N occurrences strictly after
  the seed time.

The returned sequence is lazy, finite and restartable: iterating it twice
yields the same timestamps, and nothing outside it is mutated.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, List, Optional, Sequence, Union

from core.constants import (
    BIWEEKLY_INTERVAL_DAYS,
    SERIES_CREATION_HORIZON_MONTHS,
    SERIES_EDIT_OCCURRENCE_COUNT,
    WEEKLY_INTERVAL_DAYS,
)
from shared_types import Frequency
from utils.datetime_utils import add_months


INTERVAL_DAYS = {
    Frequency.WEEKLY: WEEKLY_INTERVAL_DAYS,
    Frequency.BIWEEKLY: BIWEEKLY_INTERVAL_DAYS,
}


@dataclass(frozen=True)
class DateBoundedHorizon:
    """Emit from the seed (inclusive) until seed + months (inclusive)."""

    months: int = SERIES_CREATION_HORIZON_MONTHS


@dataclass(frozen=True)
class CountBoundedHorizon:
    """Emit exactly `count` occurrences strictly after the seed."""

    count: int = SERIES_EDIT_OCCURRENCE_COUNT


HorizonPolicy = Union[DateBoundedHorizon, CountBoundedHorizon]


def interval_for(frequency: Frequency) -> timedelta:
    """
    Spacing between occurrences of a recurring frequency.

    Raises:
        ValueError: If the frequency is not recurring
    """
    if frequency not in INTERVAL_DAYS:
        raise ValueError(f"Frequency {frequency.value} has no recurrence interval")
    return timedelta(days=INTERVAL_DAYS[frequency])


class SeriesOccurrences:
    """
    Iterable of occurrence timestamps for one recurrence rule.

    Each call to iter() starts again from the seed.
    """

    def __init__(
        self,
        start_time: datetime,
        frequency: Frequency,
        horizon: Optional[HorizonPolicy] = None,
        timestamps: Optional[Sequence[datetime]] = None,
    ):
        if frequency.is_recurring and horizon is None:
            raise ValueError("A recurring frequency requires a horizon policy")
        self.start_time = start_time
        self.frequency = frequency
        self.horizon = horizon
        self._timestamps = tuple(timestamps) if timestamps is not None else (start_time,)

    def __iter__(self) -> Iterator[datetime]:
        if not self.frequency.is_recurring:
            return iter(self._timestamps)
        step = interval_for(self.frequency)
        if isinstance(self.horizon, DateBoundedHorizon):
            return self._date_bounded(step, self.horizon)
        if isinstance(self.horizon, CountBoundedHorizon):
            return self._count_bounded(step, self.horizon)
        raise ValueError(f"Unsupported horizon policy: {self.horizon!r}")

    def _date_bounded(self, step: timedelta, horizon: DateBoundedHorizon) -> Iterator[datetime]:
        end = add_months(self.start_time, horizon.months)
        current = self.start_time
        while current <= end:
            yield current
            current = current + step

    def _count_bounded(self, step: timedelta, horizon: CountBoundedHorizon) -> Iterator[datetime]:
        for index in range(1, horizon.count + 1):
            yield self.start_time + step * index

    def to_list(self) -> List[datetime]:
        return list(self)


def generate(
    start_time: datetime,
    frequency: Frequency,
    horizon: Optional[HorizonPolicy] = None,
    timestamps: Optional[Sequence[datetime]] = None,
) -> SeriesOccurrences:
    """
    Expand a recurrence rule into occurrence timestamps.

    Args:
        start_time: Seed occurrence
        frequency: Recurrence frequency
        horizon: Horizon policy, required when the frequency is recurring
        timestamps: Caller-supplied times, returned unchanged when frequency is NONE

    Returns:
        Restartable iterable of timestamps in ascending order
    """
    return SeriesOccurrences(start_time, frequency, horizon, timestamps)
