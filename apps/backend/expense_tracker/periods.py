"""Viewing periods: a single calendar month or all time.

``MonthPeriod.month`` is 0-indexed (January is 0), matching the month the
client sends; stored paid markers on recurring expenses are 1-indexed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final, Literal, Union

from .errors import ValidationFailure

ALL_TIME: Final = "all"


@dataclass(frozen=True)
class MonthPeriod:
    month: int
    year: int

    def __post_init__(self) -> None:
        if isinstance(self.month, bool) or not isinstance(self.month, int) or not 0 <= self.month <= 11:
            raise ValidationFailure("month must be an integer between 0 and 11")
        if isinstance(self.year, bool) or not isinstance(self.year, int) or not 1 <= self.year <= 9999:
            raise ValidationFailure("year must be an integer between 1 and 9999")

    @classmethod
    def containing(cls, day: date) -> "MonthPeriod":
        return cls(day.month - 1, day.year)

    @property
    def calendar_month(self) -> int:
        return self.month + 1

    def day(self, day_of_month: int) -> date:
        return date(self.year, self.calendar_month, day_of_month)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.calendar_month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.calendar_month:02d}"


FilterPeriod = Union[MonthPeriod, Literal["all"]]


def is_all_time(period: FilterPeriod) -> bool:
    return period == ALL_TIME


def status_period(period: FilterPeriod, today: date) -> MonthPeriod:
    """Month against which paid status is evaluated; all-time falls back to today's month."""
    if isinstance(period, MonthPeriod):
        return period
    return MonthPeriod.containing(today)
