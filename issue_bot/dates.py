"""Release dates as they appear in scheduled release issue titles.

Titles follow ``"Scheduled release for <Month> <Do>, <YYYY>"``, e.g.
``"Scheduled release for June 3rd, 2021"``. Parsing is strict: the whole
title must match. Any English ordinal suffix is accepted on input; output
always uses the correct one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from .config import RELEASE_TITLE_PREFIX

# English names regardless of process locale.
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)

_DATE_PATTERN = r"(?P<month>[A-Za-z]+) (?P<day>\d{1,2})(?:st|nd|rd|th), (?P<year>\d{4})"


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _month_number(name: str) -> int | None:
    lowered = name.lower()
    for index, month in enumerate(MONTH_NAMES, start=1):
        if month.lower() == lowered:
            return index
    return None


@dataclass(frozen=True)
class ScheduledDate:
    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        # Raises ValueError for impossible dates.
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "ScheduledDate":
        return cls(year=value.year, month=value.month, day=value.day)

    def as_date(self) -> date:
        return date(self.year, self.month, self.day)

    @classmethod
    def parse(cls, text: str, *, prefix: str = "") -> "ScheduledDate | None":
        """Parse ``<prefix>MMMM Do, YYYY``; returns None unless *text* matches exactly."""
        if not isinstance(text, str):
            return None
        match = re.fullmatch(re.escape(prefix) + _DATE_PATTERN, text)
        if not match:
            return None

        month = _month_number(match.group("month"))
        day = int(match.group("day"))
        if month is None:
            return None
        try:
            return cls(year=int(match.group("year")), month=month, day=day)
        except ValueError:
            return None

    @classmethod
    def parse_title(cls, title: str, *, prefix: str = RELEASE_TITLE_PREFIX) -> "ScheduledDate | None":
        return cls.parse(title, prefix=prefix)

    def format(self, *, prefix: str = "") -> str:
        return f"{prefix}{MONTH_NAMES[self.month - 1]} {self.day}{ordinal_suffix(self.day)}, {self.year}"

    def format_title(self, *, prefix: str = RELEASE_TITLE_PREFIX) -> str:
        return self.format(prefix=prefix)

    def format_long(self) -> str:
        """``"Thursday, June 17th, 2021"``."""
        return f"{WEEKDAY_NAMES[self.as_date().weekday()]}, {self.format()}"

    def plus_days(self, days: int) -> "ScheduledDate":
        return ScheduledDate.from_date(self.as_date() + timedelta(days=days))

    def plus_weeks(self, weeks: int) -> "ScheduledDate":
        return self.plus_days(weeks * 7)

    def __str__(self) -> str:
        return self.format()
