"""Holiday calendar used by quotas and statistics.

A date counts as a holiday when it falls on a weekend day, when it matches
an enabled entry of the unit's holiday list, or (if a country is configured)
when it is a national public holiday known to the ``holidays`` package.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import holidays

from wardroster.domain.models import CalendarDay, month_dates


@dataclass(frozen=True)
class HolidayEntry:
    """A unit-configured holiday.

    A disabled entry keeps the date on file but stops it from counting,
    which also masks a national holiday on the same date.
    """

    date: date
    name: str = ""
    enabled: bool = True

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "name": self.name, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, data: dict) -> "HolidayEntry":
        return cls(
            date=date.fromisoformat(data["date"]),
            name=data.get("name", ""),
            enabled=data.get("enabled", True),
        )


class HolidayCalendar:
    """Answers ``is_holiday(date)`` for one unit.

    Example:
        >>> cal = HolidayCalendar([HolidayEntry(date(2025, 1, 1), "New Year")])
        >>> cal.is_holiday(date(2025, 1, 1))
        True
    """

    def __init__(
        self,
        entries: Iterable[HolidayEntry] = (),
        country: Optional[str] = None,
        weekend_days: tuple[int, ...] = (5, 6),
    ):
        self._entries = {entry.date: entry for entry in entries}
        self.country = country
        self.weekend_days = weekend_days
        self._national = holidays.country_holidays(country) if country else None

    @property
    def entries(self) -> list[HolidayEntry]:
        return sorted(self._entries.values(), key=lambda e: e.date)

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_days

    def is_listed_holiday(self, day: date) -> bool:
        """Holiday by unit list or national calendar, ignoring weekends."""
        entry = self._entries.get(day)
        if entry is not None:
            return entry.enabled
        return self._national is not None and day in self._national

    def is_holiday(self, day: date) -> bool:
        return self.is_weekend(day) or self.is_listed_holiday(day)

    def holiday_name(self, day: date) -> Optional[str]:
        entry = self._entries.get(day)
        if entry is not None:
            return entry.name if entry.enabled else None
        if self._national is not None:
            return self._national.get(day)
        return None

    def day(self, day: date) -> CalendarDay:
        return CalendarDay(date=day, weekday=day.weekday(), is_holiday=self.is_holiday(day))

    def month_days(self, year: int, month: int) -> list[CalendarDay]:
        """All days of a month, in order, with their holiday flag."""
        return [self.day(d) for d in month_dates(year, month)]

    def listed_holidays_in_month(self, year: int, month: int) -> list[tuple[date, str]]:
        """Non-weekend holidays of a month as (date, name) pairs."""
        return [
            (d, self.holiday_name(d) or "")
            for d in month_dates(year, month)
            if self.is_listed_holiday(d)
        ]
