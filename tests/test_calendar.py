"""Tests for the holiday calendar and month helpers."""

from datetime import date

from wardroster.domain.calendar import HolidayCalendar, HolidayEntry
from wardroster.domain.models import month_dates, prior_month_tail

JULY_4 = date(2025, 7, 4)  # Friday


class TestHolidayCalendar:
    """Tests for HolidayCalendar."""

    def test_weekends(self):
        """Saturday and Sunday are holidays by default."""
        cal = HolidayCalendar()
        assert cal.is_holiday(date(2025, 3, 1))
        assert cal.is_holiday(date(2025, 3, 2))
        assert not cal.is_holiday(date(2025, 3, 3))

    def test_no_weekend_days(self):
        cal = HolidayCalendar(weekend_days=())
        assert not cal.is_holiday(date(2025, 3, 1))

    def test_unit_entry(self):
        """An enabled unit entry marks a weekday as a holiday."""
        cal = HolidayCalendar([HolidayEntry(date(2025, 3, 5), "Founding day")])
        assert cal.is_holiday(date(2025, 3, 5))
        assert cal.holiday_name(date(2025, 3, 5)) == "Founding day"

    def test_disabled_entry(self):
        """A disabled entry does not count."""
        cal = HolidayCalendar([HolidayEntry(date(2025, 3, 5), "Old", enabled=False)])
        assert not cal.is_holiday(date(2025, 3, 5))
        assert cal.holiday_name(date(2025, 3, 5)) is None

    def test_national_holiday(self):
        """National holidays come from the holidays package."""
        cal = HolidayCalendar(country="US")
        assert cal.is_holiday(JULY_4)
        assert "Independence Day" in cal.holiday_name(JULY_4)

    def test_disabled_entry_masks_national(self):
        """A unit can opt out of a national holiday."""
        cal = HolidayCalendar([HolidayEntry(JULY_4, enabled=False)], country="US")
        assert not cal.is_holiday(JULY_4)

    def test_month_days(self):
        """month_days yields every day in order with weekday and flag."""
        days = HolidayCalendar().month_days(2025, 2)
        assert len(days) == 28
        assert days[0].date == date(2025, 2, 1)
        assert days[0].weekday == 5
        assert days[0].is_holiday
        assert not days[2].is_holiday

    def test_listed_holidays_in_month(self):
        """Only non-weekend holidays are listed."""
        cal = HolidayCalendar([
            HolidayEntry(date(2025, 3, 5), "A"),
            HolidayEntry(date(2025, 4, 1), "B"),
        ])
        assert cal.listed_holidays_in_month(2025, 3) == [(date(2025, 3, 5), "A")]

    def test_entry_round_trip(self):
        entry = HolidayEntry(date(2025, 3, 5), "A", enabled=False)
        assert HolidayEntry.from_dict(entry.to_dict()) == entry


class TestMonthHelpers:
    """Tests for month date helpers."""

    def test_month_dates_leap_year(self):
        assert month_dates(2024, 2)[-1] == date(2024, 2, 29)

    def test_prior_month_tail(self):
        """The six trailing days of the previous month, ascending."""
        assert prior_month_tail(2025, 3) == [date(2025, 2, d) for d in range(23, 29)]

    def test_prior_month_tail_across_year(self):
        assert prior_month_tail(2025, 1, days=2) == [date(2024, 12, 30), date(2024, 12, 31)]
