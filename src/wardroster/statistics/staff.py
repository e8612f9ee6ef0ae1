"""Per-staff statistics derived from a finalized assignment row.

Dates are always sorted before processing. Consecutive-run lengths depend
on chronological order, and the order in which a mapping yields its keys
is not something to rely on.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional, Protocol

from wardroster.domain.models import ShiftCatalog


class HolidayLookup(Protocol):
    def is_holiday(self, day: date) -> bool: ...


@dataclass(frozen=True)
class ConsecutiveRun:
    """An unbroken sequence of worked days. ``start`` may fall in the prior month."""

    start: date
    end: date
    length: int


@dataclass
class StaffStatistics:
    """Derived metrics for one staff member over one month.

    Attributes:
        staff_id: Staff member the row belongs to.
        work_days: Days with a worked (non-rest) shift.
        off_days: Days with a rest code or no assignment.
        holiday_work_days: Worked days that fall on holidays.
        holiday_off_days: Rest days that fall on holidays.
        shift_counts: Occurrences of every code, rest codes included.
        consecutive_max: Longest worked run, counting carried-over days.
        runs: Every worked run touching the month, in order.
    """

    staff_id: str = ""
    work_days: int = 0
    off_days: int = 0
    holiday_work_days: int = 0
    holiday_off_days: int = 0
    shift_counts: dict[str, int] = field(default_factory=dict)
    consecutive_max: int = 0
    runs: list[ConsecutiveRun] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return self.work_days + self.off_days

    def runs_at_least(self, length: int) -> list[ConsecutiveRun]:
        return [run for run in self.runs if run.length >= length]

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "work_days": self.work_days,
            "off_days": self.off_days,
            "holiday_work_days": self.holiday_work_days,
            "holiday_off_days": self.holiday_off_days,
            "shift_counts": dict(self.shift_counts),
            "consecutive_max": self.consecutive_max,
        }


def _span(row: dict[date, str]) -> list[date]:
    if not row:
        return []
    first, last = min(row), max(row)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


class _RunTracker:
    """Running state of the forward pass."""

    def __init__(self):
        self.consecutive = 0
        self.last_was_work = False
        self.last_day: Optional[date] = None
        self.run_start: Optional[date] = None

    def step(self, day: date, worked: bool) -> Optional[ConsecutiveRun]:
        """Advance one day; return the run that just ended, if any."""
        finished = None
        # A missing date in between reads as a rest day
        if self.last_day is not None and day - self.last_day > timedelta(days=1):
            finished = self._end_run()

        if worked:
            if self.last_was_work:
                self.consecutive += 1
            else:
                self.consecutive = 1
                self.run_start = day
            self.last_was_work = True
        else:
            finished = self._end_run() or finished
        self.last_day = day
        return finished

    def _end_run(self) -> Optional[ConsecutiveRun]:
        run = None
        if self.last_was_work and self.run_start is not None and self.last_day is not None:
            run = ConsecutiveRun(self.run_start, self.last_day, self.consecutive)
        self.consecutive = 0
        self.last_was_work = False
        self.run_start = None
        return run

    def close(self) -> Optional[ConsecutiveRun]:
        return self._end_run()


def compute_staff_statistics(
    row: dict[date, str],
    calendar: HolidayLookup,
    catalog: Optional[ShiftCatalog] = None,
    carry_over: Optional[dict[date, str]] = None,
    days: Optional[Iterable[date]] = None,
    staff_id: str = "",
) -> StaffStatistics:
    """Compute statistics for one staff member's assignment row.

    Single forward pass over dates in ascending order. Carry-over days from
    the prior month only seed the running consecutive count; they are not
    counted as work or off days.

    Args:
        row: Date -> shift code for the month.
        calendar: Anything with ``is_holiday(date)``.
        catalog: Shift catalog; unknown codes raise UnknownShiftCode.
        carry_over: Trailing prior-month assignments, read-only context.
        days: Dates to cover; missing entries count as the rest code.
            Defaults to every date from the first to the last entry of
            ``row``.
        staff_id: Label copied into the result.

    Returns:
        StaffStatistics for the row.
    """
    catalog = catalog or ShiftCatalog.default()
    rest_code = catalog.rest_code
    stats = StaffStatistics(staff_id=staff_id)
    tracker = _RunTracker()

    for day in sorted(carry_over or {}):
        shift = carry_over[day] or rest_code
        tracker.step(day, not catalog.is_rest(shift))

    if days is None:
        days = _span(row)
    dates = sorted(set(row) | set(days))
    for day in dates:
        shift = row.get(day) or rest_code
        worked = not catalog.is_rest(shift)

        finished = tracker.step(day, worked)
        if finished is not None and finished.end >= dates[0]:
            stats.runs.append(finished)

        if worked:
            stats.work_days += 1
            stats.consecutive_max = max(stats.consecutive_max, tracker.consecutive)
            if calendar.is_holiday(day):
                stats.holiday_work_days += 1
        else:
            stats.off_days += 1
            if calendar.is_holiday(day):
                stats.holiday_off_days += 1

        stats.shift_counts[shift] = stats.shift_counts.get(shift, 0) + 1

    last = tracker.close()
    if last is not None and dates and last.end >= dates[0]:
        stats.runs.append(last)

    return stats
