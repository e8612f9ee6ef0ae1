"""Unit-wide statistics over a finalized grid."""

from dataclasses import dataclass, field
from typing import Optional

from wardroster.domain.models import ScheduleGrid, ShiftCatalog
from wardroster.statistics.staff import HolidayLookup, StaffStatistics, compute_staff_statistics

# Standard deviation of work days at which the fairness score reaches 0
MAX_ACCEPTABLE_STD_DEV = 2.0


def _spread(values: list[int]) -> int:
    return max(values) - min(values) if values else 0


@dataclass
class UnitStatistics:
    """Distribution and fairness metrics for a whole unit-month.

    Attributes:
        staff: Per-staff statistics keyed by staff ID.
        distribution: Shift code -> staff ID -> count, for codes that count
            toward statistics.
        deviation: Shift code -> max minus min count across staff.
        holiday_work_deviation: Max minus min holiday work days.
        avg_work_days: Mean work days per staff member.
        work_days_std_dev: Standard deviation of work days.
        fairness_score: 0-100; 100 means identical workloads.
    """

    staff: dict[str, StaffStatistics] = field(default_factory=dict)
    distribution: dict[str, dict[str, int]] = field(default_factory=dict)
    deviation: dict[str, int] = field(default_factory=dict)
    holiday_work_deviation: int = 0
    avg_work_days: float = 0.0
    work_days_std_dev: float = 0.0
    fairness_score: float = 100.0

    def to_dict(self) -> dict:
        return {
            "staff": {sid: s.to_dict() for sid, s in self.staff.items()},
            "distribution": {code: dict(c) for code, c in self.distribution.items()},
            "deviation": dict(self.deviation),
            "holiday_work_deviation": self.holiday_work_deviation,
            "avg_work_days": self.avg_work_days,
            "work_days_std_dev": self.work_days_std_dev,
            "fairness_score": self.fairness_score,
        }


def compute_unit_statistics(
    grid: ScheduleGrid,
    calendar: HolidayLookup,
    catalog: Optional[ShiftCatalog] = None,
) -> UnitStatistics:
    """Compute per-staff statistics and how evenly shifts are spread.

    Every row covers all days of the grid month, so a staff member with no
    entry on a date is counted as resting that day.

    Args:
        grid: Finalized assignment grid.
        calendar: Anything with ``is_holiday(date)``.
        catalog: Shift catalog; unknown codes raise UnknownShiftCode.

    Returns:
        UnitStatistics for the grid.
    """
    catalog = catalog or ShiftCatalog.default()
    days = grid.days
    result = UnitStatistics()

    for staff_id in grid.staff_ids:
        result.staff[staff_id] = compute_staff_statistics(
            grid.row(staff_id),
            calendar,
            catalog=catalog,
            carry_over=grid.carry_over_row(staff_id),
            days=days,
            staff_id=staff_id,
        )

    if not result.staff:
        return result

    for code in catalog.stats_codes:
        per_staff = {
            sid: stats.shift_counts.get(code, 0)
            for sid, stats in result.staff.items()
        }
        result.distribution[code] = per_staff
        result.deviation[code] = _spread(list(per_staff.values()))

    result.holiday_work_deviation = _spread(
        [s.holiday_work_days for s in result.staff.values()]
    )

    work_days = [s.work_days for s in result.staff.values()]
    avg = sum(work_days) / len(work_days)
    variance = sum((w - avg) ** 2 for w in work_days) / len(work_days)
    std_dev = variance ** 0.5

    result.avg_work_days = avg
    result.work_days_std_dev = std_dev
    result.fairness_score = max(0.0, 100.0 - (std_dev / MAX_ACCEPTABLE_STD_DEV) * 100.0)
    return result
