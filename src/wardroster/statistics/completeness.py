"""Completeness of a finalized grid against staffing requirements.

Shortages are informational. Schedulers use them to decide whether a grid
may be published; nothing here forbids publishing.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from wardroster.domain.models import PreScheduleRequest, ScheduleGrid, ShiftCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShortageRecord:
    """A date and shift staffed below its required headcount."""

    day: date
    shift: str
    required: int
    actual: int

    @property
    def shortage(self) -> int:
        return self.required - self.actual

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "shift": self.shift,
            "required": self.required,
            "actual": self.actual,
            "shortage": self.shortage,
        }


@dataclass
class CompletenessReport:
    """Result of checking a grid against required headcount."""

    complete: bool = True
    missing: list[ShortageRecord] = field(default_factory=list)

    @property
    def total_shortage(self) -> int:
        return sum(record.shortage for record in self.missing)


@dataclass(frozen=True)
class GroupLimitViolation:
    """A group staffed outside its min/max bounds on a date and shift."""

    day: date
    group: str
    shift: str
    count: int
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    @property
    def below_minimum(self) -> bool:
        return self.minimum is not None and self.count < self.minimum

    def __str__(self) -> str:
        if self.below_minimum:
            bound = f"minimum {self.minimum}"
        else:
            bound = f"maximum {self.maximum}"
        return f"{self.day.isoformat()} {self.shift} group {self.group}: {self.count} ({bound})"


def assigned_headcount(
    grid: ScheduleGrid,
    catalog: Optional[ShiftCatalog] = None,
) -> dict[date, dict[str, int]]:
    """Worked headcount per date and shift code; rest codes are excluded."""
    catalog = catalog or ShiftCatalog.default()
    counts: dict[date, dict[str, int]] = {day: {} for day in grid.days}

    for staff_id in grid.staff_ids:
        for day, shift in grid.row(staff_id).items():
            if not shift or catalog.is_rest(shift):
                continue
            counts[day][shift] = counts[day].get(shift, 0) + 1
    return counts


def compute_completeness(
    grid: ScheduleGrid,
    demand_by_date: dict[date, dict[str, int]],
    catalog: Optional[ShiftCatalog] = None,
) -> CompletenessReport:
    """Compare assigned headcount with the requirement for every day of the month.

    Args:
        grid: Finalized assignment grid.
        demand_by_date: Required headcount per date and shift code.
        catalog: Shift catalog; unknown codes raise UnknownShiftCode.

    Returns:
        CompletenessReport; ``complete`` is True iff no shortage was found.
    """
    catalog = catalog or ShiftCatalog.default()
    counts = assigned_headcount(grid, catalog)
    report = CompletenessReport()

    for day in grid.days:
        required_by_code = demand_by_date.get(day, {})
        for code in sorted(required_by_code, key=catalog.sort_key):
            catalog.get(code)
            required = required_by_code[code]
            actual = counts[day].get(code, 0)
            if actual < required:
                report.missing.append(
                    ShortageRecord(day=day, shift=code, required=required, actual=actual)
                )

    report.complete = not report.missing
    logger.info(
        "Grid %s/%04d-%02d: %s (%d shortages)",
        grid.unit_id, grid.year, grid.month,
        "complete" if report.complete else "incomplete", len(report.missing),
    )
    return report


def check_group_limits(
    grid: ScheduleGrid,
    request: PreScheduleRequest,
    catalog: Optional[ShiftCatalog] = None,
) -> list[GroupLimitViolation]:
    """Report dates where a staff group falls outside its per-shift bounds."""
    catalog = catalog or ShiftCatalog.default()
    violations = []

    for day in grid.days:
        per_group: dict[str, dict[str, int]] = {}
        for staff_id in grid.staff_ids:
            shift = grid.get_shift(staff_id, day)
            group = request.group_of(staff_id)
            if group is None or not shift or catalog.is_rest(shift):
                continue
            group_counts = per_group.setdefault(group, {})
            group_counts[shift] = group_counts.get(shift, 0) + 1

        for group in sorted(request.group_limits):
            limit = request.group_limits[group]
            group_counts = per_group.get(group, {})
            codes = set(limit.min_per_shift) | set(limit.max_per_shift)
            for code in sorted(codes, key=catalog.sort_key):
                count = group_counts.get(code, 0)
                minimum = limit.min_per_shift.get(code)
                maximum = limit.max_per_shift.get(code)
                if minimum is not None and count < minimum:
                    violations.append(
                        GroupLimitViolation(day, group, code, count, minimum=minimum)
                    )
                elif maximum is not None and count > maximum:
                    violations.append(
                        GroupLimitViolation(day, group, code, count, maximum=maximum)
                    )

    return violations
