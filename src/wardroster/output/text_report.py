"""Plain-text report of a finalized schedule grid.

This module renders a month grid as text showing:
- The grid itself, one row per staff member, holidays marked
- Per-staff statistics and long consecutive runs
- Shift distribution, fairness and staffing shortages
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union

from wardroster.domain.calendar import HolidayCalendar
from wardroster.domain.models import ScheduleGrid, ShiftCatalog
from wardroster.statistics.completeness import compute_completeness
from wardroster.statistics.unit import compute_unit_statistics

WEEKDAY_LETTERS = "MTWTFSS"


class TextReportGenerator:
    """Generates a text report for a unit-month.

    Example:
        >>> generator = TextReportGenerator(calendar=HolidayCalendar())
        >>> print(generator.generate_to_string(grid, demand_by_date))
    """

    def __init__(
        self,
        calendar: Optional[HolidayCalendar] = None,
        catalog: Optional[ShiftCatalog] = None,
        long_run: int = 5,
    ):
        self.calendar = calendar or HolidayCalendar()
        self.catalog = catalog or ShiftCatalog.default()
        self.long_run = long_run

    def generate(
        self,
        grid: ScheduleGrid,
        output_path: Union[str, Path],
        demand_by_date: Optional[dict[date, dict[str, int]]] = None,
    ) -> str:
        """Generate the report and save it to a file.

        Args:
            grid: The finalized grid to report on.
            output_path: Path to save the text file.
            demand_by_date: Required headcount; shortages are listed when given.

        Returns:
            The generated text content.
        """
        content = self._generate_content(grid, demand_by_date)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(
        self,
        grid: ScheduleGrid,
        demand_by_date: Optional[dict[date, dict[str, int]]] = None,
    ) -> str:
        return self._generate_content(grid, demand_by_date)

    def _generate_content(
        self,
        grid: ScheduleGrid,
        demand_by_date: Optional[dict[date, dict[str, int]]],
    ) -> str:
        lines = []
        unit = compute_unit_statistics(grid, self.calendar, self.catalog)

        lines.append("=" * 80)
        lines.append(f"SCHEDULE REPORT - {grid.unit_id} {grid.year:04d}-{grid.month:02d}")
        lines.append("=" * 80)
        lines.append(f"Status: {grid.status.value}")
        lines.append(f"Staff: {len(grid.staff_ids)}")
        lines.append("")

        lines.extend(self._grid_lines(grid))
        lines.append("")

        lines.append("-" * 80)
        lines.append("STAFF STATISTICS")
        lines.append("-" * 80)
        lines.append(
            f"{'Staff':<12} {'Work':>5} {'Off':>5} {'HolW':>5} {'HolO':>5} {'MaxRun':>7}  Shifts"
        )
        for staff_id, stats in unit.staff.items():
            counts = " ".join(
                f"{code}:{stats.shift_counts[code]}"
                for code in sorted(stats.shift_counts, key=self.catalog.sort_key)
            )
            lines.append(
                f"{staff_id[:12]:<12} {stats.work_days:>5} {stats.off_days:>5} "
                f"{stats.holiday_work_days:>5} {stats.holiday_off_days:>5} "
                f"{stats.consecutive_max:>7}  {counts}"
            )
        lines.append("")

        long_runs = [
            (staff_id, run)
            for staff_id, stats in unit.staff.items()
            for run in stats.runs_at_least(self.long_run)
        ]
        if long_runs:
            lines.append(f"Runs of {self.long_run}+ worked days:")
            for staff_id, run in long_runs:
                lines.append(
                    f"  {staff_id}: {run.start.isoformat()} - {run.end.isoformat()} "
                    f"({run.length} days)"
                )
            lines.append("")

        lines.append("-" * 80)
        lines.append("DISTRIBUTION")
        lines.append("-" * 80)
        for code, deviation in unit.deviation.items():
            values = list(unit.distribution[code].values())
            lines.append(
                f"  {code:<6} min {min(values):>3}  max {max(values):>3}  deviation {deviation:>3}"
            )
        lines.append(f"  Holiday work deviation: {unit.holiday_work_deviation}")
        lines.append(f"  Avg work days: {unit.avg_work_days:.1f}")
        lines.append(f"  Std dev: {unit.work_days_std_dev:.2f}")
        lines.append(f"  Fairness score: {unit.fairness_score:.1f}/100")
        lines.append("")

        if demand_by_date is not None:
            report = compute_completeness(grid, demand_by_date, self.catalog)
            lines.append("-" * 80)
            lines.append("COMPLETENESS")
            lines.append("-" * 80)
            if report.complete:
                lines.append("All staffing requirements met.")
            else:
                for record in report.missing:
                    lines.append(
                        f"  {record.day.isoformat()} {record.shift:<4} "
                        f"required {record.required}, assigned {record.actual} "
                        f"(short {record.shortage})"
                    )
                lines.append(f"Total shortage: {report.total_shortage}")
            lines.append("")

        lines.append("=" * 80)
        lines.append("END OF REPORT")
        lines.append("=" * 80)
        return "\n".join(lines)

    def _grid_lines(self, grid: ScheduleGrid) -> list[str]:
        days = grid.days
        rest_code = self.catalog.rest_code

        header = f"{'':<12}" + "".join(f"{d.day:>4}" for d in days)
        weekdays = f"{'':<12}" + "".join(
            f"{WEEKDAY_LETTERS[d.weekday()] + ('*' if self.calendar.is_holiday(d) else ''):>4}"
            for d in days
        )
        lines = [header, weekdays]
        for staff_id in grid.staff_ids:
            row = grid.row(staff_id)
            cells = "".join(f"{(row.get(d) or rest_code)[:3]:>4}" for d in days)
            lines.append(f"{staff_id[:12]:<12}{cells}")
        lines.append("(* = holiday)")
        return lines
