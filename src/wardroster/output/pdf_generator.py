"""PDF generation for monthly schedule grids.

This module creates printable PDF schedules showing:
- The month grid with one row per staff member and holidays shaded
- Per-staff statistics and unit fairness
- Staffing shortages against required headcount
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from wardroster.domain.calendar import HolidayCalendar
from wardroster.domain.models import ScheduleGrid, ShiftCatalog
from wardroster.statistics.completeness import compute_completeness
from wardroster.statistics.unit import compute_unit_statistics

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "D": (0.75, 0.88, 0.75),  # Green
    "E": (0.75, 0.80, 0.95),  # Blue
    "N": (0.80, 0.72, 0.90),  # Purple
    "rest": (0.97, 0.97, 0.97),
    "holiday": (1.0, 0.88, 0.88),  # Light red
    "other": (0.90, 0.90, 0.80),
}


class PDFGenerator:
    """Generates printable PDF month schedules.

    Example:
        >>> generator = PDFGenerator(calendar=HolidayCalendar(country="KR"))
        >>> generator.generate(grid, "schedule.pdf", demand_by_date=demand)
    """

    def __init__(
        self,
        calendar: Optional[HolidayCalendar] = None,
        catalog: Optional[ShiftCatalog] = None,
        page_width: float = 842,  # A4 landscape width
        page_height: float = 595,  # A4 landscape height
        margin: float = 30,
    ):
        self.calendar = calendar or HolidayCalendar()
        self.catalog = catalog or ShiftCatalog.default()
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        grid: ScheduleGrid,
        output_path: Union[str, Path],
        demand_by_date: Optional[dict[date, dict[str, int]]] = None,
        include_summary: bool = True,
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            grid: The finalized grid to render.
            output_path: Path to save the PDF.
            demand_by_date: Required headcount; shortages are listed when given.
            include_summary: Whether to include the statistics page.
        """
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=(self.page_width, self.page_height))
        self._draw(c, grid, demand_by_date, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        grid: ScheduleGrid,
        demand_by_date: Optional[dict[date, dict[str, int]]] = None,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        self._draw(c, grid, demand_by_date, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(
        self,
        c,
        grid: ScheduleGrid,
        demand_by_date: Optional[dict[date, dict[str, int]]],
        include_summary: bool,
    ) -> None:
        self._draw_grid_pages(c, grid)
        if include_summary:
            self._draw_summary_page(c, grid, demand_by_date)

    def _draw_grid_pages(self, c, grid: ScheduleGrid) -> None:
        """Draw the month grid, splitting staff over as many pages as needed."""
        days = grid.days
        staff_ids = grid.staff_ids

        row_height = 16
        header_height = 70
        footer_height = 30
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        name_width = 80
        cell_width = (self.page_width - 2 * self.margin - name_width) / len(days)
        total_pages = max(1, (len(staff_ids) + rows_per_page - 1) // rows_per_page)

        for page in range(total_pages):
            page_staff = staff_ids[page * rows_per_page:(page + 1) * rows_per_page]

            self._draw_header(c, grid)

            top = self.page_height - self.margin - header_height
            self._draw_day_axis(c, days, self.margin + name_width, top, cell_width, row_height)

            y = top - row_height
            for staff_id in page_staff:
                y -= row_height
                self._draw_staff_row(
                    c, grid, staff_id, days, self.margin + name_width, y, cell_width, row_height
                )

            self._draw_legend(c, self.margin, self.margin + 5)

            c.setFont("Helvetica", 8)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 12,
                f"Page {page + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, grid: ScheduleGrid) -> None:
        """Draw page header with unit and month."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Schedule - {grid.unit_id} {date(grid.year, grid.month, 1).strftime('%B %Y')}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Staff: {len(grid.staff_ids)}    Status: {grid.status.value}",
        )

    def _draw_day_axis(
        self,
        c,
        days: list[date],
        x: float,
        y: float,
        cell_width: float,
        row_height: float,
    ) -> None:
        """Draw day numbers with holiday columns shaded."""
        for i, day in enumerate(days):
            cx = x + i * cell_width
            if self.calendar.is_holiday(day):
                c.setFillColorRGB(*COLORS["holiday"])
                c.rect(cx, y - row_height, cell_width, row_height * 2, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 7)
            c.drawCentredString(cx + cell_width / 2, y - 5, str(day.day))
            c.setFont("Helvetica", 6)
            c.drawCentredString(cx + cell_width / 2, y - row_height + 4, day.strftime("%a")[:2])

    def _draw_staff_row(
        self,
        c,
        grid: ScheduleGrid,
        staff_id: str,
        days: list[date],
        x: float,
        y: float,
        cell_width: float,
        row_height: float,
    ) -> None:
        """Draw a single staff member's row of shift cells."""
        row = grid.row(staff_id)
        rest_code = self.catalog.rest_code

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 8)
        c.drawString(self.margin, y + 4, staff_id[:16])

        for i, day in enumerate(days):
            code = row.get(day) or rest_code
            cx = x + i * cell_width

            c.setFillColorRGB(*self._color_for(code, day))
            c.setStrokeColorRGB(0.7, 0.7, 0.7)
            c.setLineWidth(0.3)
            c.rect(cx, y, cell_width, row_height, fill=1, stroke=1)

            if not self.catalog.is_rest(code):
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica-Bold", 7)
                c.drawCentredString(cx + cell_width / 2, y + 5, code[:3])

    def _color_for(self, code: str, day: date) -> tuple[float, float, float]:
        if self.catalog.is_rest(code):
            return COLORS["holiday"] if self.calendar.is_holiday(day) else COLORS["rest"]
        return COLORS.get(code, COLORS["other"])

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFont("Helvetica-Bold", 8)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(x, y, "Legend:")

        items = [(d.code, d.name or d.code) for d in self.catalog if not d.is_rest_code]
        items.append(("holiday", "Holiday"))

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS.get(key, COLORS["other"]))
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 70

    def _draw_summary_page(
        self,
        c,
        grid: ScheduleGrid,
        demand_by_date: Optional[dict[date, dict[str, int]]],
    ) -> None:
        """Draw summary page with staff statistics and shortages."""
        unit = compute_unit_statistics(grid, self.calendar, self.catalog)

        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Schedule Summary - {grid.unit_id} {grid.year:04d}-{grid.month:02d}",
        )

        y = self.page_height - self.margin - 55
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Staff Statistics")
        y -= 18

        columns = [
            ("Staff", 0), ("Work", 110), ("Off", 150), ("Hol. work", 190),
            ("Hol. off", 250), ("Max run", 305), ("Shifts", 360),
        ]
        c.setFont("Helvetica-Bold", 9)
        for label, offset in columns:
            c.drawString(self.margin + offset, y, label)
        y -= 13

        c.setFont("Helvetica", 9)
        for staff_id, stats in unit.staff.items():
            if y < self.margin + 60:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            values = [
                staff_id[:18],
                str(stats.work_days),
                str(stats.off_days),
                str(stats.holiday_work_days),
                str(stats.holiday_off_days),
                str(stats.consecutive_max),
                " ".join(
                    f"{code}:{stats.shift_counts[code]}"
                    for code in sorted(stats.shift_counts, key=self.catalog.sort_key)
                ),
            ]
            for (_, offset), value in zip(columns, values):
                c.drawString(self.margin + offset, y, value)
            y -= 12

        y -= 15
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Fairness")
        y -= 15
        c.setFont("Helvetica", 10)
        lines = [
            f"Avg work days: {unit.avg_work_days:.1f}    Std dev: {unit.work_days_std_dev:.2f}",
            f"Fairness score: {unit.fairness_score:.1f}/100",
            f"Holiday work deviation: {unit.holiday_work_deviation}",
            "Deviation per shift: " + ", ".join(
                f"{code} {value}" for code, value in unit.deviation.items()
            ),
        ]
        for line in lines:
            c.drawString(self.margin + 20, y, line)
            y -= 14

        if demand_by_date is not None:
            report = compute_completeness(grid, demand_by_date, self.catalog)
            y -= 10
            c.setFont("Helvetica-Bold", 12)
            c.drawString(self.margin, y, "Staffing Shortages")
            y -= 15
            c.setFont("Helvetica", 9)
            if report.complete:
                c.drawString(self.margin + 20, y, "All staffing requirements met.")
            for record in report.missing:
                if y < self.margin:
                    c.showPage()
                    y = self.page_height - self.margin - 20
                    c.setFont("Helvetica", 9)
                c.drawString(
                    self.margin + 20, y,
                    f"{record.day.isoformat()}  {record.shift}: required {record.required}, "
                    f"assigned {record.actual} (short {record.shortage})",
                )
                y -= 12

        c.showPage()
