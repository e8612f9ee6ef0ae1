"""Tests for text and PDF report output."""

from datetime import date

import pytest

from wardroster.domain.calendar import HolidayCalendar
from wardroster.domain.models import ScheduleGrid
from wardroster.output import PDFGenerator, TextReportGenerator


@pytest.fixture
def grid():
    row = {date(2025, 3, d): "D" for d in range(3, 9)}
    return ScheduleGrid(
        unit_id="ward-7",
        year=2025,
        month=3,
        assignments={"s1": row, "s2": {date(2025, 3, 3): "N"}},
    )


class TestTextReportGenerator:
    """Tests for TextReportGenerator."""

    @pytest.fixture
    def generator(self):
        return TextReportGenerator(calendar=HolidayCalendar())

    def test_sections(self, generator, grid):
        text = generator.generate_to_string(grid)
        assert "SCHEDULE REPORT - ward-7 2025-03" in text
        assert "STAFF STATISTICS" in text
        assert "Fairness score" in text
        # No requirement given, so no completeness section
        assert "COMPLETENESS" not in text

    def test_long_runs_listed(self, generator, grid):
        """Runs at or above the threshold are listed."""
        text = generator.generate_to_string(grid)
        assert "s1: 2025-03-03 - 2025-03-08 (6 days)" in text

    def test_shortages(self, generator, grid):
        text = generator.generate_to_string(grid, {date(2025, 3, 4): {"N": 2}})
        assert "required 2, assigned 0 (short 2)" in text
        assert "Total shortage: 2" in text

    def test_complete(self, generator, grid):
        text = generator.generate_to_string(grid, {date(2025, 3, 3): {"D": 1, "N": 1}})
        assert "All staffing requirements met." in text

    def test_write_to_file(self, generator, grid, tmp_path):
        path = tmp_path / "report.txt"
        content = generator.generate(grid, path)
        assert path.read_text(encoding="utf-8") == content


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    def test_buffer(self, grid):
        buffer = PDFGenerator(calendar=HolidayCalendar()).generate_to_buffer(
            grid, {date(2025, 3, 4): {"N": 1}}
        )
        assert buffer.read(4) == b"%PDF"

    def test_many_staff_paginate(self, tmp_path):
        """Grids taller than a page are split across pages."""
        assignments = {f"s{i:03d}": {date(2025, 3, 1): "D"} for i in range(80)}
        grid = ScheduleGrid("ward-7", 2025, 3, assignments=assignments)
        path = tmp_path / "big.pdf"

        PDFGenerator().generate(grid, path, include_summary=True)
        assert path.stat().st_size > 0
