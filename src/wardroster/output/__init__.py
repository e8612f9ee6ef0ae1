"""Output generation for schedule grids (PDF, text)."""

from wardroster.output.pdf_generator import PDFGenerator
from wardroster.output.text_report import TextReportGenerator

__all__ = [
    "PDFGenerator",
    "TextReportGenerator",
]
