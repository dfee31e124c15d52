"""Document renderers."""

from finance_reports.output.base import BaseRenderer
from finance_reports.output.pdf_renderer import PDFRenderer

__all__ = ["BaseRenderer", "PDFRenderer"]
