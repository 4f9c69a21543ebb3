"""PDF stamping with reportlab overlays merged by pypdf."""

from signflow.infrastructure.external.pdf.font_metrics import ReportlabFontMetrics
from signflow.infrastructure.external.pdf.stamper import PdfStamper

__all__ = ["PdfStamper", "ReportlabFontMetrics"]
