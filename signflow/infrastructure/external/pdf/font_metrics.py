"""Text measurement backed by reportlab's built-in font tables."""

from reportlab.pdfbase.pdfmetrics import stringWidth

STAMP_FONT = "Helvetica-Bold"


class ReportlabFontMetrics:
    """FontMetrics for a standard PDF font (no embedding needed)."""

    def __init__(self, font_name: str = STAMP_FONT) -> None:
        self.font_name = font_name

    def text_width(self, text: str, font_size: float) -> float:
        return stringWidth(text, self.font_name, font_size)
