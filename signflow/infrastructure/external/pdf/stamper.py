"""Draw signer names onto PDF pages.

Each target page gets one overlay page, the same size as its mediabox,
holding every stamp for that page; the overlay is merged on top of the
original content. Pages without stamps are copied unchanged.
"""

from __future__ import annotations

from collections import defaultdict
from io import BytesIO

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.pdfgen import canvas

from signflow.application.services.stamp_layout import (
    FontMetrics,
    StampLayout,
    StampRequest,
    fit_text,
)
from signflow.infrastructure.exceptions import StampRenderError
from signflow.infrastructure.external.pdf.font_metrics import ReportlabFontMetrics
from signflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Dark blue, like an ink stamp.
STAMP_COLOR_RGB = (0.0, 0.0, 0.6)


def _read(pdf_bytes: bytes) -> PdfReader:
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        _ = len(reader.pages)
    except (PyPdfError, ValueError, OSError) as e:
        raise StampRenderError(f"unreadable PDF: {e}") from e
    return reader


class PdfStamper:
    """IPdfStamper implementation using reportlab for drawing and pypdf for merging."""

    def __init__(self, metrics: FontMetrics | None = None) -> None:
        self._metrics = metrics or ReportlabFontMetrics()

    def page_count(self, pdf_bytes: bytes) -> int:
        return len(_read(pdf_bytes).pages)

    @staticmethod
    def _make_overlay(page_w: float, page_h: float, layouts: list[StampLayout]) -> bytes:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(page_w, page_h))
        c.setFillColorRGB(*STAMP_COLOR_RGB)
        for layout in layouts:
            c.setFont(layout.font_name, layout.font_size)
            for line in layout.lines:
                c.drawString(line.x, line.y, line.text)
        c.save()
        return buf.getvalue()

    def stamp(self, pdf_bytes: bytes, requests: list[StampRequest]) -> bytes:
        """Return a copy of pdf_bytes with every request drawn in its box.

        Raises:
            StampRenderError: Unreadable PDF, a box on a missing page, or a
                merge failure.
        """
        reader = _read(pdf_bytes)
        page_count = len(reader.pages)
        by_page: dict[int, list[StampLayout]] = defaultdict(list)
        for request in requests:
            try:
                index = request.box.page_index(page_count)
                layout = fit_text(request.name, request.box, self._metrics)
            except (IndexError, ValueError) as e:
                raise StampRenderError(str(e)) from e
            by_page[index].append(layout)

        writer = PdfWriter()
        try:
            for i, page in enumerate(reader.pages):
                if i in by_page:
                    box = page.mediabox
                    overlay = self._make_overlay(
                        float(box.width), float(box.height), by_page[i]
                    )
                    page.merge_page(PdfReader(BytesIO(overlay)).pages[0])
                writer.add_page(page)
            out = BytesIO()
            writer.write(out)
        except (PyPdfError, ValueError, OSError) as e:
            raise StampRenderError(f"merge failed: {e}") from e
        logger.debug(
            "Stamped %d name(s) on %d page(s)", len(requests), len(by_page)
        )
        return out.getvalue()
