"""Stamp box geometry in PDF page coordinates (origin bottom-left, y up)."""

from __future__ import annotations

from dataclasses import dataclass

# Page sentinel meaning "the last page of the document".
LAST_PAGE = -1


@dataclass(frozen=True)
class StampBox:
    """Where a signature stamp is drawn.

    page is 1-based, or LAST_PAGE. x/y locate the bottom-left corner.
    """

    page: int
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.page != LAST_PAGE and self.page < 1:
            raise ValueError(f"page must be >= 1 or {LAST_PAGE}, got {self.page}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.x < 0 or self.y < 0:
            raise ValueError("x and y must be non-negative")

    def page_index(self, page_count: int) -> int:
        """Return the 0-based page index for a document with page_count pages.

        Raises:
            IndexError: If the page does not exist in the document.
        """
        if page_count < 1:
            raise IndexError("document has no pages")
        if self.page == LAST_PAGE:
            return page_count - 1
        if self.page > page_count:
            raise IndexError(f"page {self.page} out of range (1..{page_count})")
        return self.page - 1
