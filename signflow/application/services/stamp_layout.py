"""Fit an approver's name into a stamp box.

Pure computation: (name, box, font metrics) -> lines, font size and line
positions. No PDF objects and no shared state, so the same inputs always
produce the same layout, whether stamping a fresh signature or reapplying
every signature onto the pristine original after a reposition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from signflow.domain.value_objects import StampBox

MAX_FONT_SIZE = 24.0
MIN_FONT_SIZE = 8.0
FONT_STEP = 0.5
START_HEIGHT_RATIO = 0.35
WIDTH_BUDGET = 0.95
HEIGHT_BUDGET = 0.9
LINE_SPACING = 1.2


class FontMetrics(Protocol):
    """Measures rendered text width for a given font."""

    font_name: str

    def text_width(self, text: str, font_size: float) -> float:
        """Width of text in points at font_size."""


@dataclass(frozen=True)
class StampRequest:
    """A name to draw inside a box."""

    name: str
    box: StampBox


@dataclass(frozen=True)
class PlacedLine:
    """One wrapped line and its baseline origin in page coordinates."""

    text: str
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class StampLayout:
    """Result of fit_text."""

    font_name: str
    font_size: float
    lines: tuple[PlacedLine, ...]

    @property
    def texts(self) -> list[str]:
        return [line.text for line in self.lines]


def block_height(line_count: int, font_size: float) -> float:
    """Height of a block of line_count lines at font_size with 1.2 line spacing."""
    if line_count <= 0:
        return 0.0
    gap = LINE_SPACING * font_size - font_size
    return line_count * font_size + (line_count - 1) * gap


def _shrink(font_size: float) -> float:
    return max(font_size - FONT_STEP, MIN_FONT_SIZE)


def _split_word(
    word: str, font_size: float, metrics: FontMetrics, max_width: float
) -> list[str]:
    """Split word into the widest prefixes that fit max_width (at least one char each)."""
    if metrics.text_width(word, font_size) <= max_width:
        return [word]
    pieces: list[str] = []
    rest = word
    while rest:
        cut = 1
        while cut < len(rest) and metrics.text_width(rest[: cut + 1], font_size) <= max_width:
            cut += 1
        pieces.append(rest[:cut])
        rest = rest[cut:]
    return pieces


def wrap_words(
    words: list[str], font_size: float, metrics: FontMetrics, max_width: float
) -> list[str]:
    """Greedy wrap: add words to the current line while it still fits."""
    lines: list[str] = []
    current = ""
    for word in words:
        for piece in _split_word(word, font_size, metrics, max_width):
            candidate = f"{current} {piece}" if current else piece
            if metrics.text_width(candidate, font_size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = piece
    if current:
        lines.append(current)
    return lines


def fit_text(name: str, box: StampBox, metrics: FontMetrics) -> StampLayout:
    """Lay out name (upper-cased) inside box without overflowing it.

    Starts at min(0.35 * height, 24) and shrinks in 0.5pt steps down to an
    8pt floor, first so every word fits 95% of the width, then so the wrapped
    block fits 90% of the height. If the block still does not fit at the
    floor, the size is derived directly from the height budget. Words that
    cannot fit even at the floor are hard-split character by character, and
    a glyph wider than the box on its own sets the size from the width budget.

    Raises:
        ValueError: If name is empty after trimming.
    """
    text = " ".join(name.upper().split())
    if not text:
        raise ValueError("Cannot stamp an empty name")

    max_width = WIDTH_BUDGET * box.width
    max_height = HEIGHT_BUDGET * box.height
    words = text.split(" ")

    font_size = min(START_HEIGHT_RATIO * box.height, MAX_FONT_SIZE)
    while font_size > MIN_FONT_SIZE and any(
        metrics.text_width(word, font_size) > max_width for word in words
    ):
        font_size = _shrink(font_size)

    lines = wrap_words(words, font_size, metrics, max_width)
    while block_height(len(lines), font_size) > max_height and font_size > MIN_FONT_SIZE:
        font_size = _shrink(font_size)
        lines = wrap_words(words, font_size, metrics, max_width)

    if block_height(len(lines), font_size) > max_height:
        # Narrower text keeps every line within the width, so no re-wrap.
        count = len(lines)
        font_size = max_height / (count + (count - 1) * (LINE_SPACING - 1))

    widest = max(metrics.text_width(line, font_size) for line in lines)
    if widest > max_width:
        # A single glyph is wider than the box; text width scales with size.
        font_size = font_size * max_width / widest

    return StampLayout(
        font_name=metrics.font_name,
        font_size=font_size,
        lines=_place(lines, font_size, box, metrics),
    )


def _place(
    lines: list[str], font_size: float, box: StampBox, metrics: FontMetrics
) -> tuple[PlacedLine, ...]:
    """Center the block vertically and each line horizontally, clamped to the box."""
    total = block_height(len(lines), font_size)
    bottom = box.y + (box.height - total) / 2
    top_baseline = bottom + total - font_size
    right = box.x + box.width
    placed: list[PlacedLine] = []
    for index, line in enumerate(lines):
        width = metrics.text_width(line, font_size)
        x = box.x + (box.width - width) / 2
        x = max(box.x, min(x, right - width))
        y = top_baseline - index * LINE_SPACING * font_size
        placed.append(PlacedLine(text=line, x=x, y=y, width=width))
    return tuple(placed)
