"""Stamp layout tests with a fixed-width font (every glyph is 0.6 em)."""

import pytest

from signflow.application.services.stamp_layout import (
    HEIGHT_BUDGET,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    WIDTH_BUDGET,
    block_height,
    fit_text,
    wrap_words,
)
from signflow.domain.value_objects import StampBox


class MonoMetrics:
    font_name = "Mono"

    def text_width(self, text: str, font_size: float) -> float:
        return len(text) * 0.6 * font_size


METRICS = MonoMetrics()


def _assert_inside(layout, box: StampBox) -> None:
    for line in layout.lines:
        assert line.width <= WIDTH_BUDGET * box.width + 1e-9
        assert box.x <= line.x
        assert line.x + line.width <= box.x + box.width + 1e-9
    assert block_height(len(layout.lines), layout.font_size) <= HEIGHT_BUDGET * box.height + 1e-9


def test_short_name_single_line_at_start_size() -> None:
    """Start size is 35% of the box height; a short name stays on one line."""
    box = StampBox(page=1, x=10, y=20, width=200, height=40)
    layout = fit_text("ana lima", box, METRICS)

    assert layout.texts == ["ANA LIMA"]
    assert layout.font_size == pytest.approx(14.0)
    assert layout.font_name == "Mono"
    _assert_inside(layout, box)


def test_start_size_capped_for_tall_boxes() -> None:
    box = StampBox(page=1, x=0, y=0, width=400, height=200)
    assert fit_text("Ana", box, METRICS).font_size == MAX_FONT_SIZE


def test_single_line_is_centered() -> None:
    box = StampBox(page=1, x=100, y=100, width=200, height=40)
    layout = fit_text("Ana", box, METRICS)
    line = layout.lines[0]

    assert line.x == pytest.approx(100 + (200 - line.width) / 2)
    # Baseline of a one-line block sits at the vertical center minus half the size.
    assert line.y == pytest.approx(100 + (40 - layout.font_size) / 2)


def test_long_name_wraps_and_fits() -> None:
    box = StampBox(page=1, x=0, y=0, width=100, height=60)
    layout = fit_text("Maximilian von Habsburg", box, METRICS)

    assert len(layout.lines) > 1
    assert " ".join(layout.texts) == "MAXIMILIAN VON HABSBURG"
    assert layout.font_size < 21.0
    _assert_inside(layout, box)


def test_lines_top_to_bottom() -> None:
    box = StampBox(page=1, x=0, y=0, width=100, height=60)
    layout = fit_text("Maximilian von Habsburg", box, METRICS)
    ys = [line.y for line in layout.lines]
    assert ys == sorted(ys, reverse=True)


def test_unbreakable_word_is_split_at_floor_size() -> None:
    box = StampBox(page=1, x=0, y=0, width=30, height=200)
    layout = fit_text("Supercalifragilistic", box, METRICS)

    assert layout.font_size == MIN_FONT_SIZE
    assert "".join(layout.texts) == "SUPERCALIFRAGILISTIC"
    assert all(len(t) <= 5 for t in layout.texts)
    _assert_inside(layout, box)


def test_block_taller_than_box_at_floor_shrinks_to_height_budget() -> None:
    box = StampBox(page=1, x=0, y=0, width=30, height=20)
    layout = fit_text("Supercalifragilistic Expialidocious", box, METRICS)

    assert layout.font_size < MIN_FONT_SIZE
    assert block_height(len(layout.lines), layout.font_size) == pytest.approx(
        HEIGHT_BUDGET * box.height
    )


def test_glyph_wider_than_box_at_floor_shrinks_to_width_budget() -> None:
    # 8pt mono glyph is 4.8pt wide; the box allows 0.95 * 3 = 2.85pt.
    box = StampBox(page=1, x=5, y=0, width=3, height=40)
    layout = fit_text("Wu", box, METRICS)

    assert layout.texts == ["W", "U"]
    assert layout.font_size == pytest.approx(WIDTH_BUDGET * box.width / 0.6)
    assert layout.font_size < MIN_FONT_SIZE
    _assert_inside(layout, box)


def test_whitespace_is_collapsed() -> None:
    box = StampBox(page=1, x=0, y=0, width=300, height=40)
    assert fit_text("  ana   maria  ", box, METRICS).texts == ["ANA MARIA"]


def test_empty_name_rejected() -> None:
    box = StampBox(page=1, x=0, y=0, width=100, height=40)
    with pytest.raises(ValueError):
        fit_text("   ", box, METRICS)


def test_layout_is_deterministic() -> None:
    box = StampBox(page=-1, x=12.5, y=30, width=120, height=45)
    assert fit_text("Dr. Joana Prates", box, METRICS) == fit_text(
        "Dr. Joana Prates", box, METRICS
    )


def test_wrap_words_greedy() -> None:
    # 10pt mono: each char is 6pt wide, so 60pt holds ten characters.
    assert wrap_words(["AAA", "BBB", "CCCC", "D"], 10, METRICS, 60) == [
        "AAA BBB",
        "CCCC D",
    ]


def test_block_height_uses_line_spacing() -> None:
    assert block_height(0, 10) == 0
    assert block_height(1, 10) == pytest.approx(10)
    assert block_height(3, 10) == pytest.approx(34)
