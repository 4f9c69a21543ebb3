"""Tests for domain value objects (stamp box, identities, caller)."""

import pytest

from signflow.domain.value_objects import (
    LAST_PAGE,
    CallerIdentity,
    GroupPlaceholder,
    Individual,
    StampBox,
)


def test_stamp_box_last_page_resolves_to_final_index() -> None:
    box = StampBox(page=LAST_PAGE, x=0, y=0, width=10, height=10)
    assert box.page_index(1) == 0
    assert box.page_index(7) == 6


def test_stamp_box_explicit_page() -> None:
    box = StampBox(page=3, x=0, y=0, width=10, height=10)
    assert box.page_index(3) == 2
    with pytest.raises(IndexError):
        box.page_index(2)


def test_stamp_box_empty_document() -> None:
    with pytest.raises(IndexError):
        StampBox(page=LAST_PAGE, x=0, y=0, width=10, height=10).page_index(0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page": 0},
        {"page": -2},
        {"width": 0},
        {"height": -1},
        {"x": -0.5},
    ],
)
def test_stamp_box_rejects_invalid_geometry(kwargs) -> None:
    values = {"page": 1, "x": 0, "y": 0, "width": 10, "height": 10, **kwargs}
    with pytest.raises(ValueError):
        StampBox(**values)


def test_individual_requires_positive_int() -> None:
    assert Individual(7).user_id == 7
    with pytest.raises(ValueError):
        Individual(0)
    with pytest.raises(TypeError):
        Individual("7")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        Individual(True)  # type: ignore[arg-type]


def test_group_placeholder_normalizes_alias() -> None:
    assert GroupPlaceholder("  Board@Example.COM ").group_email == "board@example.com"
    assert GroupPlaceholder("board@example.com") == GroupPlaceholder("BOARD@example.com")
    with pytest.raises(ValueError):
        GroupPlaceholder("   ")


def test_individual_and_group_never_equal() -> None:
    assert Individual(1) != GroupPlaceholder("1@example.com")


def test_caller_normalized_email() -> None:
    assert CallerIdentity(user_id=1, email=" Ana@X.org ").normalized_email == "ana@x.org"
    assert CallerIdentity(user_id=1).normalized_email == ""
