"""Immutable domain value objects."""

from signflow.domain.value_objects.identity import (
    CallerIdentity,
    GroupPlaceholder,
    Identity,
    Individual,
)
from signflow.domain.value_objects.stamp import LAST_PAGE, StampBox

__all__ = [
    "LAST_PAGE",
    "CallerIdentity",
    "GroupPlaceholder",
    "Identity",
    "Individual",
    "StampBox",
]
