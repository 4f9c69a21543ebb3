"""Domain enumerations for the Signflow application.

Enums represent the fixed lifecycle states of documents and approver slots.
"""

from enum import Enum


class DocumentState(str, Enum):
    """Document lifecycle state.

    pending -> approved | rejected | expired; expired -> pending on resend.
    A rejected document is superseded by a new version rather than reopened.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid state values as strings."""
        return [state.value for state in cls]


class SlotState(str, Enum):
    """Approver slot state; mirrors the document states it feeds."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid state values as strings."""
        return [state.value for state in cls]

    @property
    def is_open(self) -> bool:
        """True for states a resend may reset back to pending."""
        return self in (SlotState.PENDING, SlotState.EXPIRED)
