"""Approver identities and the authenticated caller.

A slot is bound either to one individual (numeric user id) or to a group
alias. The two are distinct types so a group binding can never be mistaken
for a user foreign key.
"""

from __future__ import annotations

from dataclasses import dataclass

from signflow.shared.utils.generators import normalize_email


@dataclass(frozen=True)
class Individual:
    """Slot bound to a single user."""

    user_id: int

    def __post_init__(self) -> None:
        if isinstance(self.user_id, bool) or not isinstance(self.user_id, int):
            raise TypeError("Individual.user_id must be an int")
        if self.user_id <= 0:
            raise ValueError("Individual.user_id must be positive")


@dataclass(frozen=True)
class GroupPlaceholder:
    """Slot bound to a signer group; any active member may satisfy it."""

    group_email: str

    def __post_init__(self) -> None:
        normalized = normalize_email(self.group_email)
        if not normalized:
            raise ValueError("GroupPlaceholder.group_email must be non-empty")
        object.__setattr__(self, "group_email", normalized)


Identity = Individual | GroupPlaceholder


@dataclass(frozen=True)
class CallerIdentity:
    """Verified identity attached to every request by the auth collaborator."""

    user_id: int
    email: str | None = None
    display_name: str = ""
    personnel_number: str | None = None
    is_admin: bool = False
    can_upload: bool = True

    @property
    def normalized_email(self) -> str:
        return normalize_email(self.email)
