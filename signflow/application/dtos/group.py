"""DTOs for signer group members."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupMemberCreate:
    """Input for adding a member to a signer group."""

    id: str
    group_email: str
    name: str
    email: str | None = None
    personnel_number: str | None = None
    user_id: int | None = None
    position: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class GroupMemberUpdate:
    """Editable member fields; None means "leave unchanged"."""

    name: str | None = None
    email: str | None = None
    personnel_number: str | None = None
    user_id: int | None = None
    position: str | None = None
    role: str | None = None
    active: bool | None = None


@dataclass(frozen=True)
class GroupMemberResult:
    """Signer group member read-model."""

    id: str
    group_email: str
    name: str
    email: str | None
    personnel_number: str | None
    user_id: int | None
    position: str | None
    role: str | None
    active: bool


@dataclass(frozen=True)
class GroupSummary:
    """Configured group alias and how many active members it has."""

    group_email: str
    active_members: int
