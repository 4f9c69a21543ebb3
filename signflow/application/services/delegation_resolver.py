"""Decide whether a caller may act on an approver slot.

A caller may act when they are the slot's bound individual, when they
logged in with the group alias of a group slot, or when they match an
active member of that group. Member matching tries email, then personnel
number, then numeric user id; the first kind that matches wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from signflow.domain.value_objects import CallerIdentity, GroupPlaceholder, Individual
from signflow.shared.utils.generators import normalize_email

if TYPE_CHECKING:
    from signflow.application.dtos.document import SlotResult
    from signflow.application.dtos.group import GroupMemberResult
    from signflow.application.interfaces.repositories import ISignerGroupRepository


def match_member(
    members: list[GroupMemberResult], caller: CallerIdentity
) -> GroupMemberResult | None:
    """Return the active member the caller is, by email > personnel number > user id."""
    active = [m for m in members if m.active]
    email = caller.normalized_email
    if email:
        for member in active:
            if member.email and normalize_email(member.email) == email:
                return member
    personnel = (caller.personnel_number or "").strip()
    if personnel:
        for member in active:
            if member.personnel_number and member.personnel_number.strip() == personnel:
                return member
    for member in active:
        if member.user_id is not None and member.user_id == caller.user_id:
            return member
    return None


def is_group_alias(group: GroupPlaceholder, caller: CallerIdentity) -> bool:
    """True when the caller authenticated as the group mailbox itself."""
    return bool(caller.normalized_email) and caller.normalized_email == group.group_email


class DelegationResolver:
    """Answers can_act for slots; never assigns a resolved signer."""

    def __init__(self, group_repo: ISignerGroupRepository) -> None:
        self._groups = group_repo

    async def can_act(self, slot: SlotResult, caller: CallerIdentity) -> bool:
        identity = slot.identity
        if isinstance(identity, Individual):
            return identity.user_id == caller.user_id
        if is_group_alias(identity, caller):
            return True
        return await self.resolve_member(identity, caller) is not None

    async def resolve_member(
        self, group: GroupPlaceholder, caller: CallerIdentity
    ) -> GroupMemberResult | None:
        """Active member of group matching the caller, or None."""
        members = await self._groups.list_members(group.group_email)
        return match_member(members, caller)

    async def groups_for(
        self, caller: CallerIdentity, group_emails: list[str]
    ) -> list[str]:
        """Subset of group_emails on whose behalf the caller may act."""
        allowed: set[str] = set()
        email = caller.normalized_email
        for group_email in group_emails:
            if email and email == normalize_email(group_email):
                allowed.add(normalize_email(group_email))
        members = await self._groups.list_active_in(group_emails)
        by_group: dict[str, list[GroupMemberResult]] = {}
        for member in members:
            by_group.setdefault(member.group_email, []).append(member)
        for group_email, group_members in by_group.items():
            if match_member(group_members, caller) is not None:
                allowed.add(group_email)
        return sorted(allowed)
