"""Signer group administration use cases."""

from signflow.application.use_cases.groups.group_admin import GroupAdminService

__all__ = ["GroupAdminService"]
