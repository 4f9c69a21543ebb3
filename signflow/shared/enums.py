"""Shared enumerations for the Signflow application.

Cross-cutting enums used by application and infrastructure (audit trail,
notification kinds). Workflow lifecycle enums live in signflow.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditAction(_ValuesMixin, str, Enum):
    """Audit trail actions recorded against a document."""

    UPLOAD = "upload"
    NOTIFICATION = "notification"
    SIGN = "sign"
    REJECT = "reject"
    NEW_VERSION = "new_version"
    EXPIRATION = "expiration"
    REMINDER = "reminder"
    DOWNLOAD = "download"
    REPOSITION = "reposition"
    RESEND = "resend"
    EDIT = "edit"
    DELETE = "delete"


class NotificationKind(_ValuesMixin, str, Enum):
    """Kinds of outbound workflow notification (part of the dedup key)."""

    APPROVAL_REQUEST = "approval_request"
    NEW_VERSION = "new_version"
    REJECTION = "rejection"
    APPROVAL_COMPLETE = "approval_complete"
    REMINDER = "reminder"
    EXPIRATION = "expiration"


class MailBackend(_ValuesMixin, str, Enum):
    """Outbound mail transport selected by configuration."""

    LOG = "log"
    SMTP = "smtp"
