"""Pure application services: delegation, layout, dedup gate, notifier."""

from signflow.application.services.delegation_resolver import (
    DelegationResolver,
    match_member,
)
from signflow.application.services.notification_gate import NotificationGate
from signflow.application.services.notifier import WorkflowNotifier
from signflow.application.services.stamp_layout import (
    FontMetrics,
    StampLayout,
    StampRequest,
    fit_text,
)

__all__ = [
    "DelegationResolver",
    "FontMetrics",
    "NotificationGate",
    "StampLayout",
    "StampRequest",
    "WorkflowNotifier",
    "fit_text",
    "match_member",
]
