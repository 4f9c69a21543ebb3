"""Document approval workflow use cases."""

from signflow.application.use_cases.workflow.document_lifecycle import (
    DocumentWorkflowService,
)
from signflow.application.use_cases.workflow.queries import DocumentQueryService
from signflow.application.use_cases.workflow.signing import SigningService
from signflow.application.use_cases.workflow.sweepers import (
    ExpirationSweeper,
    ReminderSweeper,
    is_reminder_due,
)

__all__ = [
    "DocumentQueryService",
    "DocumentWorkflowService",
    "ExpirationSweeper",
    "ReminderSweeper",
    "SigningService",
    "is_reminder_due",
]
