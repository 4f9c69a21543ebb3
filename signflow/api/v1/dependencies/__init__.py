"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from signflow.api.v1.dependencies.auth import (
    get_client_ip,
    get_current_caller,
    get_current_caller_optional,
)
from signflow.api.v1.dependencies.workflow import (
    get_group_admin_service,
    get_group_admin_service_for_write,
    get_query_service,
    get_query_service_for_write,
    get_signing_service,
    get_workflow_service,
)

__all__ = [
    "get_client_ip",
    "get_current_caller",
    "get_current_caller_optional",
    "get_group_admin_service",
    "get_group_admin_service_for_write",
    "get_query_service",
    "get_query_service_for_write",
    "get_signing_service",
    "get_workflow_service",
]
