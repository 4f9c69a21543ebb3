"""API fixtures: services replaced by AsyncMocks so no database is touched."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from signflow.api.v1.dependencies import (
    get_group_admin_service,
    get_group_admin_service_for_write,
    get_query_service,
    get_query_service_for_write,
    get_signing_service,
    get_workflow_service,
)
from signflow.application.dtos.document import (
    DocumentDetail,
    DocumentResult,
    SlotResult,
)
from signflow.application.use_cases.groups import GroupAdminService
from signflow.application.use_cases.workflow import (
    DocumentQueryService,
    DocumentWorkflowService,
    SigningService,
)
from signflow.domain.enums import DocumentState, SlotState
from signflow.domain.value_objects import LAST_PAGE, GroupPlaceholder, Individual, StampBox

CREATED = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


@pytest.fixture
def workflow_svc(app) -> AsyncMock:
    svc = AsyncMock(spec=DocumentWorkflowService)
    app.dependency_overrides[get_workflow_service] = lambda: svc
    return svc


@pytest.fixture
def signing_svc(app) -> AsyncMock:
    svc = AsyncMock(spec=SigningService)
    app.dependency_overrides[get_signing_service] = lambda: svc
    return svc


@pytest.fixture
def query_svc(app) -> AsyncMock:
    svc = AsyncMock(spec=DocumentQueryService)
    app.dependency_overrides[get_query_service] = lambda: svc
    app.dependency_overrides[get_query_service_for_write] = lambda: svc
    return svc


@pytest.fixture
def group_svc(app) -> AsyncMock:
    svc = AsyncMock(spec=GroupAdminService)
    app.dependency_overrides[get_group_admin_service] = lambda: svc
    app.dependency_overrides[get_group_admin_service_for_write] = lambda: svc
    return svc


@pytest.fixture
def document() -> DocumentResult:
    return DocumentResult(
        id="doc-1",
        display_name="Purchase order",
        document_type="po",
        description=None,
        storage_ref="documents/doc-1/v1/purchase-order.pdf",
        version=1,
        parent_id=None,
        root_id="doc-1",
        creator_id=1,
        creator_name="Carla Creator",
        creator_email="creator@example.com",
        access_token="access-1",
        state=DocumentState.PENDING,
        limit_hours=48,
        deadline_at=None,
        reminder_interval_minutes=60,
        last_reminder_at=None,
        finalized_at=None,
        created_at=CREATED,
        updated_at=CREATED,
    )


@pytest.fixture
def slots() -> list[SlotResult]:
    box = StampBox(page=LAST_PAGE, x=50, y=50, width=150, height=75)
    return [
        SlotResult(
            id="slot-1",
            document_id="doc-1",
            ordinal=0,
            identity=Individual(2),
            display_name="Alice Approver",
            email="alice@example.com",
            role="approver",
            token="tok-alice",
            state=SlotState.PENDING,
            box=box,
        ),
        SlotResult(
            id="slot-2",
            document_id="doc-1",
            ordinal=1,
            identity=GroupPlaceholder("board@example.com"),
            display_name="Board",
            email=None,
            role="approver",
            token="tok-board",
            state=SlotState.PENDING,
            box=box,
        ),
    ]


@pytest.fixture
def detail(document, slots) -> DocumentDetail:
    return DocumentDetail(document=document, slots=slots)
