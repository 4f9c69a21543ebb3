"""Workflow and group service dependencies (composition root).

Read routes get a plain session; write routes get a transactional one so a
failure anywhere in the use case rolls back every row it touched.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.application.use_cases.groups import GroupAdminService
from signflow.application.use_cases.workflow import (
    DocumentQueryService,
    DocumentWorkflowService,
    SigningService,
)
from signflow.core.config import get_settings
from signflow.infrastructure.persistence.database import get_db, get_db_transactional
from signflow.infrastructure.services.composition import (
    build_group_admin_service,
    build_query_service,
    build_signing_service,
    build_workflow_service,
)


async def get_workflow_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> DocumentWorkflowService:
    """Document lifecycle (create, new version, resend, edit, delete)."""
    return build_workflow_service(db, get_settings())


async def get_signing_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> SigningService:
    """Sign, reject and reposition."""
    return build_signing_service(db, get_settings())


async def get_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DocumentQueryService:
    """Read-only document queries."""
    return build_query_service(db, get_settings())


async def get_query_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> DocumentQueryService:
    """Queries that append to the audit trail (download)."""
    return build_query_service(db, get_settings())


async def get_group_admin_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GroupAdminService:
    return build_group_admin_service(db, get_settings())


async def get_group_admin_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> GroupAdminService:
    return build_group_admin_service(db, get_settings())
