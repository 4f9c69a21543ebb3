"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from signflow.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from signflow.api.v1.endpoints import documents, groups, health, signatures

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(signatures.router, prefix="/signatures", tags=["signatures"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
