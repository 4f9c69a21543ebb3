"""Caller identity dependencies.

The identity collaborator issues bearer JWTs; every route except /health
requires one. Admin status is derived from the configured allowlist, never
from the token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from signflow.core.config import get_settings
from signflow.domain.value_objects import CallerIdentity
from signflow.infrastructure.security.jwt import caller_from_claims, verify_token
from signflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_caller_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> CallerIdentity | None:
    """Return the caller from the JWT if present and valid; else None."""
    if not credentials:
        return None
    try:
        payload = verify_token(credentials.credentials)
        return caller_from_claims(payload, get_settings().admin_email_set)
    except ValueError as e:
        logger.info("Rejected bearer token: %s", e)
        return None


async def get_current_caller(
    caller: Annotated[CallerIdentity | None, Depends(get_current_caller_optional)],
) -> CallerIdentity:
    """Return the caller from the JWT; raise 401 if missing or invalid."""
    if caller is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def get_client_ip(request: Request) -> str | None:
    """Client address for the audit trail (first X-Forwarded-For hop if present)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None
