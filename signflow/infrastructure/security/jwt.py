"""JWT creation and verification for caller identity.

Tokens are issued by the identity collaborator; this service only verifies
them. Claims: sub (numeric user id), email, name, personnel_number and the
optional can_upload flag.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from signflow.core.config import get_settings
from signflow.domain.value_objects import CallerIdentity


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with the given claims.

    Used by tests and local tooling; production tokens come from the
    identity provider sharing SECRET_KEY.

    Args:
        data: Claims to encode (sub, email, name, personnel_number).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    if expires_delta is not None:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode["exp"] = expire
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If token is invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def caller_from_claims(
    payload: dict[str, Any], admin_emails: frozenset[str]
) -> CallerIdentity:
    """Build the caller identity; admin status comes from the configured allowlist.

    Raises:
        ValueError: If sub is not a positive integer user id.
    """
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError("Token subject must be a numeric user id") from e
    if user_id <= 0:
        raise ValueError("Token subject must be a positive user id")
    email = payload.get("email") or None
    personnel_number = payload.get("personnel_number")
    is_admin = bool(email) and email.strip().lower() in admin_emails
    return CallerIdentity(
        user_id=user_id,
        email=email,
        display_name=str(payload.get("name") or ""),
        personnel_number=str(personnel_number) if personnel_number else None,
        is_admin=is_admin,
        # Absent means allowed; only an explicit false revokes uploads.
        can_upload=is_admin or payload.get("can_upload") is not False,
    )
