"""JWT verification and caller identity derivation."""

from datetime import timedelta

import pytest

from signflow.infrastructure.security.jwt import (
    caller_from_claims,
    create_access_token,
    verify_token,
)

ADMINS = frozenset({"admin@example.com"})


def test_round_trip_claims() -> None:
    token = create_access_token({"sub": 7, "email": "ana@example.com", "name": "Ana"})
    payload = verify_token(token)
    assert payload["sub"] == "7"
    assert payload["email"] == "ana@example.com"


def test_expired_token_rejected() -> None:
    token = create_access_token({"sub": 7}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        verify_token(token)


def test_tampered_token_rejected() -> None:
    header, _, signature = create_access_token({"sub": 7}).split(".")
    _, payload, _ = create_access_token({"sub": 8}).split(".")
    with pytest.raises(ValueError):
        verify_token(f"{header}.{payload}.{signature}")


def test_caller_from_claims() -> None:
    caller = caller_from_claims(
        {"sub": "7", "email": "ana@example.com", "name": "Ana", "personnel_number": 1234},
        ADMINS,
    )
    assert caller.user_id == 7
    assert caller.display_name == "Ana"
    assert caller.personnel_number == "1234"
    assert caller.is_admin is False


def test_admin_from_allowlist_case_insensitive() -> None:
    caller = caller_from_claims({"sub": "1", "email": "Admin@Example.com"}, ADMINS)
    assert caller.is_admin is True


@pytest.mark.parametrize("sub", ["abc", "0", "-3", None])
def test_invalid_subject(sub) -> None:
    with pytest.raises(ValueError):
        caller_from_claims({"sub": sub}, ADMINS)


def test_upload_permission_defaults_to_allowed() -> None:
    assert caller_from_claims({"sub": "7"}, ADMINS).can_upload is True
    assert caller_from_claims({"sub": "7", "can_upload": True}, ADMINS).can_upload is True


def test_upload_permission_revoked_by_explicit_false() -> None:
    caller = caller_from_claims({"sub": "7", "can_upload": False}, ADMINS)
    assert caller.can_upload is False


def test_admin_can_always_upload() -> None:
    caller = caller_from_claims(
        {"sub": "1", "email": "admin@example.com", "can_upload": False}, ADMINS
    )
    assert caller.can_upload is True
