"""ID, capability-token and normalization helpers."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# 32 random bytes, hex encoded (64 chars).
TOKEN_BYTES = 32


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_token() -> str:
    """Return an unguessable capability token from the OS CSPRNG.

    Used for document access tokens and per-slot signing tokens; never reused
    across documents or versions.
    """
    return secrets.token_hex(TOKEN_BYTES)


def normalize_email(address: str | None) -> str:
    """Lower-case and trim an email address ("" for None)."""
    return (address or "").strip().lower()
