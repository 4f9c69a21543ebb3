"""Small pure helpers: UTC time, token and id generation, address normalization."""

from signflow.shared.utils.datetime import ensure_utc, utc_now
from signflow.shared.utils.generators import (
    generate_cuid,
    generate_token,
    normalize_email,
)

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "generate_token",
    "normalize_email",
    "utc_now",
]
