"""UTC datetime helpers.

Stored timestamps (deadlines, reminders, signatures) are timezone-aware UTC.
"""

from datetime import UTC, datetime

HUMAN_FORMAT = "%Y-%m-%d %H:%M UTC"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime; the default clock for services and sweepers."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive values and convert aware ones; None passes through.

    Some drivers hand back naive values for timestamptz columns, so the
    sweepers normalize before comparing against the clock.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_utc(dt: datetime | None, missing: str = "n/a") -> str:
    """Minute-precision UTC text for mail bodies and audit descriptions."""
    value = ensure_utc(dt)
    return value.strftime(HUMAN_FORMAT) if value else missing
