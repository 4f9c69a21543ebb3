"""UTC helpers used by the sweepers and mail bodies."""

from datetime import UTC, datetime, timedelta, timezone

from signflow.shared.utils.datetime import ensure_utc, format_utc, utc_now


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is UTC


def test_ensure_utc() -> None:
    naive = datetime(2026, 3, 2, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
    offset = datetime(2026, 3, 2, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(offset) == datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
    assert ensure_utc(None) is None


def test_format_utc() -> None:
    assert format_utc(datetime(2026, 3, 2, 9, 5, 59, tzinfo=UTC)) == "2026-03-02 09:05 UTC"
    assert format_utc(None) == "n/a"
    assert format_utc(None, missing="no deadline") == "no deadline"
