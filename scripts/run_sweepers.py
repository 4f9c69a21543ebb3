"""Run one reminder pass and one expiration pass, then exit.

Usage:
    python -m scripts.run_sweepers [--verbose]
Use this from cron when the in-process sweeper loop is disabled
(SWEEPERS_ENABLED=false). Requires DATABASE_URL.
"""

import asyncio
import logging
import sys

from signflow.core.config import get_settings
from signflow.domain.exceptions import SqlNotConfiguredException
from signflow.infrastructure.persistence.database import dispose_engine
from signflow.infrastructure.services.sweeper_runner import run_sweep_pass
from signflow.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Remind overdue approvers and expire documents past their deadline."""
    settings = get_settings()
    setup_logging(logging.DEBUG if "--verbose" in sys.argv[1:] else None)
    try:
        reminded, expired = await run_sweep_pass(settings)
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
    finally:
        await dispose_engine()

    print(
        f"Reminders: examined {reminded.examined}, reminded {len(reminded.processed)} "
        f"document(s), sent {reminded.notifications_sent}, failed {reminded.failed}"
    )
    print(
        f"Expiration: examined {expired.examined}, expired {len(expired.processed)} "
        f"document(s), failed {expired.failed}"
    )


if __name__ == "__main__":
    asyncio.run(main())
