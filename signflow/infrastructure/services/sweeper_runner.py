"""Periodic sweeper loops.

The reminder and expiration sweepers run as two independent tasks. Each
pass opens its own session; every document in the pass commits in its own
transaction and its mail is sent after that commit. A failing pass is
logged and the loop keeps its schedule.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Literal

import signflow.infrastructure.persistence.database as database
from signflow.application.dtos.notification import SweepResult
from signflow.infrastructure.services.composition import build_sweepers
from signflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from signflow.core.config import Settings

logger = get_logger(__name__)

SweeperName = Literal["reminder", "expiration"]
SWEEPERS: tuple[SweeperName, ...] = ("reminder", "expiration")


async def run_pass(name: SweeperName, settings: Settings) -> SweepResult:
    """Run one pass of the named sweeper on its own session."""
    factory = database.get_session_factory()
    async with factory() as session:
        reminders, expirations = build_sweepers(session, settings)
        sweeper = reminders if name == "reminder" else expirations
        return await sweeper.run()


async def run_sweep_pass(settings: Settings) -> tuple[SweepResult, SweepResult]:
    """One reminder pass then one expiration pass (used by the cron script)."""
    reminded = await run_pass("reminder", settings)
    expired = await run_pass("expiration", settings)
    return reminded, expired


async def run_forever(name: SweeperName, settings: Settings) -> None:
    """Run passes of one sweeper every sweeper_interval_seconds until cancelled."""
    interval = settings.sweeper_interval_seconds
    logger.info("%s sweeper started (interval=%ss)", name.capitalize(), interval)
    while True:
        try:
            await run_pass(name, settings)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s sweep pass failed", name.capitalize())
        await asyncio.sleep(interval)


def start_sweepers(settings: Settings) -> list[asyncio.Task[None]]:
    """Create one background task per sweeper."""
    return [
        asyncio.create_task(run_forever(name, settings), name=f"{name}-sweeper")
        for name in SWEEPERS
    ]
