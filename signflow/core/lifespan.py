"""Application lifespan: startup and shutdown.

No business logic here, only wiring: logging, the sweeper tasks, and
DB engine dispose.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from signflow.core.config import get_settings
from signflow.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, then the reminder and expiration tasks (if enabled).
    Shutdown: cancel and await the tasks, then dispose the SQL engine.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.sweeper_tasks = []
    if settings.sweepers_enabled:
        from signflow.infrastructure.services.sweeper_runner import start_sweepers

        app.state.sweeper_tasks = start_sweepers(settings)
    else:
        logger.info("Sweepers disabled")

    yield

    # ---- Shutdown ----
    tasks = app.state.sweeper_tasks
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Sweeper tasks stopped")

    from signflow.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.dispose_engine()
        logger.info("Database engine disposed")
