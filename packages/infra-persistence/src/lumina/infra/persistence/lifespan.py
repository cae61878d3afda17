"""Startup probe and shutdown disposal for the account database.

Runs at LIFESPAN_PRIORITY_PERSISTENCE so logging is configured first and the
pool is still open while later hooks drain.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from lumina.foundation.application import LIFESPAN_PRIORITY_PERSISTENCE, LifespanContribution
from lumina.infra.persistence.database import MAX_RECOMMENDED_CONNECTIONS, get_database

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _persistence_lifespan(app: Any) -> AsyncIterator[None]:
    database = get_database()
    settings = database.settings

    await asyncio.to_thread(database.ping)
    logger.info(
        "database_reachable",
        extra={"database_url": settings.database_url, "max_connections": settings.max_connections},
    )
    if settings.max_connections > MAX_RECOMMENDED_CONNECTIONS:
        logger.warning(
            "database_pool_oversized",
            extra={
                "max_connections": settings.max_connections,
                "recommended": MAX_RECOMMENDED_CONNECTIONS,
            },
        )

    try:
        yield
    finally:
        await asyncio.to_thread(database.dispose)
        logger.info("database_disposed")


lifespan_contribution = LifespanContribution(
    hook=_persistence_lifespan,
    priority=LIFESPAN_PRIORITY_PERSISTENCE,
)
