"""Startup and shutdown hooks contributed by infrastructure packages.

Each infra package exports a ``lifespan_contribution``; a process entry
point (the TaskIQ worker, a producer host) picks the ones it needs and
nests them with ``compose_lifespan``. Nothing here imports a framework.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable
    from contextlib import AbstractAsyncContextManager

logger = logging.getLogger(__name__)

# Lower starts earlier and stops later
LIFESPAN_PRIORITY_OBSERVABILITY = 50
LIFESPAN_PRIORITY_PERSISTENCE = 75
LIFESPAN_PRIORITY_TASKIQ = 150


@dataclass(frozen=True, slots=True)
class LifespanContribution:
    """An ``(app) -> AsyncContextManager[None]`` factory and its start order."""

    hook: Any  # Callable[[Any], AsyncContextManager[None]]
    priority: int = 500


def order_contributions(
    contributions: Iterable[LifespanContribution],
) -> list[LifespanContribution]:
    return sorted(contributions, key=lambda c: c.priority)


def compose_lifespan(
    contributions: Iterable[LifespanContribution],
) -> Callable[[Any], AbstractAsyncContextManager[None]]:
    """Nest ``contributions`` into one lifespan, lowest priority outermost.

    A hook that fails during startup unwinds the hooks already entered
    before the error propagates.
    """
    ordered = order_contributions(contributions)

    @asynccontextmanager
    async def lifespan(app: Any) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for contribution in ordered:
                logger.info(
                    "lifespan_hook_entering",
                    extra={"priority": contribution.priority, "hook": repr(contribution.hook)},
                )
                await stack.enter_async_context(contribution.hook(app))
            yield

    return lifespan
