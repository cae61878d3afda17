"""Lumina Foundation Application: application layer patterns."""

from lumina.foundation.application.contributions import (
    LIFESPAN_PRIORITY_OBSERVABILITY,
    LIFESPAN_PRIORITY_PERSISTENCE,
    LIFESPAN_PRIORITY_TASKIQ,
    LifespanContribution,
    compose_lifespan,
    order_contributions,
)

__all__ = [
    "LIFESPAN_PRIORITY_OBSERVABILITY",
    "LIFESPAN_PRIORITY_PERSISTENCE",
    "LIFESPAN_PRIORITY_TASKIQ",
    "LifespanContribution",
    "compose_lifespan",
    "order_contributions",
]
