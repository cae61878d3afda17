"""Lumina Infra Persistence: PostgreSQL engine, sessions and lifespan hook."""

from lumina.infra.persistence.database import (
    Database,
    DatabaseSettings,
    get_database,
    get_sync_session_factory,
)
from lumina.infra.persistence.lifespan import lifespan_contribution

__all__ = [
    "Database",
    "DatabaseSettings",
    "get_database",
    "get_sync_session_factory",
    "lifespan_contribution",
]
