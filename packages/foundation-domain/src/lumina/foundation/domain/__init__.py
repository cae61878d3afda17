"""Lumina Foundation Domain: exceptions, principal and port protocols."""

from lumina.foundation.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from lumina.foundation.domain.ports import PasswordHasherPort, ReadStream, StoragePort
from lumina.foundation.domain.principal import ADMIN_ROLE, Principal

__all__ = [
    "ADMIN_ROLE",
    "AuthorizationError",
    "ConflictError",
    "DomainError",
    "InvariantViolationError",
    "NotFoundError",
    "PasswordHasherPort",
    "Principal",
    "ReadStream",
    "StoragePort",
    "ValidationError",
]
