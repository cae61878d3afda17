"""Errors raised by Lumina account operations.

Every error carries a stable ``error_code`` and a flat ``context`` dict so
callers can log it with ``extra=err.context`` or map it onto a transport
status without string matching. The deletion pipeline reports outcomes as
values instead; these are for the synchronous account surface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "DomainError",
    "InvariantViolationError",
    "NotFoundError",
    "ValidationError",
]


class DomainError(Exception):
    """Root of the hierarchy.

    ``str(err)`` appends the context as ``key=value`` pairs, e.g.
    ``"Conflict: Email already in use (email=a@example.com)"``.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        pairs = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({pairs})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, context={self.context!r})"


class NotFoundError(DomainError):
    """No live record for the given identifier (404)."""

    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: UUID | str, **context: Any) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id), **context},
        )


class ValidationError(DomainError):
    """A field value the account rules reject, e.g. a malformed storage label."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str, **context: Any) -> None:
        self.field = field
        self.reason = reason
        super().__init__(
            f"Validation failed for '{field}': {reason}",
            {"field": field, "reason": reason, **context},
        )


class ConflictError(DomainError):
    """Uniqueness clash: email, storage label, or a second administrator (409)."""

    error_code = "CONFLICT"

    def __init__(self, reason: str, **context: Any) -> None:
        self.reason = reason
        super().__init__(f"Conflict: {reason}", context)


class AuthorizationError(DomainError):
    """The principal may not perform this operation at all (403)."""

    error_code = "AUTHORIZATION_ERROR"


class InvariantViolationError(DomainError):
    """The principal may act, but not on this target.

    Deleting the administrator account is the canonical case; ``invariant``
    names the rule (``"admin_not_deletable"``).
    """

    error_code = "INVARIANT_VIOLATION"

    def __init__(self, message: str, invariant: str, **context: Any) -> None:
        self.invariant = invariant
        super().__init__(message, {"invariant": invariant, **context})
