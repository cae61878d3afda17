"""Port interface for password hashing.

Example:
    >>> from lumina.foundation.domain.ports import PasswordHasherPort
    >>> def store(hasher: PasswordHasherPort, plain: str) -> str:
    ...     return hasher.hash_password(plain)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PasswordHasherPort(Protocol):
    """Port for one-way password hashing and verification."""

    def hash_password(self, plain: str) -> str:
        """Hash a plaintext password for storage."""
        ...

    def verify_password(self, plain: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash."""
        ...
