"""Password hashing with bcrypt.

Separated from the domain layer because hashing is an infrastructure
concern. Domain code only sees the PasswordHasherPort protocol from
lumina.foundation.domain.ports.
"""

from __future__ import annotations

import bcrypt

_BCRYPT_ROUNDS = 12
# bcrypt ignores input past 72 bytes; newer releases reject it outright.
_BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher:
    """Password hasher implementing PasswordHasherPort.

    Args:
        rounds: bcrypt cost factor (default: 12).

    Example:
        >>> hasher = BcryptPasswordHasher(rounds=4)
        >>> hashed = hasher.hash_password("correct horse")
        >>> hasher.verify_password("correct horse", hashed)
        True
    """

    def __init__(self, rounds: int = _BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash_password(self, plain: str) -> str:
        """Hash a password with a fresh salt.

        Returns:
            Bcrypt hash string (includes salt, starts with $2b$).
        """
        return bcrypt.hashpw(
            self._encode(plain),
            bcrypt.gensalt(rounds=self._rounds),
        ).decode("utf-8")

    def verify_password(self, plain: str, hashed: str) -> bool:
        """Verify a password against a stored bcrypt hash.

        Returns False for an empty or malformed hash instead of raising.
        """
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(plain), hashed.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def _encode(plain: str) -> bytes:
        return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]
