"""Lumina Infra Auth: credential hashing adapters."""

from lumina.infra.auth.password_hasher import BcryptPasswordHasher

__all__ = ["BcryptPasswordHasher"]
