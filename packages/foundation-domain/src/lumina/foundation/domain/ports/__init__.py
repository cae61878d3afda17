"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with external services. Implementations (adapters) live in infrastructure.
"""

from lumina.foundation.domain.ports.password_hasher import PasswordHasherPort
from lumina.foundation.domain.ports.storage import ReadStream, StoragePort

__all__ = ["PasswordHasherPort", "ReadStream", "StoragePort"]
