"""The caller an account operation runs on behalf of.

Transport code builds a ``Principal`` from whatever credential it accepted;
the account service only ever asks two questions of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

ADMIN_ROLE = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    account_id: UUID
    roles: tuple[str, ...] = ()
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles

    def owns(self, account_id: UUID) -> bool:
        """True when ``account_id`` is the caller's own account."""
        return self.account_id == account_id
