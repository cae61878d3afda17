"""Lumina Accounts: account lifecycle and the deferred deletion pipeline."""

from lumina.domain.accounts.account import Account, AccountRole, utc_now
from lumina.domain.accounts.deletion import (
    AccountDeletionExecutor,
    AccountDeletionScheduler,
    DeletionOutcome,
    DeletionResult,
    DeletionTask,
)
from lumina.domain.accounts.eligibility import DELETION_GRACE_PERIOD, is_eligible_for_deletion
from lumina.domain.accounts.management import AccountManager
from lumina.domain.accounts.ports import (
    AccountRepositoryPort,
    AccountScopedRepositoryPort,
    JobName,
    JobQueuePort,
)
from lumina.domain.accounts.schemas import (
    AccountView,
    AdminPasswordReset,
    CreateAccountCommand,
    ProfileImageView,
    UpdateAccountCommand,
)
from lumina.domain.accounts.service import AccountService
from lumina.domain.accounts.settings import AccountSettings, get_account_settings
from lumina.domain.accounts.storage import StorageFolder, StorageLocator

__all__ = [
    "DELETION_GRACE_PERIOD",
    "Account",
    "AccountDeletionExecutor",
    "AccountDeletionScheduler",
    "AccountManager",
    "AccountRepositoryPort",
    "AccountRole",
    "AccountScopedRepositoryPort",
    "AccountService",
    "AccountSettings",
    "AccountView",
    "AdminPasswordReset",
    "CreateAccountCommand",
    "DeletionOutcome",
    "DeletionResult",
    "DeletionTask",
    "JobName",
    "JobQueuePort",
    "ProfileImageView",
    "StorageFolder",
    "StorageLocator",
    "UpdateAccountCommand",
    "get_account_settings",
    "is_eligible_for_deletion",
    "utc_now",
]
