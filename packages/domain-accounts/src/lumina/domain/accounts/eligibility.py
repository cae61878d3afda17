"""Deletion eligibility policy.

A soft-deleted account becomes eligible for permanent deletion once a
fixed grace period has elapsed since its soft-delete timestamp.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

DELETION_GRACE_PERIOD = timedelta(days=7)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps from storage are UTC by convention
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_eligible_for_deletion(
    deleted_at: datetime | None,
    now: datetime,
    grace_period: timedelta = DELETION_GRACE_PERIOD,
) -> bool:
    """Decide whether an account may be purged.

    Args:
        deleted_at: Soft-delete timestamp, None for an active account.
        now: Current time.
        grace_period: Time an account stays recoverable.

    Returns:
        False for an active account; otherwise True iff at least
        ``grace_period`` has passed since ``deleted_at``.
    """
    if deleted_at is None:
        return False
    return as_utc(now) - as_utc(deleted_at) >= grace_period
