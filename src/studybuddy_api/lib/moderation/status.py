"""Derived account status: the login-eligibility predicate.

Nothing here is stored.  Every check is computed from the account's flags
at read time, so a suspension lapses on its own once ``suspended_until`` is
in the past and no write is needed to lift it.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class ModeratedAccount(Protocol):
    """The subset of account attributes the predicate reads."""

    is_active: bool
    is_deleted: bool
    suspended_until: datetime | None
    banned_at: datetime | None


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes even for timezone-aware columns; those
    are treated as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_banned(account: ModeratedAccount) -> bool:
    """True while a ban is recorded on the account."""
    return account.banned_at is not None


def is_suspended(account: ModeratedAccount, now: datetime | None = None) -> bool:
    """True while the suspension end time lies strictly in the future.

    Args:
        account: The account to check.
        now: Reference time; defaults to the current UTC time.
    """
    if account.suspended_until is None:
        return False
    reference = as_utc(now) if now is not None else datetime.now(UTC)
    return as_utc(account.suspended_until) > reference


def can_login(account: ModeratedAccount, now: datetime | None = None) -> bool:
    """Authoritative login gate.

    ``is_active and not banned and not suspended and not deleted``.
    """
    return (
        bool(account.is_active)
        and not is_banned(account)
        and not is_suspended(account, now)
        and not bool(account.is_deleted)
    )


@dataclass(frozen=True)
class AccountStatus:
    """Snapshot of every derived flag, for responses and CLI output."""

    can_login: bool
    is_banned: bool
    is_suspended: bool
    is_deleted: bool
    is_active: bool

    @property
    def label(self) -> str:
        """Single most significant state, in precedence order."""
        if self.is_deleted:
            return "deleted"
        if self.is_banned:
            return "banned"
        if self.is_suspended:
            return "suspended"
        if not self.is_active:
            return "disabled"
        return "active"


def describe_status(account: ModeratedAccount, now: datetime | None = None) -> AccountStatus:
    """Evaluate all derived flags of ``account`` at one instant."""
    reference = now if now is not None else datetime.now(UTC)
    return AccountStatus(
        can_login=can_login(account, reference),
        is_banned=is_banned(account),
        is_suspended=is_suspended(account, reference),
        is_deleted=bool(account.is_deleted),
        is_active=bool(account.is_active),
    )
