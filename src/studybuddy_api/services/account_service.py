"""Account lifecycle service -- the moderation state machine.

Every mutating operation follows the same shape inside one transaction:
load the target row (locked for update), run the safety guards, mutate the
flags, write exactly one audit entry, commit.  A failed guard raises before
any mutation and the transaction is rolled back.

The login gate itself is never stored; see
:func:`studybuddy_api.lib.moderation.can_login`.
"""

from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.core.database import transaction
from studybuddy_api.lib.moderation import (
    AdminActor,
    InvalidOperationError,
    NotFoundError,
    as_utc,
    ensure_not_last_admin,
    ensure_not_self,
    ensure_not_self_demotion,
    is_admin_demotion,
    is_banned,
    is_suspended,
)
from studybuddy_api.models.audit_log import AuditAction, TargetType
from studybuddy_api.models.user import Role, User
from studybuddy_api.services.audit_service import record_action
from studybuddy_api.services.cascade_service import delete_account_dependents

# ---------------------------------------------------------------------------
# Lookups and shared checks
# ---------------------------------------------------------------------------


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    """Get an account by id, including soft-deleted accounts.

    Args:
        session: The database session.
        user_id: The account id.

    Returns:
        The User if found, None otherwise.
    """
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(
    session: AsyncSession,
    *,
    include_deleted: bool = False,
    role: Role | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[User], int]:
    """List accounts with pagination.

    Args:
        session: The database session.
        include_deleted: Include soft-deleted accounts.
        role: Only accounts with this role.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (users list, total count).
    """
    conditions = []
    if not include_deleted:
        conditions.append(User.is_deleted.is_(False))
    if role is not None:
        conditions.append(User.role == role.value)

    total = (await session.execute(select(func.count(User.id)).where(*conditions))).scalar_one()

    offset = (page - 1) * page_size
    result = await session.execute(
        select(User).where(*conditions).order_by(User.created_at, User.id).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


async def count_functional_admins(session: AsyncSession) -> int:
    """Count ADMIN accounts that are neither soft-deleted nor banned."""
    result = await session.execute(
        select(func.count(User.id)).where(
            User.role == Role.ADMIN.value,
            User.is_deleted.is_(False),
            User.banned_at.is_(None),
        )
    )
    return result.scalar_one()


async def _load_for_update(session: AsyncSession, user_id: int) -> User:
    """Load and row-lock the target account.

    Raises:
        NotFoundError: If the account does not exist.
    """
    result = await session.execute(
        select(User).where(User.id == user_id).with_for_update().execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def check_last_admin(session: AsyncSession, user: User) -> None:
    """Apply the last-administrator guard to ``user``.

    Raises:
        InvalidOperationError: If ``user`` is ADMIN and at most one functional admin exists.
    """
    if user.role != Role.ADMIN:
        return
    ensure_not_last_admin(user.role, await count_functional_admins(session))


# ---------------------------------------------------------------------------
# Suspension
# ---------------------------------------------------------------------------


async def suspend_user(
    session: AsyncSession,
    actor: AdminActor,
    user_id: int,
    *,
    until: datetime,
    reason: str | None,
) -> User:
    """Suspend an account until ``until``.

    ``is_active`` is left alone: the suspension is enforced only by the
    derived predicate and therefore expires by itself.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: If the actor targets their own account.
    """
    async with transaction(session):
        ensure_not_self(actor.id, user_id, "suspend")
        user = await _load_for_update(session, user_id)

        previous = user.suspended_until
        user.suspended_until = as_utc(until)
        user.suspension_reason = reason

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.SUSPEND,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
            metadata={"previous_suspended_until": previous, "suspended_until": user.suspended_until},
        )
    logger.info(f"Admin {actor.username} suspended account {user_id} until {user.suspended_until}")
    return user


async def unsuspend_user(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Clear an account's suspension.

    Does not touch ``is_active``; an account disabled separately stays disabled.
    """
    async with transaction(session):
        user = await _load_for_update(session, user_id)

        previous = user.suspended_until
        user.suspended_until = None
        user.suspension_reason = None

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.UNSUSPEND,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
            metadata={"previous_suspended_until": previous},
        )
    logger.info(f"Admin {actor.username} lifted suspension of account {user_id}")
    return user


# ---------------------------------------------------------------------------
# Ban
# ---------------------------------------------------------------------------


async def ban_user(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Ban an account. Unlike suspension, a ban also forces ``is_active`` off.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: On self-ban or when banning the last admin.
    """
    async with transaction(session):
        ensure_not_self(actor.id, user_id, "ban")
        user = await _load_for_update(session, user_id)
        await check_last_admin(session, user)

        user.banned_at = datetime.now(UTC)
        user.ban_reason = reason
        user.is_active = False

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.BAN,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} banned account {user_id}")
    return user


async def unban_user(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Clear an account's ban. Login is not re-enabled; use :func:`enable_login`."""
    async with transaction(session):
        user = await _load_for_update(session, user_id)

        user.banned_at = None
        user.ban_reason = None

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.UNBAN,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} unbanned account {user_id}")
    return user


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


async def soft_delete_user(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Soft-delete an account, keeping all dependent records for recovery.

    Expert and characteristic profiles, role and verification status are
    not touched, so :func:`restore_user` brings the account back intact.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: On self-deletion or when deleting the last admin.
    """
    async with transaction(session):
        ensure_not_self(actor.id, user_id, "delete")
        user = await _load_for_update(session, user_id)
        await check_last_admin(session, user)

        user.is_deleted = True
        user.deleted_at = datetime.now(UTC)
        user.is_active = False

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.SOFT_DELETE,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} soft-deleted account {user_id}")
    return user


async def restore_user(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Restore a soft-deleted account.

    Login is re-enabled only when the account is neither banned nor
    currently suspended.  Role and verification status are unchanged.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: If the account is not soft-deleted.
    """
    async with transaction(session):
        user = await _load_for_update(session, user_id)
        if not user.is_deleted:
            msg = "User is not deleted"
            raise InvalidOperationError(msg)

        user.is_deleted = False
        user.deleted_at = None
        login_enabled = not is_banned(user) and not is_suspended(user)
        if login_enabled:
            user.is_active = True

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.RESTORE,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
            metadata={"login_enabled": login_enabled},
        )
    logger.info(f"Admin {actor.username} restored account {user_id} (login_enabled={login_enabled})")
    return user


async def permanent_delete_user(
    session: AsyncSession,
    actor: AdminActor,
    user_id: int,
    *,
    reason: str | None,
    grace_period: timedelta | None = None,
) -> None:
    """Irreversibly delete a soft-deleted account and everything that depends on it.

    Dependents are removed by the cascade coordinator, the audit entry is
    written, and only then is the account row deleted, all in one transaction.

    Args:
        session: The database session.
        actor: The acting administrator.
        user_id: The account to delete.
        reason: Free-text justification.
        grace_period: When given, reject deletion until this long after the
            soft delete. Enforcement is the caller's policy choice.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: If the account is not soft-deleted, is the
            actor's own, is the last admin, or is still within ``grace_period``.
    """
    async with transaction(session):
        ensure_not_self(actor.id, user_id, "permanently delete")
        user = await _load_for_update(session, user_id)
        if not user.is_deleted:
            msg = "User must be soft deleted before permanent deletion"
            raise InvalidOperationError(msg)
        await check_last_admin(session, user)
        if grace_period is not None and user.deleted_at is not None:
            eligible_at = as_utc(user.deleted_at) + grace_period
            if datetime.now(UTC) < eligible_at:
                msg = f"User is within the deletion grace period until {eligible_at.isoformat()}"
                raise InvalidOperationError(msg)

        username = user.username
        summary = await delete_account_dependents(session, user.id)

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.PERMANENT_DELETE,
            target_type=TargetType.USER,
            target_id=user_id,
            reason=reason,
            metadata={"username": username, **summary.as_metadata()},
        )

        await session.delete(user)
        await session.flush()
    logger.info(f"Admin {actor.username} permanently deleted account {user_id} ({username})")


# ---------------------------------------------------------------------------
# Role and login switches
# ---------------------------------------------------------------------------


async def update_user_role(
    session: AsyncSession,
    actor: AdminActor,
    user_id: int,
    *,
    new_role: Role | str,
    reason: str | None,
) -> User:
    """Change an account's role.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: On an unknown role, self-demotion from ADMIN,
            or demotion of the last admin.
    """
    try:
        role = Role(new_role)
    except ValueError:
        msg = f"Unknown role '{new_role}'"
        raise InvalidOperationError(msg) from None

    async with transaction(session):
        user = await _load_for_update(session, user_id)
        ensure_not_self_demotion(actor.id, user.id, user.role, role)
        if is_admin_demotion(user.role, role):
            await check_last_admin(session, user)

        old_role = user.role
        user.role = role.value

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.ROLE_CHANGE,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
            metadata={"old_role": old_role, "new_role": role},
        )
    logger.info(f"Admin {actor.username} changed role of account {user_id}: {old_role} -> {role}")
    return user


async def disable_login(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Switch off login independently of ban and suspension flags.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: If the actor targets their own account.
    """
    async with transaction(session):
        ensure_not_self(actor.id, user_id, "disable login for")
        user = await _load_for_update(session, user_id)

        user.is_active = False

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.DISABLE_LOGIN,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} disabled login for account {user_id}")
    return user


async def enable_login(session: AsyncSession, actor: AdminActor, user_id: int, *, reason: str | None) -> User:
    """Switch login back on.

    Suspension is never cleared here: enabling login and lifting a
    suspension are separate decisions, so a suspended account is rejected.

    Raises:
        NotFoundError: If the account does not exist.
        InvalidOperationError: If the account is banned or currently suspended.
    """
    async with transaction(session):
        user = await _load_for_update(session, user_id)
        if is_banned(user):
            msg = "Cannot enable login for banned user. Unban first."
            raise InvalidOperationError(msg)
        if is_suspended(user):
            msg = "Cannot enable login for suspended user. Unsuspend first."
            raise InvalidOperationError(msg)

        user.is_active = True

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.ENABLE_LOGIN,
            target_type=TargetType.USER,
            target_id=user.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} enabled login for account {user_id}")
    return user
