"""Safety invariants checked before any moderation mutation.

Each guard raises :class:`InvalidOperationError` and has no side effects, so
a failed check leaves the target untouched.  The functional-admin count is
supplied by the caller, which owns the database query.
"""

from loguru import logger

from studybuddy_api.lib.moderation.errors import InvalidOperationError

ADMIN_ROLE = "ADMIN"


def ensure_not_self(actor_id: int, target_id: int, action: str) -> None:
    """Reject an administrator acting on their own account.

    Args:
        actor_id: The acting administrator's account id.
        target_id: The target account id.
        action: Verb used in the error message (e.g. "ban").
    """
    if actor_id == target_id:
        logger.warning(f"Admin {actor_id} attempted to {action} their own account")
        msg = f"Cannot {action} your own account"
        raise InvalidOperationError(msg)


def ensure_not_last_admin(target_role: str, functional_admin_count: int) -> None:
    """Reject removing or demoting the last functional administrator.

    A functional administrator is an ADMIN account that is neither deleted
    nor banned.  The guard only applies when the target is itself ADMIN.

    Args:
        target_role: Current role of the target account.
        functional_admin_count: Number of non-deleted, non-banned ADMIN accounts.
    """
    if target_role != ADMIN_ROLE:
        return
    if functional_admin_count <= 1:
        logger.warning(f"Rejected action on last admin account (functional admins={functional_admin_count})")
        msg = "Cannot modify the last admin account"
        raise InvalidOperationError(msg)


def ensure_not_self_demotion(actor_id: int, target_id: int, current_role: str, new_role: str) -> None:
    """Reject an administrator removing their own ADMIN role.

    Self-promotion and same-role updates are allowed.
    """
    if actor_id == target_id and current_role == ADMIN_ROLE and new_role != ADMIN_ROLE:
        msg = "Cannot remove your own admin role"
        raise InvalidOperationError(msg)


def is_admin_demotion(current_role: str, new_role: str) -> bool:
    """True when a role change moves an account away from ADMIN."""
    return current_role == ADMIN_ROLE and new_role != ADMIN_ROLE


def require_reason(reason: str | None, action: str) -> str:
    """Return the stripped reason, rejecting a missing or blank one.

    Args:
        reason: Free-text justification supplied by the administrator.
        action: Description used in the error message.
    """
    if reason is None or not reason.strip():
        msg = f"Reason is required for {action}"
        raise InvalidOperationError(msg)
    return reason.strip()
