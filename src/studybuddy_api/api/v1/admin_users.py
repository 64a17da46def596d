"""Admin account moderation endpoints.

All endpoints require the ADMIN role.  Each POST/PUT maps to one lifecycle
operation and returns the account with its derived status.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.api.errors import moderation_errors
from studybuddy_api.core.config import Settings, get_settings
from studybuddy_api.core.dependencies import get_admin_actor, get_async_session
from studybuddy_api.lib.moderation import AdminActor
from studybuddy_api.models.user import Role
from studybuddy_api.schemas.common import PaginationMeta
from studybuddy_api.schemas.moderation import (
    AccountResponse,
    MessageResponse,
    PaginatedAccountResponse,
    ReasonRequest,
    RoleUpdateRequest,
    StatusUpdateRequest,
    SuspendRequest,
)
from studybuddy_api.services import account_service

admin_users_router = APIRouter(
    prefix="/admin/users",
    tags=["admin-users"],
)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@admin_users_router.get("")
async def list_accounts(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _actor: Annotated[AdminActor, Depends(get_admin_actor)],
    include_deleted: Annotated[bool, Query(description="Include soft-deleted accounts")] = False,
    role: Annotated[Role | None, Query(description="Filter by role")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedAccountResponse:
    """List accounts with their moderation status."""
    with moderation_errors("listing accounts"):
        users, total = await account_service.list_users(
            session,
            include_deleted=include_deleted,
            role=role,
            page=page,
            page_size=page_size,
        )
    return PaginatedAccountResponse(
        items=[AccountResponse.from_account(u) for u in users],
        pagination=PaginationMeta.build(total, page, page_size),
    )


@admin_users_router.get("/{user_id}")
async def get_account(
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Get a single account, including soft-deleted ones."""
    user = await account_service.get_user(session, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return AccountResponse.from_account(user)


# ---------------------------------------------------------------------------
# Suspension and ban
# ---------------------------------------------------------------------------


@admin_users_router.post("/{user_id}/suspend")
async def suspend_account(
    user_id: int,
    body: SuspendRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccountResponse:
    """Suspend an account for a number of days, until a time, or indefinitely."""
    until = body.resolve_until(settings.indefinite_suspension_years)
    with moderation_errors("suspending account"):
        user = await account_service.suspend_user(session, actor, user_id, until=until, reason=body.reason)
    return AccountResponse.from_account(user)


@admin_users_router.post("/{user_id}/unsuspend")
async def unsuspend_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Lift an account's suspension."""
    with moderation_errors("unsuspending account"):
        user = await account_service.unsuspend_user(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)


@admin_users_router.post("/{user_id}/ban")
async def ban_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Ban an account."""
    with moderation_errors("banning account"):
        user = await account_service.ban_user(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)


@admin_users_router.post("/{user_id}/unban")
async def unban_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Lift an account's ban. Login stays disabled until re-enabled."""
    with moderation_errors("unbanning account"):
        user = await account_service.unban_user(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


@admin_users_router.post("/{user_id}/soft-delete")
async def soft_delete_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Soft-delete an account."""
    with moderation_errors("soft-deleting account"):
        user = await account_service.soft_delete_user(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)


@admin_users_router.post("/{user_id}/restore")
async def restore_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Restore a soft-deleted account."""
    with moderation_errors("restoring account"):
        user = await account_service.restore_user(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)


@admin_users_router.post("/{user_id}/permanent-delete")
async def permanently_delete_account(
    user_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Permanently delete a soft-deleted account and its dependent records."""
    grace_period = (
        timedelta(days=settings.deletion_grace_period_days) if settings.enforce_deletion_grace_period else None
    )
    with moderation_errors("permanently deleting account"):
        await account_service.permanent_delete_user(
            session,
            actor,
            user_id,
            reason=body.reason,
            grace_period=grace_period,
        )
    return MessageResponse(message=f"User {user_id} permanently deleted")


# ---------------------------------------------------------------------------
# Role and login status
# ---------------------------------------------------------------------------


@admin_users_router.put("/{user_id}/role")
async def change_role(
    user_id: int,
    body: RoleUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Change an account's role."""
    with moderation_errors("changing role"):
        user = await account_service.update_user_role(
            session,
            actor,
            user_id,
            new_role=body.role,
            reason=body.reason,
        )
    return AccountResponse.from_account(user)


@admin_users_router.put("/{user_id}/status")
async def change_login_status(
    user_id: int,
    body: StatusUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> AccountResponse:
    """Enable or disable login for an account."""
    with moderation_errors("changing login status"):
        if body.active:
            user = await account_service.enable_login(session, actor, user_id, reason=body.reason)
        else:
            user = await account_service.disable_login(session, actor, user_id, reason=body.reason)
    return AccountResponse.from_account(user)
