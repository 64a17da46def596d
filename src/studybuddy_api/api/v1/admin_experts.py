"""Admin expert application endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.api.errors import moderation_errors
from studybuddy_api.core.dependencies import get_admin_actor, get_async_session
from studybuddy_api.lib.moderation import AdminActor
from studybuddy_api.schemas.common import PaginationMeta
from studybuddy_api.schemas.moderation import (
    ExpertProfileResponse,
    MessageResponse,
    PaginatedExpertResponse,
    ReasonRequest,
)
from studybuddy_api.services import expert_service

admin_experts_router = APIRouter(
    prefix="/admin/experts",
    tags=["admin-experts"],
)


@admin_experts_router.get("")
async def list_experts(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _actor: Annotated[AdminActor, Depends(get_admin_actor)],
    verified: Annotated[bool | None, Query(description="Filter by verification status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedExpertResponse:
    """List expert profiles; ``verified=false`` lists pending applications."""
    with moderation_errors("listing experts"):
        profiles, total = await expert_service.list_expert_profiles(
            session,
            verified=verified,
            page=page,
            page_size=page_size,
        )
    return PaginatedExpertResponse(
        items=[ExpertProfileResponse.model_validate(p) for p in profiles],
        pagination=PaginationMeta.build(total, page, page_size),
    )


@admin_experts_router.post("/{profile_id}/verify")
async def verify_expert(
    profile_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> ExpertProfileResponse:
    """Verify an expert application."""
    with moderation_errors("verifying expert"):
        profile = await expert_service.verify_expert(session, actor, profile_id, reason=body.reason)
    return ExpertProfileResponse.model_validate(profile)


@admin_experts_router.post("/{profile_id}/reject")
async def reject_expert(
    profile_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> MessageResponse:
    """Reject an expert application. The account becomes a STUDENT."""
    with moderation_errors("rejecting expert"):
        await expert_service.reject_expert(session, actor, profile_id, reason=body.reason)
    return MessageResponse(message=f"Expert profile {profile_id} rejected")


@admin_experts_router.post("/{profile_id}/revoke")
async def revoke_expert(
    profile_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> ExpertProfileResponse:
    """Revoke an expert's verification."""
    with moderation_errors("revoking expert verification"):
        profile = await expert_service.revoke_expert_verification(session, actor, profile_id, reason=body.reason)
    return ExpertProfileResponse.model_validate(profile)
