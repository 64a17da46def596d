"""Admin audit log query endpoint."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.api.errors import moderation_errors
from studybuddy_api.core.dependencies import get_admin_actor, get_async_session
from studybuddy_api.lib.moderation import AdminActor
from studybuddy_api.models.audit_log import AuditAction, TargetType
from studybuddy_api.schemas.common import PaginationMeta
from studybuddy_api.schemas.moderation import AuditLogResponse, PaginatedAuditLogResponse
from studybuddy_api.services.audit_service import query_audit_logs

audit_logs_router = APIRouter(
    prefix="/admin/audit-logs",
    tags=["admin-audit"],
)


@audit_logs_router.get("")
async def list_audit_logs(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _actor: Annotated[AdminActor, Depends(get_admin_actor)],
    admin_id: Annotated[int | None, Query(description="Filter by acting admin")] = None,
    action_type: Annotated[AuditAction | None, Query(description="Filter by action")] = None,
    target_type: Annotated[TargetType | None, Query(description="Filter by target type")] = None,
    target_id: Annotated[int | None, Query(description="Filter by target id")] = None,
    start_time: Annotated[datetime | None, Query(description="Entries at or after")] = None,
    end_time: Annotated[datetime | None, Query(description="Entries at or before")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedAuditLogResponse:
    """Query the admin audit trail, newest first."""
    with moderation_errors("querying audit logs"):
        logs, total = await query_audit_logs(
            session,
            admin_id=admin_id,
            action_type=action_type.value if action_type else None,
            target_type=target_type.value if target_type else None,
            target_id=target_id,
            start_time=start_time,
            end_time=end_time,
            page=page,
            page_size=page_size,
        )
    return PaginatedAuditLogResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in logs],
        pagination=PaginationMeta.build(total, page, page_size),
    )
