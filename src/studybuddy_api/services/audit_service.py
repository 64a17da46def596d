"""Audit logging service.

Provides immutable audit trail recording and querying for administrative
actions.  Recording never commits: the entry joins the caller's transaction
so it persists if and only if the audited mutation does.
"""

import enum
from datetime import datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.models.audit_log import AdminAuditLog, AuditAction, TargetType


def _normalize_metadata_value(value: object) -> object:
    """Convert a metadata value into something JSON-serializable."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _normalize_metadata_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_normalize_metadata_value(v) for v in value]
    return value


def normalize_metadata(metadata: dict | None) -> dict | None:
    """Normalize audit metadata; empty metadata is stored as null.

    Args:
        metadata: Key/value pairs describing the action.

    Returns:
        A JSON-serializable dict, or None.
    """
    if not metadata:
        return None
    return {str(k): _normalize_metadata_value(v) for k, v in metadata.items()}


async def record_action(
    session: AsyncSession,
    *,
    admin_id: int,
    action: AuditAction,
    target_type: TargetType,
    target_id: int,
    reason: str | None = None,
    metadata: dict | None = None,
) -> AdminAuditLog:
    """Add an audit log entry to the current transaction.

    Args:
        session: The database session.
        admin_id: The acting administrator's account id.
        action: The action performed.
        target_type: Kind of record the action targeted.
        target_id: Id of the targeted record.
        reason: Free-text justification.
        metadata: Before/after values and other structured context.

    Returns:
        The pending AdminAuditLog record (flushed, so it has an id).
    """
    entry = AdminAuditLog(
        admin_user_id=admin_id,
        action_type=action.value,
        target_type=target_type.value,
        target_id=target_id,
        reason=reason,
        metadata_=normalize_metadata(metadata),
    )
    session.add(entry)
    await session.flush()
    logger.bind(json_output=True).info(
        f"Audit {action.value} on {target_type.value} {target_id} by admin {admin_id}",
    )
    return entry


async def query_audit_logs(
    session: AsyncSession,
    *,
    admin_id: int | None = None,
    action_type: str | None = None,
    target_type: str | None = None,
    target_id: int | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[AdminAuditLog], int]:
    """Query audit logs with optional filters, newest first.

    Args:
        session: The database session.
        admin_id: Filter by acting administrator.
        action_type: Filter by action type.
        target_type: Filter by target type.
        target_id: Filter by target id.
        start_time: Filter records at or after this timestamp.
        end_time: Filter records at or before this timestamp.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (audit log records, total count).
    """
    conditions = []
    if admin_id is not None:
        conditions.append(AdminAuditLog.admin_user_id == admin_id)
    if action_type is not None:
        conditions.append(AdminAuditLog.action_type == action_type)
    if target_type is not None:
        conditions.append(AdminAuditLog.target_type == target_type)
    if target_id is not None:
        conditions.append(AdminAuditLog.target_id == target_id)
    if start_time is not None:
        conditions.append(AdminAuditLog.created_at >= start_time)
    if end_time is not None:
        conditions.append(AdminAuditLog.created_at <= end_time)

    count_query = select(func.count(AdminAuditLog.id)).where(*conditions)
    total = (await session.execute(count_query)).scalar_one()

    offset = (page - 1) * page_size
    query = (
        select(AdminAuditLog)
        .where(*conditions)
        .order_by(AdminAuditLog.created_at.desc(), AdminAuditLog.id.desc())
        .offset(offset)
        .limit(page_size)
    )
    result = await session.execute(query)
    logs = list(result.scalars().all())

    return logs, total
