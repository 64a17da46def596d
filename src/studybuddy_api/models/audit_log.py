"""Admin audit log model: an immutable record of every administrative action."""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from studybuddy_api.models.base import Base, IdMixin, utcnow


class AuditAction(enum.StrEnum):
    """Administrative action types recorded in the audit log."""

    SUSPEND = "SUSPEND"
    UNSUSPEND = "UNSUSPEND"
    BAN = "BAN"
    UNBAN = "UNBAN"
    SOFT_DELETE = "SOFT_DELETE"
    RESTORE = "RESTORE"
    PERMANENT_DELETE = "PERMANENT_DELETE"
    ROLE_CHANGE = "ROLE_CHANGE"
    DISABLE_LOGIN = "DISABLE_LOGIN"
    ENABLE_LOGIN = "ENABLE_LOGIN"
    EXPERT_VERIFY = "EXPERT_VERIFY"
    EXPERT_REJECT = "EXPERT_REJECT"
    EXPERT_REVOKE = "EXPERT_REVOKE"
    COURSE_UPDATE = "COURSE_UPDATE"
    COURSE_ARCHIVE = "COURSE_ARCHIVE"
    COURSE_UNARCHIVE = "COURSE_UNARCHIVE"
    COURSE_DELETE = "COURSE_DELETE"
    COURSE_REMOVE_MEMBER = "COURSE_REMOVE_MEMBER"
    GROUP_DELETE = "GROUP_DELETE"


class TargetType(enum.StrEnum):
    """Kinds of records an administrative action can target."""

    USER = "USER"
    EXPERT = "EXPERT"
    COURSE = "COURSE"
    GROUP = "GROUP"


class AdminAuditLog(Base, IdMixin):
    """Immutable record of an administrative action. Write-only (no updates or deletes).

    ``admin_user_id`` and ``target_id`` are plain integers, not foreign keys,
    so entries outlive the accounts and records they mention.
    """

    __tablename__ = "admin_audit_logs"

    admin_user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict | None] = mapped_column(
        "metadata",
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
