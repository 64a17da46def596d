"""User account model with role and moderation flags.

The moderation flags are independently settable columns rather than one
lifecycle enum.  Whether an account may log in is always derived from them by
:func:`studybuddy_api.lib.moderation.can_login`; ``is_active`` alone is not
the login gate.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studybuddy_api.models.base import Base, IdMixin, TimestampMixin


class Role(enum.StrEnum):
    """Account roles."""

    STUDENT = "STUDENT"
    EXPERT = "EXPERT"
    ADMIN = "ADMIN"


class User(Base, IdMixin, TimestampMixin):
    """Platform account.

    Attributes:
        role: One of :class:`Role`.
        is_active: Administrative login switch (disable/enable login, ban).
        is_deleted: Soft-delete flag; ``deleted_at`` records when.
        suspended_until: End of a time-bounded suspension, if any.
        banned_at: Set while the account is banned.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.STUDENT, index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspended_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspension_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    banned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
