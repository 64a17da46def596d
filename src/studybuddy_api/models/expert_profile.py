"""Expert qualification profile attached to an EXPERT-role account."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studybuddy_api.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from studybuddy_api.models.user import User


class ExpertProfile(Base, IdMixin, TimestampMixin):
    """Qualification details submitted with an expert application.

    At most one per account.  Removed when the application is rejected or the
    account is permanently deleted; soft deletion leaves it in place.
    """

    __tablename__ = "expert_profiles"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    institution: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    qualifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    years_of_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    user: Mapped["User"] = relationship(lazy="selectin")  # noqa: F821
