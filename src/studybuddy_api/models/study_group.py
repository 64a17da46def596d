"""Study group model and the group membership join table.

``study_groups.creator_id`` has no ON DELETE action: an account that still
owns groups cannot be removed until its groups are deleted first.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from studybuddy_api.models.base import Base, IdMixin, TimestampMixin

group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("study_groups.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class StudyGroup(Base, IdMixin, TimestampMixin):
    """A study group created by an account within a course."""

    __tablename__ = "study_groups"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_size: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)
    creator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    __table_args__ = (
        Index("ix_study_groups_creator_id", "creator_id"),
        Index("ix_study_groups_course_id", "course_id"),
    )
