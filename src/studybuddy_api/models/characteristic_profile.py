"""Characteristic (personality quiz) profile used for group matching."""

import enum

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from studybuddy_api.models.base import Base, IdMixin, TimestampMixin


class QuizStatus(enum.StrEnum):
    """Progress of the characteristic quiz."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class CharacteristicProfile(Base, IdMixin, TimestampMixin):
    """Trait scores derived from the onboarding quiz. At most one per account."""

    __tablename__ = "characteristic_profiles"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )
    quiz_status: Mapped[str] = mapped_column(String(20), nullable=False, default=QuizStatus.NOT_STARTED)
    score_leader: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_planner: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_expert: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_creative: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_communicator: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_team_player: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_challenger: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
