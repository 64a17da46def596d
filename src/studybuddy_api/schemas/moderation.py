"""Account moderation Pydantic v2 schemas.

Request bodies for the admin moderation endpoints and responses that expose
both the stored moderation flags and the derived login status.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, model_validator

from studybuddy_api.lib.moderation import as_utc, describe_status
from studybuddy_api.schemas.auth import ROLE_PATTERN
from studybuddy_api.schemas.common import PaginationMeta

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ReasonRequest(BaseModel):
    """Body carrying only a free-text justification."""

    reason: str | None = Field(default=None, max_length=2000)


class SuspendRequest(ReasonRequest):
    """Suspend an account for ``days`` days or until ``until``.

    With neither given (or a non-positive ``days``) the suspension is
    effectively indefinite.
    """

    days: int | None = Field(default=None, description="Suspension length in days")
    until: datetime | None = Field(default=None, description="Suspension end time")

    @model_validator(mode="after")
    def _one_of_days_or_until(self) -> "SuspendRequest":
        if self.days is not None and self.until is not None:
            msg = "Provide either days or until, not both"
            raise ValueError(msg)
        return self

    def resolve_until(self, indefinite_years: int, now: datetime | None = None) -> datetime:
        """Compute the absolute suspension end time.

        Args:
            indefinite_years: Length used when no positive bound was given.
            now: Reference time; defaults to the current UTC time.
        """
        reference = now if now is not None else datetime.now(UTC)
        if self.until is not None:
            return as_utc(self.until)
        if self.days is not None and self.days > 0:
            return reference + timedelta(days=self.days)
        return reference + timedelta(days=365 * indefinite_years)


class RoleUpdateRequest(ReasonRequest):
    """Change an account's role."""

    role: str = Field(pattern=ROLE_PATTERN)


class StatusUpdateRequest(ReasonRequest):
    """Enable (``active=True``) or disable login for an account."""

    active: bool


class CourseUpdateRequest(ReasonRequest):
    """Partial course update."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Account with stored moderation flags and the derived status."""

    id: int
    username: str
    email: str
    full_name: str | None = None
    role: str
    is_active: bool
    is_deleted: bool
    deleted_at: datetime | None = None
    suspended_until: datetime | None = None
    suspension_reason: str | None = None
    banned_at: datetime | None = None
    ban_reason: str | None = None
    created_at: datetime
    last_login_at: datetime | None = None

    can_login: bool
    is_banned: bool
    is_suspended: bool
    status: str = Field(description="deleted, banned, suspended, disabled or active")

    @classmethod
    def from_account(cls, user: Any, now: datetime | None = None) -> "AccountResponse":
        """Build a response from an account, evaluating the derived flags at ``now``."""
        derived = describe_status(user, now)
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            is_active=user.is_active,
            is_deleted=user.is_deleted,
            deleted_at=user.deleted_at,
            suspended_until=user.suspended_until,
            suspension_reason=user.suspension_reason,
            banned_at=user.banned_at,
            ban_reason=user.ban_reason,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
            can_login=derived.can_login,
            is_banned=derived.is_banned,
            is_suspended=derived.is_suspended,
            status=derived.label,
        )


class PaginatedAccountResponse(BaseModel):
    """Paginated account list."""

    items: list[AccountResponse]
    pagination: PaginationMeta


class ExpertProfileResponse(BaseModel):
    """Expert qualification profile."""

    id: int
    user_id: int
    title: str | None = None
    institution: str | None = None
    bio: str | None = None
    qualifications: str | None = None
    years_of_experience: int
    is_verified: bool
    verified_at: datetime | None = None
    verified_by: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaginatedExpertResponse(BaseModel):
    """Paginated expert profile list."""

    items: list[ExpertProfileResponse]
    pagination: PaginationMeta


class CourseResponse(BaseModel):
    """Course information."""

    id: int
    code: str
    name: str
    description: str | None = None
    is_archived: bool
    archived_at: datetime | None = None

    model_config = {"from_attributes": True}


class AuditLogResponse(BaseModel):
    """A single audit log entry."""

    id: int
    admin_user_id: int
    action_type: str
    target_type: str
    target_id: int
    reason: str | None = None
    metadata: dict | None = Field(default=None, validation_alias="metadata_")
    created_at: datetime

    model_config = {"from_attributes": True}


class PaginatedAuditLogResponse(BaseModel):
    """Paginated audit log list."""

    items: list[AuditLogResponse]
    pagination: PaginationMeta


class MessageResponse(BaseModel):
    """Acknowledgement for operations that return no resource."""

    message: str
