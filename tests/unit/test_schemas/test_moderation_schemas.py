"""Tests for moderation request and response schemas."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from studybuddy_api.schemas.auth import UserCreateRequest
from studybuddy_api.schemas.common import PaginationMeta
from studybuddy_api.schemas.moderation import (
    AccountResponse,
    AuditLogResponse,
    RoleUpdateRequest,
    SuspendRequest,
)

NOW = datetime(2026, 4, 1, tzinfo=UTC)


class TestSuspendRequest:
    def test_days(self) -> None:
        assert SuspendRequest(days=7).resolve_until(100, NOW) == NOW + timedelta(days=7)

    def test_until(self) -> None:
        until = NOW + timedelta(hours=5)
        assert SuspendRequest(until=until).resolve_until(100, NOW) == until

    @pytest.mark.parametrize("days", [None, 0, -3])
    def test_indefinite(self, days: int | None) -> None:
        resolved = SuspendRequest(days=days).resolve_until(100, NOW)
        assert resolved == NOW + timedelta(days=36500)

    def test_days_and_until_conflict(self) -> None:
        with pytest.raises(ValidationError, match="either days or until"):
            SuspendRequest(days=1, until=NOW)


class TestRoleSchemas:
    def test_role_pattern(self) -> None:
        assert RoleUpdateRequest(role="EXPERT").role == "EXPERT"
        with pytest.raises(ValidationError):
            RoleUpdateRequest(role="admin")

    def test_create_request_defaults_to_student(self) -> None:
        request = UserCreateRequest(username="abc", email="abc@example.com", password="longenough")
        assert request.role == "STUDENT"


class TestAccountResponse:
    def _account(self, **overrides: object) -> SimpleNamespace:
        fields = {
            "id": 1,
            "username": "alice",
            "email": "alice@example.com",
            "full_name": None,
            "role": "STUDENT",
            "is_active": True,
            "is_deleted": False,
            "deleted_at": None,
            "suspended_until": None,
            "suspension_reason": None,
            "banned_at": None,
            "ban_reason": None,
            "created_at": NOW,
            "last_login_at": None,
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    def test_derived_fields(self) -> None:
        response = AccountResponse.from_account(self._account(suspended_until=NOW + timedelta(days=1)), NOW)
        assert response.can_login is False
        assert response.is_suspended is True
        assert response.status == "suspended"

    def test_active(self) -> None:
        response = AccountResponse.from_account(self._account(), NOW)
        assert response.can_login is True
        assert response.status == "active"


class TestAuditLogResponse:
    def test_reads_metadata_attribute(self) -> None:
        entry = SimpleNamespace(
            id=1,
            admin_user_id=2,
            action_type="BAN",
            target_type="USER",
            target_id=3,
            reason=None,
            metadata_={"k": "v"},
            created_at=NOW,
        )
        response = AuditLogResponse.model_validate(entry)
        assert response.metadata == {"k": "v"}
        assert response.model_dump()["metadata"] == {"k": "v"}


class TestPaginationMeta:
    def test_total_pages(self) -> None:
        assert PaginationMeta.build(0, 1, 20).total_pages == 0
        assert PaginationMeta.build(41, 1, 20).total_pages == 3
