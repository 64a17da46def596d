"""Tests for the moderation safety guards."""

import pytest

from studybuddy_api.lib.moderation import (
    AdminActor,
    InvalidOperationError,
    ModerationError,
    NotFoundError,
    ensure_not_last_admin,
    ensure_not_self,
    ensure_not_self_demotion,
    is_admin_demotion,
    require_reason,
)


class TestEnsureNotSelf:
    @pytest.mark.parametrize("action", ["suspend", "ban", "delete", "permanently delete", "disable login for"])
    def test_self_target_rejected(self, action: str) -> None:
        with pytest.raises(InvalidOperationError, match=f"Cannot {action} your own account"):
            ensure_not_self(7, 7, action)

    def test_other_target_allowed(self) -> None:
        ensure_not_self(7, 8, "ban")


class TestEnsureNotLastAdmin:
    def test_last_admin_rejected(self) -> None:
        with pytest.raises(InvalidOperationError, match="Cannot modify the last admin account"):
            ensure_not_last_admin("ADMIN", 1)

    def test_zero_functional_admins_rejected(self) -> None:
        with pytest.raises(InvalidOperationError):
            ensure_not_last_admin("ADMIN", 0)

    def test_two_admins_allowed(self) -> None:
        ensure_not_last_admin("ADMIN", 2)

    def test_non_admin_target_ignored(self) -> None:
        ensure_not_last_admin("STUDENT", 1)
        ensure_not_last_admin("EXPERT", 0)


class TestRoleGuards:
    def test_self_demotion_rejected(self) -> None:
        with pytest.raises(InvalidOperationError, match="Cannot remove your own admin role"):
            ensure_not_self_demotion(1, 1, "ADMIN", "STUDENT")

    def test_self_promotion_allowed(self) -> None:
        ensure_not_self_demotion(1, 1, "STUDENT", "ADMIN")

    def test_demoting_someone_else_passes_this_guard(self) -> None:
        ensure_not_self_demotion(1, 2, "ADMIN", "EXPERT")

    def test_is_admin_demotion(self) -> None:
        assert is_admin_demotion("ADMIN", "EXPERT") is True
        assert is_admin_demotion("ADMIN", "ADMIN") is False
        assert is_admin_demotion("STUDENT", "ADMIN") is False


class TestRequireReason:
    def test_blank_reason_rejected(self) -> None:
        with pytest.raises(InvalidOperationError, match="Reason is required for rejecting an expert"):
            require_reason("   ", "rejecting an expert")

    def test_missing_reason_rejected(self) -> None:
        with pytest.raises(InvalidOperationError):
            require_reason(None, "revoking expert verification")

    def test_reason_is_stripped(self) -> None:
        assert require_reason("  spam  ", "x") == "spam"


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(NotFoundError, ModerationError)
        assert issubclass(InvalidOperationError, ValueError)

    def test_not_found_message(self) -> None:
        err = NotFoundError("User", 42)
        assert str(err) == "User 42 not found"
        assert err.entity_id == 42


class TestAdminActor:
    def test_from_user(self) -> None:
        class _User:
            id = 3
            username = "alice"
            role = "ADMIN"

        actor = AdminActor.from_user(_User())
        assert actor == AdminActor(id=3, username="alice", role="ADMIN")
