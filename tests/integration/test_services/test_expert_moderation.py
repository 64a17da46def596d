"""Integration tests for expert application moderation."""

import pytest
from sqlalchemy import select

from studybuddy_api.lib.moderation import AdminActor, InvalidOperationError, NotFoundError, can_login
from studybuddy_api.models import ExpertProfile, Role
from studybuddy_api.services import account_service, expert_service
from studybuddy_api.services.audit_service import query_audit_logs


async def _profile_id(session, user_id: int) -> int:
    result = await session.execute(select(ExpertProfile.id).where(ExpertProfile.user_id == user_id))
    return result.scalar_one()


class TestVerify:
    async def test_verify_records_admin(self, async_session, actor, expert) -> None:
        profile_id = await _profile_id(async_session, expert.id)

        profile = await expert_service.verify_expert(async_session, actor, profile_id, reason=None)

        assert profile.is_verified is True
        assert profile.verified_at is not None
        assert profile.verified_by == actor.username
        logs, total = await query_audit_logs(async_session, target_type="EXPERT", target_id=profile_id)
        assert total == 1
        assert logs[0].action_type == "EXPERT_VERIFY"
        assert logs[0].metadata_["expert_user_id"] == expert.id
        assert logs[0].metadata_["previous_status"] is False

    async def test_unknown_profile(self, async_session, actor) -> None:
        with pytest.raises(NotFoundError):
            await expert_service.verify_expert(async_session, actor, 404, reason=None)


class TestReject:
    async def test_reject_demotes_to_student(self, async_session, actor, expert) -> None:
        expert_id = expert.id
        profile_id = await _profile_id(async_session, expert_id)

        await expert_service.reject_expert(async_session, actor, profile_id, reason="Credentials not verifiable")

        user = await account_service.get_user(async_session, expert_id)
        assert user is not None
        assert user.role == Role.STUDENT
        assert user.is_active is True
        assert user.is_deleted is False
        assert can_login(user) is True
        assert await expert_service.get_expert_profile(async_session, profile_id) is None

        logs, _ = await query_audit_logs(async_session, action_type="EXPERT_REJECT")
        assert logs[0].reason == "Credentials not verifiable"
        assert logs[0].metadata_["previous_role"] == "EXPERT"
        assert logs[0].metadata_["new_role"] == "STUDENT"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    async def test_reason_required(self, async_session, actor, expert, reason) -> None:
        expert_id = expert.id
        profile_id = await _profile_id(async_session, expert_id)

        with pytest.raises(InvalidOperationError, match="Reason is required for rejecting an expert"):
            await expert_service.reject_expert(async_session, actor, profile_id, reason=reason)

        assert await expert_service.get_expert_profile(async_session, profile_id) is not None

    async def test_last_admin_with_profile_cannot_be_rejected(self, async_session, admin) -> None:
        admin_id = admin.id
        async_session.add(ExpertProfile(user_id=admin_id, title="Prof"))
        await async_session.commit()
        profile_id = await _profile_id(async_session, admin_id)
        system_actor = AdminActor(id=10_000, username="ops-console")

        with pytest.raises(InvalidOperationError, match="last admin"):
            await expert_service.reject_expert(async_session, system_actor, profile_id, reason="no")

        user = await account_service.get_user(async_session, admin_id)
        assert user.role == "ADMIN"


class TestRevoke:
    async def test_revoke_keeps_profile_and_role(self, async_session, actor, expert) -> None:
        expert_id = expert.id
        profile_id = await _profile_id(async_session, expert_id)
        await expert_service.verify_expert(async_session, actor, profile_id, reason=None)

        profile = await expert_service.revoke_expert_verification(
            async_session, actor, profile_id, reason="License expired"
        )

        assert profile.is_verified is False
        assert profile.verified_at is None
        assert profile.verified_by is None
        user = await account_service.get_user(async_session, expert_id)
        assert user.role == "EXPERT"
        assert await expert_service.get_expert_profile(async_session, profile_id) is not None

    async def test_revoke_requires_verified(self, async_session, actor, expert) -> None:
        profile_id = await _profile_id(async_session, expert.id)
        with pytest.raises(InvalidOperationError, match="Expert is not verified"):
            await expert_service.revoke_expert_verification(async_session, actor, profile_id, reason="x")

    async def test_revoke_requires_reason(self, async_session, actor, expert) -> None:
        profile_id = await _profile_id(async_session, expert.id)
        with pytest.raises(InvalidOperationError, match="Reason is required for revoking expert verification"):
            await expert_service.revoke_expert_verification(async_session, actor, profile_id, reason=None)


class TestListExperts:
    async def test_filter_by_verification(self, async_session, actor, expert) -> None:
        profile_id = await _profile_id(async_session, expert.id)

        pending, total = await expert_service.list_expert_profiles(async_session, verified=False)
        assert total == 1
        assert pending[0].id == profile_id

        await expert_service.verify_expert(async_session, actor, profile_id, reason=None)
        _, pending_total = await expert_service.list_expert_profiles(async_session, verified=False)
        _, verified_total = await expert_service.list_expert_profiles(async_session, verified=True)
        assert (pending_total, verified_total) == (0, 1)
