"""Expert application moderation: verify, reject, and revoke verification.

These operations target an expert qualification profile rather than the
account itself.  Audit entries use the profile id as target and record the
owning account id in their metadata.
"""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.core.database import transaction
from studybuddy_api.lib.moderation import AdminActor, InvalidOperationError, NotFoundError, require_reason
from studybuddy_api.models.audit_log import AuditAction, TargetType
from studybuddy_api.models.expert_profile import ExpertProfile
from studybuddy_api.models.user import Role, User
from studybuddy_api.services.account_service import check_last_admin
from studybuddy_api.services.audit_service import record_action


async def get_expert_profile(session: AsyncSession, profile_id: int) -> ExpertProfile | None:
    """Get an expert profile by id."""
    result = await session.execute(select(ExpertProfile).where(ExpertProfile.id == profile_id))
    return result.scalar_one_or_none()


async def list_expert_profiles(
    session: AsyncSession,
    *,
    verified: bool | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[ExpertProfile], int]:
    """List expert profiles, optionally filtered by verification status.

    Args:
        session: The database session.
        verified: Only verified (True) or pending/unverified (False) profiles.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (profiles, total count).
    """
    conditions = []
    if verified is not None:
        conditions.append(ExpertProfile.is_verified.is_(verified))

    total = (await session.execute(select(func.count(ExpertProfile.id)).where(*conditions))).scalar_one()
    offset = (page - 1) * page_size
    result = await session.execute(
        select(ExpertProfile).where(*conditions).order_by(ExpertProfile.id).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


async def _load_profile_for_update(session: AsyncSession, profile_id: int) -> ExpertProfile:
    result = await session.execute(
        select(ExpertProfile)
        .where(ExpertProfile.id == profile_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Expert profile", profile_id)
    return profile


async def _load_owner_for_update(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(
        select(User).where(User.id == user_id).with_for_update().execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def verify_expert(
    session: AsyncSession,
    actor: AdminActor,
    profile_id: int,
    *,
    reason: str | None,
) -> ExpertProfile:
    """Mark an expert profile as verified by ``actor``.

    Raises:
        NotFoundError: If the expert profile does not exist.
    """
    async with transaction(session):
        profile = await _load_profile_for_update(session, profile_id)

        previous_status = profile.is_verified
        profile.is_verified = True
        profile.verified_at = datetime.now(UTC)
        profile.verified_by = actor.username

        await _audit(
            session,
            actor,
            profile.id,
            profile.user,
            AuditAction.EXPERT_VERIFY,
            reason,
            {"previous_status": previous_status, "new_status": True},
        )
    logger.info(f"Admin {actor.username} verified expert profile {profile_id}")
    return profile


async def reject_expert(session: AsyncSession, actor: AdminActor, profile_id: int, *, reason: str | None) -> None:
    """Reject an expert application.

    The profile is deleted and the owning account becomes a STUDENT.  The
    account itself survives with its activity flags untouched; this is not a
    deletion of the account.

    Raises:
        InvalidOperationError: If no reason is given, or the owner is the last admin.
        NotFoundError: If the expert profile does not exist.
    """
    reason = require_reason(reason, "rejecting an expert")

    async with transaction(session):
        profile = await _load_profile_for_update(session, profile_id)
        owner = await _load_owner_for_update(session, profile.user_id)
        await check_last_admin(session, owner)

        previous_status = profile.is_verified
        previous_role = owner.role

        await session.delete(profile)
        await session.flush()

        owner.role = Role.STUDENT.value

        await _audit(
            session,
            actor,
            profile_id,
            owner,
            AuditAction.EXPERT_REJECT,
            reason,
            {
                "previous_status": previous_status,
                "new_status": "REJECTED",
                "previous_role": previous_role,
                "new_role": Role.STUDENT,
            },
        )
    logger.info(f"Admin {actor.username} rejected expert profile {profile_id}; account {owner.id} is now STUDENT")


async def revoke_expert_verification(
    session: AsyncSession,
    actor: AdminActor,
    profile_id: int,
    *,
    reason: str | None,
) -> ExpertProfile:
    """Remove verification from an expert, keeping the profile and EXPERT role.

    Raises:
        InvalidOperationError: If no reason is given or the profile is not verified.
        NotFoundError: If the expert profile does not exist.
    """
    reason = require_reason(reason, "revoking expert verification")

    async with transaction(session):
        profile = await _load_profile_for_update(session, profile_id)
        if not profile.is_verified:
            msg = "Expert is not verified"
            raise InvalidOperationError(msg)

        profile.is_verified = False
        profile.verified_at = None
        profile.verified_by = None

        await _audit(
            session,
            actor,
            profile.id,
            profile.user,
            AuditAction.EXPERT_REVOKE,
            reason,
            {"previous_status": True, "new_status": False},
        )
    logger.info(f"Admin {actor.username} revoked verification of expert profile {profile_id}")
    return profile


async def _audit(
    session: AsyncSession,
    actor: AdminActor,
    profile_id: int,
    owner: User,
    action: AuditAction,
    reason: str | None,
    metadata: dict,
) -> None:
    """Audit an expert action, attaching the owning account to the metadata."""
    await record_action(
        session,
        admin_id=actor.id,
        action=action,
        target_type=TargetType.EXPERT,
        target_id=profile_id,
        reason=reason,
        metadata={**metadata, "expert_user_id": owner.id, "expert_username": owner.username},
    )
