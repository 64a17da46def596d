"""Dependent-record coordinator for permanent account deletion.

Removes every record that references an account, in a fixed order that
respects foreign keys, before the account row itself is deleted.  Each step
is flushed before the next one starts; the caller owns the enclosing
transaction, so a failure anywhere rolls back the whole cascade.

Order:
    1. expert qualification profile
    2. characteristic profile
    3. groups the account created (memberships first, then the group)
    4. the account's own memberships and course enrollments
Messages, files and shares owned by a group are removed by the database's
own ON DELETE rules on those tables.
"""

from dataclasses import asdict, dataclass

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.models.characteristic_profile import CharacteristicProfile
from studybuddy_api.models.course import course_enrollments
from studybuddy_api.models.expert_profile import ExpertProfile
from studybuddy_api.models.study_group import StudyGroup, group_members


@dataclass
class CascadeSummary:
    """Row counts removed by :func:`delete_account_dependents`."""

    expert_profiles: int = 0
    characteristic_profiles: int = 0
    owned_groups: int = 0
    owned_group_memberships: int = 0
    memberships: int = 0
    course_enrollments: int = 0

    def as_metadata(self) -> dict[str, int]:
        """Counts keyed for audit metadata."""
        return asdict(self)


async def delete_groups(session: AsyncSession, group_ids: list[int]) -> tuple[int, int]:
    """Delete study groups, removing their membership rows first.

    Args:
        session: The database session.
        group_ids: Ids of the groups to delete.

    Returns:
        Tuple of (membership rows deleted, groups deleted).
    """
    if not group_ids:
        return 0, 0
    memberships = await session.execute(delete(group_members).where(group_members.c.group_id.in_(group_ids)))
    await session.flush()
    groups = await session.execute(
        delete(StudyGroup).where(StudyGroup.id.in_(group_ids)).execution_options(synchronize_session="fetch")
    )
    await session.flush()
    return memberships.rowcount or 0, groups.rowcount or 0


async def delete_account_dependents(session: AsyncSession, user_id: int) -> CascadeSummary:
    """Remove all records that exist only to support ``user_id``.

    Does not delete the account row and does not commit.

    Args:
        session: The database session.
        user_id: The account whose dependents are removed.

    Returns:
        Counts of removed rows per dependent kind.
    """
    summary = CascadeSummary()

    result = await session.execute(
        delete(ExpertProfile).where(ExpertProfile.user_id == user_id).execution_options(synchronize_session="fetch")
    )
    summary.expert_profiles = result.rowcount or 0
    await session.flush()

    result = await session.execute(
        delete(CharacteristicProfile)
        .where(CharacteristicProfile.user_id == user_id)
        .execution_options(synchronize_session="fetch")
    )
    summary.characteristic_profiles = result.rowcount or 0
    await session.flush()

    owned = await session.execute(select(StudyGroup.id).where(StudyGroup.creator_id == user_id))
    group_ids = list(owned.scalars().all())
    summary.owned_group_memberships, summary.owned_groups = await delete_groups(session, group_ids)

    result = await session.execute(delete(group_members).where(group_members.c.user_id == user_id))
    summary.memberships = result.rowcount or 0
    result = await session.execute(delete(course_enrollments).where(course_enrollments.c.user_id == user_id))
    summary.course_enrollments = result.rowcount or 0
    await session.flush()

    logger.info(f"Removed dependents of account {user_id}: {summary.as_metadata()}")
    return summary
