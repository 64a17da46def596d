"""Course and study group moderation."""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.core.database import transaction
from studybuddy_api.lib.moderation import AdminActor, InvalidOperationError, NotFoundError
from studybuddy_api.models.audit_log import AuditAction, TargetType
from studybuddy_api.models.course import Course, course_enrollments
from studybuddy_api.models.study_group import StudyGroup
from studybuddy_api.models.user import User
from studybuddy_api.services.audit_service import record_action
from studybuddy_api.services.cascade_service import delete_groups


async def get_course(session: AsyncSession, course_id: int) -> Course | None:
    """Get a course by id."""
    result = await session.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


async def _load_course_for_update(session: AsyncSession, course_id: int) -> Course:
    result = await session.execute(
        select(Course).where(Course.id == course_id).with_for_update().execution_options(populate_existing=True)
    )
    course = result.scalar_one_or_none()
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


async def update_course(
    session: AsyncSession,
    actor: AdminActor,
    course_id: int,
    *,
    name: str | None = None,
    description: str | None = None,
    reason: str | None = None,
) -> Course:
    """Update a course's name and/or description.

    Only fields that are given and differ from the stored value are changed
    and recorded in the audit metadata.

    Raises:
        NotFoundError: If the course does not exist.
    """
    async with transaction(session):
        course = await _load_course_for_update(session, course_id)

        changes: dict[str, object] = {}
        if name is not None and name != course.name:
            changes["old_name"] = course.name
            changes["new_name"] = name
            course.name = name
        if description is not None and description != course.description:
            changes["old_description"] = course.description
            changes["new_description"] = description
            course.description = description

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.COURSE_UPDATE,
            target_type=TargetType.COURSE,
            target_id=course.id,
            reason=reason,
            metadata=changes,
        )
    logger.info(f"Admin {actor.username} updated course {course_id}: {sorted(changes)}")
    return course


async def archive_course(session: AsyncSession, actor: AdminActor, course_id: int, *, reason: str | None) -> Course:
    """Archive a course.

    Raises:
        NotFoundError: If the course does not exist.
        InvalidOperationError: If the course is already archived.
    """
    async with transaction(session):
        course = await _load_course_for_update(session, course_id)
        if course.is_archived:
            msg = "Course is already archived"
            raise InvalidOperationError(msg)

        course.is_archived = True
        course.archived_at = datetime.now(UTC)

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.COURSE_ARCHIVE,
            target_type=TargetType.COURSE,
            target_id=course.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} archived course {course_id}")
    return course


async def unarchive_course(session: AsyncSession, actor: AdminActor, course_id: int, *, reason: str | None) -> Course:
    """Return an archived course to service.

    Raises:
        NotFoundError: If the course does not exist.
        InvalidOperationError: If the course is not archived.
    """
    async with transaction(session):
        course = await _load_course_for_update(session, course_id)
        if not course.is_archived:
            msg = "Course is not archived"
            raise InvalidOperationError(msg)

        course.is_archived = False
        course.archived_at = None

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.COURSE_UNARCHIVE,
            target_type=TargetType.COURSE,
            target_id=course.id,
            reason=reason,
        )
    logger.info(f"Admin {actor.username} unarchived course {course_id}")
    return course


async def delete_course(session: AsyncSession, actor: AdminActor, course_id: int, *, reason: str | None) -> None:
    """Delete a course with its inactive groups and its enrollments.

    Raises:
        NotFoundError: If the course does not exist.
        InvalidOperationError: While any group of the course is still active.
    """
    async with transaction(session):
        course = await _load_course_for_update(session, course_id)

        active = await session.execute(
            select(func.count(StudyGroup.id)).where(StudyGroup.course_id == course_id, StudyGroup.is_active.is_(True))
        )
        if active.scalar_one() > 0:
            msg = "Cannot delete course with active study groups. Archive the course instead."
            raise InvalidOperationError(msg)

        code = course.code
        name = course.name
        group_result = await session.execute(select(StudyGroup.id).where(StudyGroup.course_id == course_id))
        group_ids = list(group_result.scalars())
        memberships, groups = await delete_groups(session, group_ids)
        enrollments = await session.execute(
            delete(course_enrollments).where(course_enrollments.c.course_id == course_id)
        )

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.COURSE_DELETE,
            target_type=TargetType.COURSE,
            target_id=course_id,
            reason=reason,
            metadata={
                "code": code,
                "name": name,
                "groups": groups,
                "group_memberships": memberships,
                "enrollments": enrollments.rowcount or 0,
            },
        )

        await session.delete(course)
        await session.flush()
    logger.info(f"Admin {actor.username} deleted course {course_id} ({code})")


async def remove_user_from_course(
    session: AsyncSession,
    actor: AdminActor,
    course_id: int,
    user_id: int,
    *,
    reason: str | None,
) -> None:
    """Remove an account's enrollment from a course.

    Raises:
        NotFoundError: If the course or the account does not exist.
        InvalidOperationError: If the account is not enrolled in the course.
    """
    async with transaction(session):
        await _load_course_for_update(session, course_id)
        user = (await session.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
        if user is None:
            raise NotFoundError("User", user_id)

        enrolled = await session.execute(
            select(
                exists().where(course_enrollments.c.course_id == course_id, course_enrollments.c.user_id == user_id)
            )
        )
        if not enrolled.scalar():
            msg = "User is not enrolled in this course"
            raise InvalidOperationError(msg)

        await session.execute(
            delete(course_enrollments).where(
                course_enrollments.c.course_id == course_id, course_enrollments.c.user_id == user_id
            )
        )

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.COURSE_REMOVE_MEMBER,
            target_type=TargetType.COURSE,
            target_id=course_id,
            reason=reason,
            metadata={"user_id": user.id, "username": user.username},
        )
    logger.info(f"Admin {actor.username} removed account {user_id} from course {course_id}")


async def delete_group(session: AsyncSession, actor: AdminActor, group_id: int, *, reason: str | None) -> None:
    """Delete a study group and its memberships.

    Raises:
        NotFoundError: If the group does not exist.
    """
    async with transaction(session):
        result = await session.execute(
            select(StudyGroup)
            .where(StudyGroup.id == group_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        group = result.scalar_one_or_none()
        if group is None:
            raise NotFoundError("Group", group_id)

        metadata = {"name": group.name, "course_id": group.course_id, "creator_id": group.creator_id}
        memberships, _ = await delete_groups(session, [group_id])
        metadata["memberships"] = memberships

        await record_action(
            session,
            admin_id=actor.id,
            action=AuditAction.GROUP_DELETE,
            target_type=TargetType.GROUP,
            target_id=group_id,
            reason=reason,
            metadata=metadata,
        )
    logger.info(f"Admin {actor.username} deleted group {group_id}")
