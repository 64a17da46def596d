"""Admin course and study group endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.api.errors import moderation_errors
from studybuddy_api.core.dependencies import get_admin_actor, get_async_session
from studybuddy_api.lib.moderation import AdminActor
from studybuddy_api.schemas.moderation import CourseResponse, CourseUpdateRequest, MessageResponse, ReasonRequest
from studybuddy_api.services import course_service

admin_courses_router = APIRouter(
    prefix="/admin",
    tags=["admin-courses"],
)


@admin_courses_router.put("/courses/{course_id}")
async def update_course(
    course_id: int,
    body: CourseUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> CourseResponse:
    """Update a course's name or description."""
    with moderation_errors("updating course"):
        course = await course_service.update_course(
            session,
            actor,
            course_id,
            name=body.name,
            description=body.description,
            reason=body.reason,
        )
    return CourseResponse.model_validate(course)


@admin_courses_router.post("/courses/{course_id}/archive")
async def archive_course(
    course_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> CourseResponse:
    """Archive a course."""
    with moderation_errors("archiving course"):
        course = await course_service.archive_course(session, actor, course_id, reason=body.reason)
    return CourseResponse.model_validate(course)


@admin_courses_router.post("/courses/{course_id}/unarchive")
async def unarchive_course(
    course_id: int,
    body: ReasonRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
) -> CourseResponse:
    """Unarchive a course."""
    with moderation_errors("unarchiving course"):
        course = await course_service.unarchive_course(session, actor, course_id, reason=body.reason)
    return CourseResponse.model_validate(course)


@admin_courses_router.delete("/courses/{course_id}")
async def delete_course(
    course_id: int,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
    reason: str | None = None,
) -> MessageResponse:
    """Delete a course that has no active study groups."""
    with moderation_errors("deleting course"):
        await course_service.delete_course(session, actor, course_id, reason=reason)
    return MessageResponse(message=f"Course {course_id} deleted")


@admin_courses_router.delete("/courses/{course_id}/members/{user_id}")
async def remove_course_member(
    course_id: int,
    user_id: int,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
    reason: str | None = None,
) -> MessageResponse:
    """Remove an account from a course."""
    with moderation_errors("removing course member"):
        await course_service.remove_user_from_course(session, actor, course_id, user_id, reason=reason)
    return MessageResponse(message=f"User {user_id} removed from course {course_id}")


@admin_courses_router.delete("/groups/{group_id}")
async def delete_group(
    group_id: int,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    actor: Annotated[AdminActor, Depends(get_admin_actor)],
    reason: str | None = None,
) -> MessageResponse:
    """Delete a study group and its memberships."""
    with moderation_errors("deleting group"):
        await course_service.delete_group(session, actor, group_id, reason=reason)
    return MessageResponse(message=f"Group {group_id} deleted")
