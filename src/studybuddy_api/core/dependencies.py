"""FastAPI dependency injection for database sessions, auth, and access control.

Provides get_async_session, get_current_user, role-based access control, and
the administrator identity passed to moderation operations.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.core.config import Settings, get_settings
from studybuddy_api.core.database import get_session_factory
from studybuddy_api.core.security import decode_token
from studybuddy_api.lib.moderation import AdminActor, can_login
from studybuddy_api.models.user import Role, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Decode JWT and return the authenticated account.

    A valid token is not enough: the account must still pass the login
    predicate, so bans, suspensions and deletions take effect immediately.

    Raises:
        HTTPException: If the token is invalid, the account is missing, or
            the account may not currently log in.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
        username: str | None = payload.get("sub")
        if username is None:
            raise credentials_exception
    except Exception as exc:
        raise credentials_exception from exc

    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None or not can_login(user):
        raise credentials_exception
    return user


def require_role(*roles: str) -> Callable[..., Any]:
    """Factory that creates a dependency requiring specific account roles.

    Args:
        *roles: Allowed role names (e.g., "ADMIN", "EXPERT").

    Returns:
        A FastAPI dependency function that validates the account's role.
    """

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' does not have access to this resource",
            )
        return current_user

    return role_checker


async def get_admin_actor(
    current_user: Annotated[User, Depends(require_role(Role.ADMIN))],
) -> AdminActor:
    """Return the authenticated administrator as a moderation actor."""
    return AdminActor.from_user(current_user)
