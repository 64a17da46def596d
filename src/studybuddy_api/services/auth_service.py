"""Authentication and account creation service.

Handles password authentication (gated by the moderation predicate), account
creation and access-token generation.
"""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from studybuddy_api.core.config import Settings
from studybuddy_api.core.security import create_access_token, hash_password, verify_password
from studybuddy_api.lib.moderation import can_login
from studybuddy_api.models.user import User
from studybuddy_api.schemas.auth import TokenResponse, UserCreateRequest


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User | None:
    """Authenticate an account by username and password.

    Deleted, banned, suspended and disabled accounts are refused even when the
    password matches.

    Args:
        session: The database session.
        username: The username to authenticate.
        password: The plaintext password.

    Returns:
        The User if authentication succeeds, None otherwise.
    """
    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.hashed_password):
        return None
    if not can_login(user):
        logger.warning(f"Login refused for moderated account {user.id}")
        return None
    user.last_login_at = datetime.now(UTC)
    await session.commit()
    return user


async def create_user(session: AsyncSession, request: UserCreateRequest) -> User:
    """Create a new account.

    Args:
        session: The database session.
        request: Account creation request data.

    Returns:
        The created User.

    Raises:
        ValueError: If username or email already exists.
    """
    taken = await session.execute(
        select(exists().where((User.username == request.username) | (User.email == request.email)))
    )
    if taken.scalar():
        msg = "Username or email already exists"
        raise ValueError(msg)

    user = User(
        username=request.username,
        email=request.email,
        full_name=request.full_name,
        hashed_password=hash_password(request.password),
        role=request.role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def generate_token(user: User, settings: Settings) -> TokenResponse:
    """Generate an access token for an authenticated account."""
    access_token = create_access_token(
        subject=user.username,
        role=user.role,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_access_token_expire_minutes,
    )
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )
