"""Shared test fixtures for async database, sessions, accounts, and auth tokens."""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from studybuddy_api.core.config import Settings
from studybuddy_api.core.database import enable_sqlite_foreign_keys
from studybuddy_api.core.security import create_access_token, hash_password
from studybuddy_api.lib.moderation import AdminActor
from studybuddy_api.models import CharacteristicProfile, ExpertProfile, Role, User
from studybuddy_api.models.base import Base


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine with foreign keys enforced."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


PASSWORD = "correct-horse-battery"
_PASSWORD_HASH = hash_password(PASSWORD)


async def _make_user(
    session: AsyncSession,
    username: str,
    role: Role = Role.STUDENT,
    **fields: object,
) -> User:
    user = User(
        username=username,
        email=f"{username}@studybuddy.test",
        hashed_password=_PASSWORD_HASH,
        role=role.value,
        **fields,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def make_user(async_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory persisting an account with sensible defaults (password: ``PASSWORD``)."""

    async def factory(username: str, role: Role = Role.STUDENT, **fields: object) -> User:
        return await _make_user(async_session, username, role, **fields)

    return factory


@pytest.fixture
async def admin(async_session: AsyncSession) -> User:
    """The acting administrator."""
    return await _make_user(async_session, "root_admin", Role.ADMIN)


@pytest.fixture
async def second_admin(async_session: AsyncSession) -> User:
    """Another functional administrator."""
    return await _make_user(async_session, "backup_admin", Role.ADMIN)


@pytest.fixture
async def student(async_session: AsyncSession) -> User:
    """A regular student account with a characteristic profile."""
    user = await _make_user(async_session, "student_one", Role.STUDENT)
    async_session.add(CharacteristicProfile(user_id=user.id, quiz_status="COMPLETED", score_leader=0.7))
    await async_session.commit()
    return user


@pytest.fixture
async def expert(async_session: AsyncSession) -> User:
    """An EXPERT account with a pending (unverified) expert profile."""
    user = await _make_user(async_session, "dr_expert", Role.EXPERT)
    async_session.add(
        ExpertProfile(user_id=user.id, title="PhD", institution="Uni", bio="Databases", years_of_experience=8)
    )
    await async_session.commit()
    return user


@pytest.fixture
def actor(admin: User) -> AdminActor:
    """The administrator as a moderation actor."""
    return AdminActor.from_user(admin)


@pytest.fixture
def admin_token(settings: Settings) -> str:
    """Generate a JWT access token for the admin account."""
    return create_access_token(
        subject="root_admin",
        role="ADMIN",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
