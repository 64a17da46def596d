"""Tests for the database engine, session management and transaction helper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import text

import studybuddy_api.core.database as db_module
from studybuddy_api.core.database import dispose_engine, get_engine, get_session_factory, init_engine, transaction


class TestGetEngine:
    """Tests for get_engine."""

    def test_raises_when_not_initialized(self) -> None:
        original_engine = db_module._engine
        db_module._engine = None
        try:
            with pytest.raises(RuntimeError, match="Database engine not initialized"):
                get_engine()
        finally:
            db_module._engine = original_engine

    @pytest.mark.asyncio
    async def test_returns_engine_when_initialized(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert get_engine() is engine
            assert get_session_factory() is not None
        finally:
            await dispose_engine()


class TestInitEngine:
    """Tests for init_engine."""

    def test_postgres_gets_pool_defaults(self) -> None:
        with patch("studybuddy_api.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            try:
                init_engine("postgresql+asyncpg://localhost/db", echo=False)
                mock_create.assert_called_once_with(
                    "postgresql+asyncpg://localhost/db", echo=False, pool_size=10, max_overflow=5
                )
            finally:
                db_module._engine = None
                db_module._session_factory = None

    @pytest.mark.asyncio
    async def test_sqlite_enforces_foreign_keys(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA foreign_keys"))
                assert result.scalar_one() == 1
        finally:
            await dispose_engine()

    @pytest.mark.asyncio
    async def test_dispose_resets_state(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:")
        await dispose_engine()
        assert db_module._engine is None
        assert db_module._session_factory is None


class TestTransaction:
    """Tests for the transaction context manager."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self) -> None:
        session = AsyncMock()
        async with transaction(session) as tx:
            assert tx is session
        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self) -> None:
        session = AsyncMock()
        with pytest.raises(ValueError, match="guard failed"):
            async with transaction(session):
                raise ValueError("guard failed")
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back(self) -> None:
        session = AsyncMock()
        session.commit.side_effect = RuntimeError("connection lost")
        with pytest.raises(RuntimeError, match="connection lost"):
            async with transaction(session):
                pass
        session.rollback.assert_awaited_once()
