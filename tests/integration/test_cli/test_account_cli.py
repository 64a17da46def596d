"""Integration tests for the `studybuddy-api user` and `audit` CLI commands.

Each test points the CLI at a throwaway SQLite file whose schema is created
up front, then drives the commands through Typer's runner.
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from typer.testing import CliRunner

from studybuddy_api.cli.app import app
from studybuddy_api.core.security import hash_password
from studybuddy_api.models import AdminAuditLog, User
from studybuddy_api.models.base import Base

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "cli.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    password_hash = hash_password("x" * 8)
    with Session(engine) as session:
        session.add_all(
            [
                User(username="root_admin", email="root@studybuddy.test", hashed_password=password_hash, role="ADMIN"),
                User(
                    username="banned_one",
                    email="banned@studybuddy.test",
                    hashed_password=password_hash,
                    role="STUDENT",
                    is_active=False,
                    banned_at=datetime(2026, 3, 1, tzinfo=UTC),
                    ban_reason="spam",
                ),
            ]
        )
        session.add(AdminAuditLog(admin_user_id=1, action_type="BAN", target_type="USER", target_id=2, reason="spam"))
        session.commit()
    engine.dispose()

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key-not-for-production")
    return path


class TestUserCommands:
    def test_list_shows_status_labels(self, db_path) -> None:
        result = runner.invoke(app, ["user", "list"])
        assert result.exit_code == 0, result.output
        assert "root_admin" in result.output
        assert "banned" in result.output
        assert "Total: 2" in result.output

    def test_status_of_banned_account(self, db_path) -> None:
        result = runner.invoke(app, ["user", "status", "2"])
        assert result.exit_code == 0, result.output
        assert "Status:          banned" in result.output
        assert "Can log in:      False" in result.output

    def test_status_of_unknown_account(self, db_path) -> None:
        result = runner.invoke(app, ["user", "status", "99"])
        assert result.exit_code == 1

    def test_create_and_if_not_exists(self, db_path) -> None:
        args = [
            "user",
            "create",
            "--username",
            "new_student",
            "--email",
            "new@example.com",
            "--password",
            "long-enough-pw",
            "--role",
            "student",
        ]
        result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output
        assert "created with role 'STUDENT'" in result.output

        duplicate = runner.invoke(app, args)
        assert duplicate.exit_code == 1

        idempotent = runner.invoke(app, [*args, "--if-not-exists"])
        assert idempotent.exit_code == 0
        assert "already exists" in idempotent.output


class TestAuditCommands:
    def test_list_entries(self, db_path) -> None:
        result = runner.invoke(app, ["audit", "list", "--action", "ban"])
        assert result.exit_code == 0, result.output
        assert "BAN USER:2" in result.output
        assert "Showing 1 of 1" in result.output

    def test_filter_excludes_entries(self, db_path) -> None:
        result = runner.invoke(app, ["audit", "list", "--target-type", "expert"])
        assert result.exit_code == 0
        assert "Showing 0 of 0" in result.output
