"""Account management CLI commands."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    username: str = typer.Option(..., prompt=True, help="Username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    role: str = typer.Option("STUDENT", prompt=True, help="Account role (STUDENT/EXPERT/ADMIN)"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the account already exists (idempotent mode)",
    ),
) -> None:
    """Create a new account interactively."""
    asyncio.run(_create_user(username, email, password, role.upper(), if_not_exists=if_not_exists))


async def _create_user(
    username: str,
    email: str,
    password: str,
    role: str,
    *,
    if_not_exists: bool = False,
) -> None:
    """Async implementation of account creation."""
    from studybuddy_api.core.config import get_settings
    from studybuddy_api.core.database import dispose_engine, get_session_factory, init_engine
    from studybuddy_api.schemas.auth import UserCreateRequest
    from studybuddy_api.services.auth_service import create_user

    settings = get_settings()
    init_engine(settings.database_url)

    try:
        factory = get_session_factory()
        async with factory() as session:
            request = UserCreateRequest(username=username, email=email, password=password, role=role)
            user = await create_user(session, request)
            typer.echo(f"User '{user.username}' created with role '{user.role}'")
    except ValueError as e:
        if if_not_exists and "already exists" in str(e):
            typer.echo(f"User '{username}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("list")
def list_users(
    include_deleted: bool = typer.Option(False, "--include-deleted", help="Include soft-deleted accounts"),
) -> None:
    """List accounts with their moderation status."""
    asyncio.run(_list_users(include_deleted=include_deleted))


async def _list_users(*, include_deleted: bool = False) -> None:
    """Async implementation of account listing."""
    from studybuddy_api.core.config import get_settings
    from studybuddy_api.core.database import dispose_engine, get_session_factory, init_engine
    from studybuddy_api.lib.moderation import describe_status
    from studybuddy_api.services.account_service import list_users

    settings = get_settings()
    init_engine(settings.database_url)

    try:
        factory = get_session_factory()
        async with factory() as session:
            users, total = await list_users(session, include_deleted=include_deleted, page_size=1000)
            typer.echo(f"{'ID':<6} {'Username':<20} {'Email':<30} {'Role':<8} {'Status':<10}")
            typer.echo("-" * 78)
            for user in users:
                label = describe_status(user).label
                typer.echo(f"{user.id:<6} {user.username:<20} {user.email:<30} {user.role:<8} {label:<10}")
            typer.echo(f"\nTotal: {total}")
    finally:
        await dispose_engine()


@user_app.command("status")
def user_status(user_id: int = typer.Argument(..., help="Account id")) -> None:
    """Show the stored moderation flags and derived login status of an account."""
    asyncio.run(_user_status(user_id))


async def _user_status(user_id: int) -> None:
    """Async implementation of the status report."""
    from studybuddy_api.core.config import get_settings
    from studybuddy_api.core.database import dispose_engine, get_session_factory, init_engine
    from studybuddy_api.lib.moderation import describe_status
    from studybuddy_api.services.account_service import get_user

    settings = get_settings()
    init_engine(settings.database_url)

    try:
        factory = get_session_factory()
        async with factory() as session:
            user = await get_user(session, user_id)
            if user is None:
                typer.echo(f"Error: User {user_id} not found", err=True)
                raise typer.Exit(code=1)
            derived = describe_status(user)
            typer.echo(f"User:            {user.username} ({user.role})")
            typer.echo(f"Status:          {derived.label}")
            typer.echo(f"Can log in:      {derived.can_login}")
            typer.echo(f"Active:          {user.is_active}")
            typer.echo(f"Deleted at:      {user.deleted_at or '-'}")
            typer.echo(f"Suspended until: {user.suspended_until or '-'}")
            typer.echo(f"Banned at:       {user.banned_at or '-'}")
    finally:
        await dispose_engine()
