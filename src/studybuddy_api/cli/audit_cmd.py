"""Audit trail CLI commands."""

import asyncio
import json

import typer

audit_app = typer.Typer()


@audit_app.command("list")
def list_audit_logs(
    admin_id: int | None = typer.Option(None, "--admin-id", help="Filter by acting admin"),
    action: str | None = typer.Option(None, "--action", help="Filter by action type, e.g. BAN"),
    target_type: str | None = typer.Option(None, "--target-type", help="USER, EXPERT, COURSE or GROUP"),
    target_id: int | None = typer.Option(None, "--target-id", help="Filter by target id"),
    limit: int = typer.Option(20, "--limit", min=1, max=500, help="Number of entries to show"),
) -> None:
    """Show the most recent audit log entries."""
    asyncio.run(
        _list_audit_logs(
            admin_id=admin_id,
            action=action.upper() if action else None,
            target_type=target_type.upper() if target_type else None,
            target_id=target_id,
            limit=limit,
        )
    )


async def _list_audit_logs(
    *,
    admin_id: int | None,
    action: str | None,
    target_type: str | None,
    target_id: int | None,
    limit: int,
) -> None:
    """Async implementation of audit log listing."""
    from studybuddy_api.core.config import get_settings
    from studybuddy_api.core.database import dispose_engine, get_session_factory, init_engine
    from studybuddy_api.services.audit_service import query_audit_logs

    settings = get_settings()
    init_engine(settings.database_url)

    try:
        factory = get_session_factory()
        async with factory() as session:
            logs, total = await query_audit_logs(
                session,
                admin_id=admin_id,
                action_type=action,
                target_type=target_type,
                target_id=target_id,
                page_size=limit,
            )
            for entry in logs:
                metadata = json.dumps(entry.metadata_) if entry.metadata_ else ""
                typer.echo(
                    f"{entry.created_at:%Y-%m-%d %H:%M:%S} admin={entry.admin_user_id} "
                    f"{entry.action_type} {entry.target_type}:{entry.target_id} "
                    f"reason={entry.reason or '-'} {metadata}"
                )
            typer.echo(f"\nShowing {len(logs)} of {total}")
    finally:
        await dispose_engine()
