"""Marketdesk CLI: moderator tools for interest threads and account bans."""

from __future__ import annotations

import logging
import sys
import uuid
from typing import NoReturn

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from marketdesk import __version__
from marketdesk.config import build_gateway, load_settings, with_data_dir
from marketdesk.errors import MarketdeskError
from marketdesk.interests.models import InterestKind, InterestStatus, Moderator
from marketdesk.security.audit_log import AuditLogger

console = Console()

_KINDS = click.Choice([k.value for k in InterestKind])


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--local/--remote", default=False, help="Use the JSON-file store instead of Supabase")
@click.option("--data-dir", default=None, help="Directory for the local store")
@click.option("--verbose", "-v", is_flag=True, help="Log gateway warnings to stderr")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, local: bool, data_dir: str | None, verbose: bool):
    """Marketdesk: interest replies and account moderation.

    Resolves community-project interests, development-project interests
    and machinery requests to their threads, posts moderator replies, and
    suspends or reinstates users.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["local"] = local
    ctx.obj["data_dir"] = data_dir


def _services(ctx: click.Context):
    settings = with_data_dir(load_settings(ctx.obj["config_path"]), ctx.obj["data_dir"])
    gateway = build_gateway(settings, local=ctx.obj["local"])
    return gateway, AuditLogger(settings.audit_dir)


# ── Interests ────────────────────────────────────────────────────────


@main.command()
@click.argument("kind", type=_KINDS)
@click.option("--status", type=click.Choice([s.value for s in InterestStatus]), default=None)
@click.pass_context
def interests(ctx: click.Context, kind: str, status: str | None):
    """List interests of KIND, newest first."""
    from marketdesk.interests.resolver import ConversationResolver

    try:
        gateway, _ = _services(ctx)
        found = ConversationResolver(gateway).list_interests(kind, status)
    except MarketdeskError as e:
        _fail(e.message)

    if not found:
        console.print("[yellow]No interests found.[/]")
        return

    table = Table(title=f"{kind} interests ({len(found)})")
    table.add_column("ID", style="dim")
    table.add_column("Status", style="cyan")
    table.add_column("Applicant")
    table.add_column("Created")
    for interest in found:
        table.add_row(
            interest.id,
            interest.status.value,
            interest.user_name or interest.user_email or "-",
            interest.created_at,
        )
    console.print(table)


@main.command()
@click.argument("kind", type=_KINDS)
@click.argument("interest_id")
@click.pass_context
def conversation(ctx: click.Context, kind: str, interest_id: str):
    """Show an interest and its message thread."""
    from marketdesk.interests.resolver import ConversationResolver

    try:
        gateway, _ = _services(ctx)
        interest = ConversationResolver(gateway).fetch_interest_with_conversation(interest_id, kind)
    except MarketdeskError as e:
        _fail(e.message)

    console.print(
        Panel(
            interest.message or "(no initial message)",
            title=f"{interest.kind.value} {interest.id} [{interest.status.value}]",
            subtitle=interest.user_name or "",
        )
    )
    if not interest.conversation:
        console.print("[dim]No messages yet.[/]")
        return
    for message in interest.conversation:
        style = "green" if message.sender_role.value == "platform_admin" else "blue"
        console.print(f"[{style}]{message.sender_name}[/] [dim]{message.timestamp}[/]")
        console.print(f"  {message.content}")


@main.command()
@click.argument("kind", type=_KINDS)
@click.argument("interest_id")
@click.argument("text")
@click.option("--moderator-id", required=True, help="Platform admin user id")
@click.option("--moderator-name", required=True, help="Display name shown in the thread")
@click.pass_context
def reply(ctx: click.Context, kind: str, interest_id: str, text: str, moderator_id: str, moderator_name: str):
    """Post a moderator reply to an interest thread."""
    from marketdesk.interests.replies import ReplyAppender

    try:
        gateway, audit = _services(ctx)
        result = ReplyAppender(gateway, audit).add_reply(
            interest_id, kind, Moderator(id=moderator_id, name=moderator_name), text
        )
    except (MarketdeskError, ValueError) as e:
        _fail(getattr(e, "message", str(e)))

    if result.status_updated:
        console.print(f"[green]{result.summary}[/] (message {result.message.id})")
    else:
        console.print(f"[yellow]{result.summary}[/] (message {result.message.id})")


# ── Moderation ───────────────────────────────────────────────────────


def _apply_ban(ctx: click.Context, user_id: str, should_ban: bool, actor: str) -> None:
    from marketdesk.moderation.coordinator import AccountModerationCoordinator

    try:
        gateway, audit = _services(ctx)
        result = AccountModerationCoordinator(gateway, audit, actor=actor).set_ban_state(user_id, should_ban)
    except MarketdeskError as e:
        _fail(e.message)

    if result.success:
        console.print(f"[green]{result.message}[/]")
    elif result.partially_applied:
        console.print(Panel(result.message, title="Partially applied", border_style="yellow"))
        sys.exit(2)
    else:
        _fail(result.message)


@main.command()
@click.argument("user_id")
@click.option("--actor", default="cli", help="Recorded as the actor in the audit log")
@click.pass_context
def suspend(ctx: click.Context, user_id: str, actor: str):
    """Suspend USER_ID indefinitely."""
    _apply_ban(ctx, user_id, True, actor)


@main.command()
@click.argument("user_id")
@click.option("--actor", default="cli", help="Recorded as the actor in the audit log")
@click.pass_context
def reinstate(ctx: click.Context, user_id: str, actor: str):
    """Lift the suspension on USER_ID."""
    _apply_ban(ctx, user_id, False, actor)


@main.command()
@click.argument("user_ids", nargs=-1, required=True)
@click.pass_context
def inspect(ctx: click.Context, user_ids: tuple[str, ...]):
    """Show both ban records for each USER_ID and flag divergence."""
    from marketdesk.moderation.coordinator import AccountModerationCoordinator

    try:
        gateway, _ = _services(ctx)
        coordinator = AccountModerationCoordinator(gateway)
        accounts = [coordinator.inspect_account(u) for u in user_ids]
    except MarketdeskError as e:
        _fail(e.message)

    table = Table(title="Ban state")
    table.add_column("User", style="cyan")
    table.add_column("Auth banned until")
    table.add_column("Profile banned until")
    table.add_column("State")
    for account in accounts:
        state = "[red]divergent[/]" if account.divergent else "[green]consistent[/]"
        table.add_row(
            account.user_id,
            account.auth_banned_until or "-",
            account.profile_banned_until or "-",
            state,
        )
    console.print(table)


# ── Staff & audit ────────────────────────────────────────────────────


@main.command("add-admin")
@click.argument("name")
@click.argument("email")
@click.option("--auth-dir", default=None, help="Directory for the staff account store")
def add_admin(name: str, email: str, auth_dir: str | None):
    """Create a platform admin account and print its API key."""
    from marketdesk.auth.models import Role, User
    from marketdesk.auth.store import UserStore

    store = UserStore(auth_dir)
    user = store.create_user(User(id=str(uuid.uuid4()), name=name, email=email, role=Role.platform_admin))
    _, raw_key = store.create_api_key(user.id, "cli")
    console.print(f"[green]Created admin {user.id}[/]")
    console.print(f"API key (shown once): [bold]{raw_key}[/]")


@main.command()
@click.option("--actor", default=None)
@click.option("--action", default=None)
@click.option("--format", "fmt", type=click.Choice(["table", "json", "csv"]), default="table")
@click.option("--limit", default=50, show_default=True)
@click.pass_context
def audit(ctx: click.Context, actor: str | None, action: str | None, fmt: str, limit: int):
    """Show recorded moderator actions, newest first."""
    settings = load_settings(ctx.obj["config_path"])
    audit_log = AuditLogger(settings.audit_dir)

    if fmt != "table":
        click.echo(audit_log.export_events(fmt, actor=actor, action=action, limit=limit))
        return

    events = audit_log.get_events(actor=actor, action=action, limit=limit)
    table = Table(title=f"Audit log ({len(events)})")
    table.add_column("When", style="dim")
    table.add_column("Actor", style="cyan")
    table.add_column("Action")
    table.add_column("Resource")
    table.add_column("OK", justify="center")
    for e in events:
        table.add_row(
            e.timestamp,
            e.actor,
            e.action,
            f"{e.resource_type}/{e.resource_id}",
            "[green]✓[/]" if e.success else "[red]✗[/]",
        )
    console.print(table)


if __name__ == "__main__":
    main()
