"""CLI commands for recording and listing events."""

from __future__ import annotations

import json as json_module
import re

import click
from rich.console import Console
from rich.table import Table

console = Console()

INT_PATTERN = re.compile(r"-?[0-9]+")


def parse_meta_pairs(pairs: tuple[str, ...]) -> dict[str, str | int | bool]:
    """Parse KEY=VALUE pairs; integers and true/false are converted."""
    meta: dict[str, str | int | bool] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--meta")
        value: str | int | bool = raw
        if raw.lower() in ("true", "false"):
            value = raw.lower() == "true"
        elif INT_PATTERN.fullmatch(raw):
            value = int(raw)
        meta[key] = value
    return meta


def _make_emitter(ctx, user: str | None):
    from evstats.config.commands import get_setting
    from evstats.events import EventEmitter, EventStore, resolve_device_id

    dry_run = ctx.dry_run if ctx else False
    try:
        store = EventStore(
            keep_backups=int(get_setting("backup.keep_count")),
            keep_days=int(get_setting("backup.keep_days")),
        )
        device_id = resolve_device_id(persist=not dry_run)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    return EventEmitter(store, device_id=device_id, user_id=user, dry_run=dry_run)


def _report(emitter, event) -> None:
    if event is None:
        console.print("[yellow]Event could not be recorded (see log).[/yellow]")
        return
    if emitter.dry_run:
        console.print(f"[yellow]Would record[/yellow] {event.event_type}")
        return
    console.print(f"[green]Recorded[/green] {event.event_type} [dim]{event.id}[/dim]")


user_option = click.option("--user", "-u", default=None, help="Acting user id (omit for anonymous)")


@click.group(name="events")
def events() -> None:
    """Record and inspect activity events."""
    pass


@events.group(name="track")
def track() -> None:
    """Record a single event."""
    pass


@track.command(name="page-view")
@click.argument("path")
@user_option
@click.pass_obj
def track_page_view(ctx, path: str, user: str | None) -> None:
    """Record a page view of PATH."""
    emitter = _make_emitter(ctx, user)
    _report(emitter, emitter.track_page_view(path))


@track.command(name="search")
@click.argument("code")
@click.option("--brand", "-b", default=None, help="Brand the search was scoped to")
@user_option
@click.pass_obj
def track_search(ctx, code: str, brand: str | None, user: str | None) -> None:
    """Record a search for CODE."""
    emitter = _make_emitter(ctx, user)
    _report(emitter, emitter.track_search(code, brand))


@track.command(name="click")
@click.argument("label")
@click.option("--meta", "-m", "meta_pairs", multiple=True, help="Extra KEY=VALUE metadata")
@user_option
@click.pass_obj
def track_click(ctx, label: str, meta_pairs: tuple[str, ...], user: str | None) -> None:
    """Record a click on LABEL."""
    meta = parse_meta_pairs(meta_pairs)
    emitter = _make_emitter(ctx, user)
    _report(emitter, emitter.track_click(label, meta))


@track.command(name="error-code")
@click.argument("code")
@click.argument("system_name")
@user_option
@click.pass_obj
def track_error_code(ctx, code: str, system_name: str, user: str | None) -> None:
    """Record a lookup of error CODE on SYSTEM_NAME."""
    emitter = _make_emitter(ctx, user)
    _report(emitter, emitter.track_error_code_view(code, system_name))


@track.command(name="custom")
@click.argument("event_type")
@click.option("--path", "-p", default=None, help="Route the event relates to")
@click.option("--meta", "-m", "meta_pairs", multiple=True, help="KEY=VALUE metadata")
@user_option
@click.pass_obj
def track_custom(
    ctx,
    event_type: str,
    path: str | None,
    meta_pairs: tuple[str, ...],
    user: str | None,
) -> None:
    """Record an event of any EVENT_TYPE."""
    meta = parse_meta_pairs(meta_pairs)
    emitter = _make_emitter(ctx, user)
    _report(emitter, emitter.track_event(event_type, path, meta or None))


@events.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--since", default=None, help="Only events at or after this ISO date/time")
@click.option("--until", default=None, help="Only events at or before this ISO date/time")
@click.option("--type", "event_type", default=None, help="Only events of this type")
@click.option("--limit", "-n", type=int, default=20, help="Limit number of results")
def events_list(
    as_json: bool,
    since: str | None,
    until: str | None,
    event_type: str | None,
    limit: int,
) -> None:
    """List recorded events, newest first.

    \b
    Examples:
        evstats events list                       # Latest 20 events
        evstats events list --type search --json  # Searches as JSON
    """
    from evstats.events import EventFilters, EventStore, EventStoreError

    try:
        filters = EventFilters.from_strings(since, until, event_type)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--since/--until") from e

    try:
        found = EventStore().query(filters)
    except (EventStoreError, FileNotFoundError) as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    total = len(found)
    if limit:
        found = found[:limit]

    if as_json:
        console.print(json_module.dumps([e.to_dict() for e in found], indent=2))
        return

    if not found:
        console.print("[yellow]No events found.[/yellow]")
        return

    table = Table(title="Events")
    table.add_column("Timestamp", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Path")
    table.add_column("User", style="green")
    table.add_column("Meta", style="yellow")

    for e in found:
        meta = ", ".join(f"{k}={v}" for k, v in (e.meta or {}).items())
        table.add_row(
            e.timestamp.isoformat(timespec="seconds"),
            e.event_type,
            e.path or "-",
            e.user_id or "-",
            meta[:40] + "..." if len(meta) > 40 else meta,
        )

    console.print(table)
    console.print()
    console.print(f"[dim]Showing {len(found)} of {total} events[/dim]")
