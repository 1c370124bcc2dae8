"""CLI commands for event analytics."""

from __future__ import annotations

import json as json_module
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import click
from rich.console import Console
from rich.table import Table

console = Console()

HOUR_ORDER_NOTE = (
    "[dim]Hours are ordered as text ('10:00' before '2:00'). "
    "Use --chronological for numeric order.[/dim]"
)


def filter_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared time-range, type and output options."""
    options = [
        click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
        click.option("--since", default=None, help="Only events at or after this ISO date/time"),
        click.option("--until", default=None, help="Only events at or before this ISO date/time"),
        click.option("--days", "-d", type=int, default=None, help="Only events from the last N days"),
        click.option("--type", "event_type", default=None, help="Only events of this type"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_filters(
    since: str | None,
    until: str | None,
    days: int | None,
    event_type: str | None,
):
    from evstats.config.commands import get_setting
    from evstats.events import EventFilters

    try:
        filters = EventFilters.from_strings(since, until, event_type)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--since/--until") from e

    if filters.start_date is None:
        if days is None:
            days = int(get_setting("analytics.default_days") or 0)
        if days > 0:
            start = datetime.now(timezone.utc) - timedelta(days=days)
            filters = EventFilters(start, filters.end_date, filters.event_type)
    return filters


def _load_stats(
    since: str | None,
    until: str | None,
    days: int | None,
    event_type: str | None,
    chronological: bool = False,
):
    from evstats.analytics import get_analytics_stats
    from evstats.events import EventStore

    try:
        filters = _build_filters(since, until, days, event_type)
        store = EventStore()
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    return get_analytics_stats(filters, store=store, chronological_hours=chronological)


def _ranking_table(title: str, label: str, rows: Sequence[tuple[str, int]]) -> Table:
    table = Table(title=title)
    table.add_column("Rank", style="dim")
    table.add_column(label, style="cyan")
    table.add_column("Count", style="bold")
    for i, (key, count) in enumerate(rows, 1):
        table.add_row(str(i), key, str(count))
    return table


def _print_ranking(
    as_json: bool,
    key: str,
    stats_dict: dict[str, Any],
    title: str,
    label: str,
    rows: Sequence[tuple[str, int]],
) -> None:
    if as_json:
        console.print(json_module.dumps(stats_dict[key], indent=2))
        return
    if not rows:
        console.print(f"[yellow]No data for {title.lower()}.[/yellow]")
        return
    console.print(_ranking_table(title, label, rows))


@click.group(name="analytics")
def analytics() -> None:
    """Event analytics and dashboard statistics.

    Summarizes recorded events: page views, searches, brands, users,
    error codes, and activity by hour.
    """
    pass


@analytics.command(name="summary")
@filter_options
@click.option("--chronological", is_flag=True, help="Order hours numerically")
def analytics_summary(
    as_json: bool,
    since: str | None,
    until: str | None,
    days: int | None,
    event_type: str | None,
    chronological: bool,
) -> None:
    """Show all dashboard statistics.

    \b
    Examples:
        evstats analytics summary                       # All time
        evstats analytics summary --days 7              # Last week
        evstats analytics summary --since 2024-01-01 --json
    """
    stats = _load_stats(since, until, days, event_type, chronological)

    if as_json:
        console.print(json_module.dumps(stats.to_dict(), indent=2))
        return

    console.print()
    console.print("[bold cyan]Overview[/bold cyan]")
    console.print(f"  Total events: {stats.total_page_views}")
    console.print(f"  Searches (top codes): {stats.total_searches}")

    sections = [
        ("Top Pages", "Path", [(p.path, p.count) for p in stats.page_views]),
        ("Top Searched Codes", "Code", [(c.code, c.count) for c in stats.top_searched_codes]),
        ("Top Brands", "Brand", [(b.brand, b.count) for b in stats.top_brands]),
        ("Top Users", "User", [(u.user_id, u.count) for u in stats.top_users]),
        ("Error Codes", "Code", [(c.code, c.count) for c in stats.error_code_frequency]),
    ]
    for title, label, rows in sections:
        if rows:
            console.print()
            console.print(_ranking_table(title, label, rows))

    if stats.activity_by_hour:
        console.print()
        console.print("[bold cyan]Activity by Hour[/bold cyan]")
        for h in stats.activity_by_hour:
            console.print(f"  {h.hour:>6}  {h.count}")
        if not chronological:
            console.print(HOUR_ORDER_NOTE)

    console.print()


@analytics.command(name="pages")
@filter_options
def analytics_pages(as_json, since, until, days, event_type) -> None:
    """Show the 10 most viewed paths."""
    stats = _load_stats(since, until, days, event_type)
    _print_ranking(
        as_json, "pageViews", stats.to_dict(), "Top Pages", "Path",
        [(p.path, p.count) for p in stats.page_views],
    )


@analytics.command(name="searches")
@filter_options
def analytics_searches(as_json, since, until, days, event_type) -> None:
    """Show the 10 most searched codes."""
    stats = _load_stats(since, until, days, event_type)
    _print_ranking(
        as_json, "topSearchedCodes", stats.to_dict(), "Top Searched Codes", "Code",
        [(c.code, c.count) for c in stats.top_searched_codes],
    )
    if not as_json and stats.top_searched_codes:
        console.print(f"[dim]Total searches: {stats.total_searches}[/dim]")


@analytics.command(name="brands")
@filter_options
def analytics_brands(as_json, since, until, days, event_type) -> None:
    """Show the 10 most referenced brands."""
    stats = _load_stats(since, until, days, event_type)
    _print_ranking(
        as_json, "topBrands", stats.to_dict(), "Top Brands", "Brand",
        [(b.brand, b.count) for b in stats.top_brands],
    )


@analytics.command(name="users")
@filter_options
def analytics_users(as_json, since, until, days, event_type) -> None:
    """Show the 10 most active signed-in users."""
    stats = _load_stats(since, until, days, event_type)
    _print_ranking(
        as_json, "topUsers", stats.to_dict(), "Top Users", "User",
        [(u.user_id, u.count) for u in stats.top_users],
    )


@analytics.command(name="errors")
@filter_options
def analytics_errors(as_json, since, until, days, event_type) -> None:
    """Show the 15 most viewed error codes."""
    stats = _load_stats(since, until, days, event_type)
    _print_ranking(
        as_json, "errorCodeFrequency", stats.to_dict(), "Error Codes", "Code",
        [(c.code, c.count) for c in stats.error_code_frequency],
    )


@analytics.command(name="hours")
@filter_options
@click.option("--chronological", is_flag=True, help="Order hours numerically")
def analytics_hours(as_json, since, until, days, event_type, chronological) -> None:
    """Show event counts per local hour of day.

    \b
    Examples:
        evstats analytics hours                  # Text order: 10:00 before 2:00
        evstats analytics hours --chronological  # 0:00, 1:00, ... 23:00
    """
    stats = _load_stats(since, until, days, event_type, chronological)

    if as_json:
        console.print(json_module.dumps(stats.to_dict()["activityByHour"], indent=2))
        return

    if not stats.activity_by_hour:
        console.print("[yellow]No activity recorded.[/yellow]")
        return

    table = Table(title="Activity by Hour")
    table.add_column("Hour", style="cyan")
    table.add_column("Events", style="bold")
    peak = max(h.count for h in stats.activity_by_hour)
    for h in stats.activity_by_hour:
        style = "green" if h.count == peak else ""
        table.add_row(h.hour, f"[{style}]{h.count}[/{style}]" if style else str(h.count))

    console.print(table)
    if not chronological:
        console.print(HOUR_ORDER_NOTE)
