"""
Main CLI dispatcher for evstats.

Usage:
    evstats init                         # Initialize .evstats/ directory
    evstats events [track|list]
    evstats analytics [summary|pages|searches|brands|users|errors|hours]
    evstats config [show|get|set|path]
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from evstats import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG with -v, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="evstats")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without making changes")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Activity event tracking and dashboard statistics.

    Record page views, searches, clicks and error-code lookups, then
    summarize them.
    """
    ctx.obj = Context(verbose=verbose, dry_run=dry_run)
    setup_logging(verbose)

    if dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")


@main.command()
@click.option("--force", "-f", is_flag=True, help="Reinitialize an existing .evstats/ directory")
@click.pass_obj
def init(ctx, force: bool) -> None:
    """Initialize .evstats/ directory structure.

    Creates the .evstats/ directory in the current directory.
    """
    from pathlib import Path

    from evstats.core.config import DATA_DIR_NAME

    dry_run = ctx.dry_run if ctx else False
    root = Path.cwd()
    data_dir = root / DATA_DIR_NAME

    if data_dir.exists() and not force:
        console.print(f"[yellow]{DATA_DIR_NAME}/ directory already exists at {data_dir}[/yellow]")
        console.print("[dim]Use --force to reinitialize.[/dim]")
        return

    console.print(f"[cyan]Initializing {DATA_DIR_NAME}/ directory at {root}[/cyan]")

    for dir_path in [data_dir, data_dir / "backups"]:
        if not dry_run:
            dir_path.mkdir(parents=True, exist_ok=True)
        console.print(f"  [green]Created[/green] {dir_path.relative_to(root)}")

    gitignore_path = root / ".gitignore"
    gitignore_entry = f"{DATA_DIR_NAME}/backups/"
    if gitignore_path.exists():
        content = gitignore_path.read_text()
        if gitignore_entry not in content:
            if not dry_run:
                with open(gitignore_path, "a") as f:
                    f.write(f"\n# evstats backups\n{gitignore_entry}\n")
            console.print(f"  [green]Updated[/green] .gitignore with {gitignore_entry}")

    console.print()
    if dry_run:
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
    else:
        console.print(f"[green]Done![/green] {DATA_DIR_NAME}/ directory initialized.")


# Import and register command groups (imports after main definition intentional)
from evstats.analytics.commands import analytics  # noqa: E402
from evstats.config.commands import config  # noqa: E402
from evstats.events.commands import events  # noqa: E402

main.add_command(events)
main.add_command(analytics)
main.add_command(config)


if __name__ == "__main__":
    main()
