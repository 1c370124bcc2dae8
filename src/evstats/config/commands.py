"""
Configuration management CLI commands.

Manages evstats settings stored in .evstats/config.yaml (JSON is accepted
on load).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from evstats.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS
from evstats.core.config import get_paths

console = Console()


def get_config_path() -> Path:
    """Get path to config file."""
    return get_paths().config_file


def load_config() -> dict[str, Any]:
    """Load configuration from file (supports YAML and JSON)."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    content = config_path.read_text()
    if not content.strip():
        return {}

    if content.strip().startswith("{"):
        result: dict[str, Any] = json.loads(content)
        return result
    loaded = yaml.safe_load(content)
    return loaded if isinstance(loaded, dict) else {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file (YAML format)."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(yaml.dump(config, default_flow_style=False, sort_keys=False))


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key."""
    current: Any = load_config()
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def set_config_value(key: str, value: Any) -> None:
    """Set a configuration value by dotted key."""
    config = load_config()
    parts = key.split(".")

    current = config
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
    save_config(config)


def get_setting(key: str) -> Any:
    """Get a configured value, falling back to the schema default."""
    value = get_config_value(key)
    if value is None:
        return CONFIG_SCHEMA[key]["default"]
    return value


CONFIG_SCHEMA: dict[str, dict[str, Any]] = {
    "device.id": {
        "default": None,
        "type": str,
        "description": "Device identifier attached to tracked events (generated on first use)",
    },
    "backup.keep_count": {
        "default": DEFAULT_KEEP_COUNT,
        "type": int,
        "description": "Minimum number of event database backups to keep",
    },
    "backup.keep_days": {
        "default": DEFAULT_KEEP_DAYS,
        "type": int,
        "description": "Maximum age of event database backups in days",
    },
    "analytics.default_days": {
        "default": 0,
        "type": int,
        "description": "Default analytics window in days when --since is omitted (0 = all time)",
    },
}


def _unknown_setting(key: str) -> None:
    console.print(f"[red]Unknown setting: {key}[/red]")
    console.print("\nAvailable settings:")
    for k in CONFIG_SCHEMA:
        console.print(f"  - {k}")


@click.group()
def config():
    """Manage evstats configuration.

    Settings are stored in .evstats/config.yaml.
    """
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Show all settings including defaults")
def show_cmd(show_all: bool):
    """Show current configuration.

    Without --all, only shows settings that differ from defaults.
    """
    cfg = load_config()
    config_path = get_config_path()

    if not cfg and not show_all:
        console.print("[dim]No custom configuration set. Using defaults.[/dim]")
        console.print(f"[dim]Config file: {config_path}[/dim]")
        return

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")
    table.add_column("Description", style="dim")

    for key, schema in CONFIG_SCHEMA.items():
        current = get_config_value(key)
        default = schema["default"]
        is_custom = current is not None and current != default

        if show_all or is_custom:
            display_value = str(current) if current is not None else f"[dim]{default}[/dim]"
            table.add_row(key, display_value, str(default), schema["description"])

    console.print(table)
    console.print(f"\n[dim]Config file: {config_path}[/dim]")


@config.command(name="get")
@click.argument("key")
def get_cmd(key: str):
    """Get a configuration value.

    \b
    Examples:
        evstats config get backup.keep_days
        evstats config get device.id
    """
    if key not in CONFIG_SCHEMA:
        _unknown_setting(key)
        return

    value = get_config_value(key)
    if value is None:
        console.print(f"{key} = {CONFIG_SCHEMA[key]['default']} [dim](default)[/dim]")
    else:
        console.print(f"{key} = {value}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_cmd(ctx, key: str, value: str):
    """Set a configuration value.

    \b
    Examples:
        evstats config set backup.keep_days 14
        evstats config set analytics.default_days 7
    """
    if key not in CONFIG_SCHEMA:
        _unknown_setting(key)
        return

    schema = CONFIG_SCHEMA[key]
    typed_value: int | str
    try:
        typed_value = int(value) if schema["type"] is int else value
    except ValueError:
        console.print(f"[red]Invalid value type. Expected {schema['type'].__name__}[/red]")
        return

    if ctx and ctx.dry_run:
        console.print(f"[yellow]Would set {key} = {typed_value}[/yellow]")
        return

    set_config_value(key, typed_value)
    console.print(f"[green]Set {key} = {typed_value}[/green]")


@config.command(name="path")
def path_cmd():
    """Show the config file location."""
    console.print(str(get_config_path()))
