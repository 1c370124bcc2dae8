"""
Where evstats keeps its data.

Every project has a .evstats/ directory holding events.json, config.yaml
and a backups/ folder. Commands locate it from EVSTATS_ROOT, then the
nearest enclosing .evstats/, then the `root` key of the per-user config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

DATA_DIR_NAME = ".evstats"
ROOT_ENV_VAR = "EVSTATS_ROOT"


@dataclass(frozen=True)
class EvstatsPaths:
    """Files and directories under one project's .evstats/."""

    root: Path
    data_dir: Path
    events_db: Path
    config_file: Path
    backups: Path


def get_global_config_path() -> Path:
    """Per-user config file, under XDG_CONFIG_HOME when it is set."""
    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / "evstats" / "config.yaml"


def load_global_config() -> dict:
    """Read the per-user config; unreadable or non-mapping files count as empty."""
    path = get_global_config_path()
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _has_data_dir(path: Path) -> bool:
    return (path / DATA_DIR_NAME).is_dir()


def _nearest_project(start: Path) -> Path | None:
    for candidate in (start, *start.parents):
        if _has_data_dir(candidate):
            return candidate
    return None


def _explicit_root(value: str, source: str) -> Path:
    # A root named explicitly must exist; don't fall through to other sources
    path = Path(value).expanduser().resolve()
    if not _has_data_dir(path):
        raise FileNotFoundError(f"{source}={value} does not contain an {DATA_DIR_NAME}/ directory.")
    return path


def find_root(start_path: Path | None = None) -> Path:
    """Locate the project that owns the event database.

    Args:
        start_path: Directory to search upwards from (defaults to cwd)

    Raises:
        FileNotFoundError: If no project can be found
    """
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return _explicit_root(env_root, ROOT_ENV_VAR)

    start = Path(start_path if start_path is not None else Path.cwd()).resolve()
    project = _nearest_project(start)
    if project is not None:
        return project

    configured = load_global_config().get("root")
    if configured:
        return _explicit_root(str(configured), "Global config root")

    raise FileNotFoundError(
        f"Could not find {DATA_DIR_NAME}/ directory starting from {start}. "
        f"Run 'evstats init' to initialize, set {ROOT_ENV_VAR}, or configure "
        f"root in {get_global_config_path()}."
    )


@lru_cache(maxsize=1)
def get_root() -> Path:
    return find_root()


def get_paths(root: Path | None = None) -> EvstatsPaths:
    """Build the standard paths for root (the cached project root by default)."""
    root = Path(root) if root is not None else get_root()
    data_dir = root / DATA_DIR_NAME
    return EvstatsPaths(
        root=root,
        data_dir=data_dir,
        events_db=data_dir / "events.json",
        config_file=data_dir / "config.yaml",
        backups=data_dir / "backups",
    )
