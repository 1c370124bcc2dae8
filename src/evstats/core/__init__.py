"""Core utilities for evstats."""

from evstats.core.backup import (
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    cleanup_old_backups,
    create_backup,
    safe_write_json,
)
from evstats.core.config import get_paths, get_root

__all__ = [
    # Backup
    "create_backup",
    "safe_write_json",
    "cleanup_old_backups",
    "DEFAULT_KEEP_COUNT",
    "DEFAULT_KEEP_DAYS",
    # Config
    "get_root",
    "get_paths",
]
