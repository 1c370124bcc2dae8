"""
Atomic JSON writes with timestamped backups.

The event database is rewritten in full on every append, so each write
first snapshots the previous file and then rotates old snapshots.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import shutil
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_KEEP_COUNT = 10
DEFAULT_KEEP_DAYS = 30
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"
TIMESTAMP_PATTERN = re.compile(r"_(\d{8}_\d{6}_\d{6})\.")


def parse_backup_timestamp(filename: str) -> datetime | None:
    """Extract the timestamp from a name like 'events_20251212_144234_000123.json'."""
    match = TIMESTAMP_PATTERN.search(filename)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def create_backup(file_path: Path, backup_dir: Path) -> Path:
    """Copy file_path into backup_dir under a timestamped name.

    Raises:
        FileNotFoundError: If file_path doesn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Cannot backup non-existent file: {file_path}")

    backup_dir = Path(backup_dir)
    backup_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    backup_path = backup_dir / f"{file_path.stem}_{stamp}{file_path.suffix}"
    shutil.copy2(file_path, backup_path)
    return backup_path


def cleanup_old_backups(
    backup_dir: Path,
    stem: str,
    keep_last: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = DEFAULT_KEEP_DAYS,
) -> list[Path]:
    """Remove old backups of one database.

    A backup survives if it is among the newest keep_last OR younger than
    keep_days.

    Returns:
        List of removed backup paths
    """
    backup_dir = Path(backup_dir)
    if not backup_dir.exists():
        return []

    dated = []
    for path in backup_dir.glob(f"{stem}_*.json"):
        timestamp = parse_backup_timestamp(path.name)
        if timestamp is not None:
            dated.append((timestamp, path))
    dated.sort(reverse=True)

    cutoff = datetime.now() - timedelta(days=keep_days) if keep_days is not None else None

    removed = []
    for i, (timestamp, path) in enumerate(dated):
        if i < keep_last:
            continue
        if cutoff is None or timestamp < cutoff:
            path.unlink()
            removed.append(path)

    if removed:
        logger.debug("Rotated %d old backups of %s", len(removed), stem)
    return removed


def safe_write_json(
    file_path: Path,
    data: Any,
    backup_dir: Path | None = None,
    keep_backups: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = DEFAULT_KEEP_DAYS,
) -> Path | None:
    """Write JSON atomically, backing up the previous file first.

    Args:
        file_path: Target JSON file
        data: JSON-serializable data
        backup_dir: Where to keep snapshots (None = no backup)
        keep_backups: Number of newest backups always kept
        keep_days: Age limit for older backups (None = count only)

    Returns:
        Path to the backup created, or None

    Raises:
        ValueError: If data cannot be serialized
        OSError: If the write fails
    """
    file_path = Path(file_path)

    try:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot serialize data to JSON: {e}") from e

    backup_path = None
    if backup_dir is not None and file_path.exists():
        backup_path = create_backup(file_path, backup_dir)
        cleanup_old_backups(backup_dir, file_path.stem, keep_backups, keep_days)

    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        suffix=".json",
        prefix=f".{file_path.name}.",
        dir=file_path.parent,
        text=True,
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(json_str)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        Path(temp_path).replace(file_path)
    except Exception as e:
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise OSError(f"Failed to write {file_path}: {e}") from e

    return backup_path
