"""
Event database.

Stores recorded events in .evstats/events.json and answers time-range and
event-type queries over them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from evstats.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS, safe_write_json
from evstats.core.config import get_paths
from evstats.events.models import RawEvent, parse_timestamp

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"


class EventStoreError(Exception):
    """The event database could not be read."""


def _comparable(value: datetime) -> float:
    # Aware and naive datetimes can't be compared; naive ones are local time
    if value.tzinfo is None:
        return value.astimezone().timestamp()
    return value.timestamp()


@dataclass(frozen=True)
class EventFilters:
    """Query filters; every field is optional.

    start_date and end_date are both inclusive.
    """

    start_date: datetime | None = None
    end_date: datetime | None = None
    event_type: str | None = None

    @classmethod
    def from_strings(
        cls,
        start_date: str | None = None,
        end_date: str | None = None,
        event_type: str | None = None,
    ) -> EventFilters:
        """Build filters from ISO-8601 strings.

        Raises:
            ValueError: If a date can't be parsed
        """
        return cls(
            start_date=parse_timestamp(start_date) if start_date else None,
            end_date=parse_timestamp(end_date) if end_date else None,
            event_type=event_type or None,
        )

    def matches(self, event: RawEvent) -> bool:
        if self.event_type is not None and event.event_type != self.event_type:
            return False
        when = _comparable(event.timestamp)
        if self.start_date is not None and when < _comparable(self.start_date):
            return False
        return not (self.end_date is not None and when > _comparable(self.end_date))


class EventStore:
    """Manages events.json with safe loading/saving."""

    def __init__(
        self,
        db_path: Path | None = None,
        backup_dir: Path | None = None,
        keep_backups: int = DEFAULT_KEEP_COUNT,
        keep_days: int | None = DEFAULT_KEEP_DAYS,
    ):
        """Initialize the store.

        Args:
            db_path: Path to events.json (uses default if not provided)
            backup_dir: Backup directory (defaults to .evstats/backups alongside
                the default database; no backups for an explicit db_path)
            keep_backups: Newest backups always kept
            keep_days: Age limit for older backups
        """
        if db_path is None:
            paths = get_paths()
            db_path = paths.events_db
            if backup_dir is None:
                backup_dir = paths.backups
        self.db_path = Path(db_path)
        self.backup_dir = Path(backup_dir) if backup_dir is not None else None
        self.keep_backups = keep_backups
        self.keep_days = keep_days
        self._events: list[RawEvent] = []
        self._loaded = False

    def load(self) -> None:
        """Load events from file.

        A missing file is an empty store. Rows that can't be parsed are skipped.

        Raises:
            EventStoreError: If the file can't be read or isn't valid JSON
        """
        self._events = []
        if not self.db_path.exists():
            self._loaded = True
            return

        try:
            with open(self.db_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise EventStoreError(f"{self.db_path} contains invalid JSON: {e}") from e
        except OSError as e:
            raise EventStoreError(f"Cannot read {self.db_path}: {e}") from e

        rows = data.get("events", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise EventStoreError(f"{self.db_path} has no events list")

        skipped = 0
        for row in rows:
            try:
                self._events.append(RawEvent.from_dict(row))
            except ValueError as e:
                skipped += 1
                logger.debug("Skipping malformed event row: %s", e)
        if skipped:
            logger.warning("Skipped %d malformed event rows in %s", skipped, self.db_path)

        self._loaded = True

    def save(self) -> None:
        """Write all events back to file, backing up the previous version."""
        if not self._loaded:
            raise RuntimeError("Store not loaded. Call load() first.")

        data: dict[str, Any] = {
            "_schema_version": SCHEMA_VERSION,
            "events": [e.to_dict() for e in self._events],
        }
        safe_write_json(
            self.db_path,
            data,
            backup_dir=self.backup_dir,
            keep_backups=self.keep_backups,
            keep_days=self.keep_days,
        )

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._events)

    def __iter__(self) -> Iterator[RawEvent]:
        self._ensure_loaded()
        return iter(list(self._events))

    def __contains__(self, event_id: str) -> bool:
        self._ensure_loaded()
        return any(e.id == event_id for e in self._events)

    def append(self, event: RawEvent) -> None:
        """Add an event. Call save() to persist it.

        Raises:
            ValueError: If an event with the same id already exists
        """
        self._ensure_loaded()
        if event.id in self:
            raise ValueError(f"Duplicate event id: {event.id}")
        self._events.append(event)

    def discard(self, event_id: str) -> bool:
        """Drop an unsaved event from memory. Returns True if it was present."""
        self._ensure_loaded()
        kept = [e for e in self._events if e.id != event_id]
        removed = len(kept) != len(self._events)
        self._events = kept
        return removed

    def query(
        self,
        filters: EventFilters | None = None,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        event_type: str | None = None,
    ) -> list[RawEvent]:
        """Return matching events, newest first.

        Either pass an EventFilters or the individual keyword filters.
        Events with equal timestamps keep their recorded order.

        Raises:
            EventStoreError: If the database can't be loaded
        """
        if filters is None:
            filters = EventFilters(start_date, end_date, event_type)
        self._ensure_loaded()

        matched = [e for e in self._events if filters.matches(e)]
        matched.sort(key=lambda e: _comparable(e.timestamp), reverse=True)
        return matched
