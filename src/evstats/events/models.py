"""
Raw event records.

Events are immutable once recorded. The meta payload is schema-less, so
readers use typed optional lookups instead of indexing it directly.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

MetaValue = str | int | float | bool | None

# fromisoformat before 3.11 only takes 3 or 6 fraction digits
_FRACTION = re.compile(r"\.([0-9]+)")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' means UTC).

    Raises:
        ValueError: If value is not a datetime or parseable string
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class RawEvent:
    """One recorded unit of user activity."""

    id: str
    event_type: str
    timestamp: datetime
    user_id: str | None = None
    device_id: str | None = None
    path: str | None = None
    meta: Mapping[str, MetaValue] | None = field(default=None, hash=False, compare=True)

    def __post_init__(self) -> None:
        # Freeze a private copy so callers can't mutate a recorded event
        if self.meta is not None:
            object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    @property
    def local_hour(self) -> int:
        """Hour of day (0-23) in the local timezone of this process.

        Naive timestamps are already local wall-clock time.
        """
        if self.timestamp.tzinfo is None:
            return self.timestamp.hour
        return self.timestamp.astimezone().hour

    def meta_key(self, key: str) -> str | None:
        """Look up a meta value usable as a grouping key.

        Returns the value as a string if it is a non-empty str or an int,
        None if the key is absent, empty, or of any other type.
        """
        if not self.meta:
            return None
        value = self.meta.get(key)
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            return value or None
        if isinstance(value, int):
            return str(value)
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawEvent:
        """Build an event from a stored row.

        Raises:
            ValueError: If id, event_type or timestamp are missing or invalid
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Event row must be an object, got {type(data).__name__}")

        event_id = _optional_str(data.get("id"))
        event_type = _optional_str(data.get("event_type"))
        if event_id is None:
            raise ValueError("Event row has no id")
        if event_type is None:
            raise ValueError(f"Event {event_id} has no event_type")

        meta = data.get("meta")
        if meta is not None and not isinstance(meta, Mapping):
            meta = None

        return cls(
            id=event_id,
            event_type=event_type,
            timestamp=parse_timestamp(data.get("timestamp")),
            user_id=_optional_str(data.get("user_id")),
            device_id=_optional_str(data.get("device_id")),
            path=_optional_str(data.get("path")),
            meta=meta,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "device_id": self.device_id,
            "event_type": self.event_type,
            "path": self.path,
            "meta": dict(self.meta) if self.meta is not None else None,
            "timestamp": format_timestamp(self.timestamp),
        }
