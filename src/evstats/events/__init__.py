"""
Event capture and storage.

Records activity events and serves them back by time range and type.
"""

from evstats.events.emitter import EventEmitter, generate_device_id, resolve_device_id
from evstats.events.models import RawEvent
from evstats.events.store import EventFilters, EventStore, EventStoreError

__all__ = [
    "RawEvent",
    "EventStore",
    "EventFilters",
    "EventStoreError",
    "EventEmitter",
    "generate_device_id",
    "resolve_device_id",
]
