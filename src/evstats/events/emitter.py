"""
Fire-and-forget event recording.

The emitter never raises: a failed submission is logged and dropped so
that tracking can't break the caller.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from evstats.events.models import MetaValue, RawEvent
from evstats.events.store import EventStore

logger = logging.getLogger(__name__)

DEVICE_ID_KEY = "device.id"
_BASE36 = string.digits + string.ascii_lowercase


def generate_device_id() -> str:
    """Create a new device id like 'device_1718000000000_k3j9x0a1b'."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"device_{int(time.time() * 1000)}_{suffix}"


def resolve_device_id(persist: bool = True) -> str:
    """Return this installation's device id, creating and saving it once.

    With persist=False a missing id is generated but not written to config.
    """
    from evstats.config.commands import get_config_value, set_config_value

    device_id = get_config_value(DEVICE_ID_KEY)
    if device_id:
        return str(device_id)

    device_id = generate_device_id()
    if persist:
        set_config_value(DEVICE_ID_KEY, device_id)
        logger.debug("Generated device id %s", device_id)
    return device_id


class EventEmitter:
    """Records events into an EventStore on behalf of one user/device.

    In dry-run mode events are built and returned but never stored.
    """

    def __init__(
        self,
        store: EventStore,
        device_id: str | None = None,
        user_id: str | None = None,
        dry_run: bool = False,
    ):
        self.store = store
        self.device_id = device_id
        self.user_id = user_id
        self.dry_run = dry_run

    def track_event(
        self,
        event_type: str,
        path: str | None = None,
        meta: Mapping[str, MetaValue] | None = None,
    ) -> RawEvent | None:
        """Record one event.

        Returns:
            The recorded event, or None if recording failed
        """
        try:
            event = RawEvent(
                id=uuid.uuid4().hex,
                event_type=event_type,
                timestamp=datetime.now(timezone.utc),
                user_id=self.user_id or None,
                device_id=self.device_id,
                path=path or None,
                meta=meta or None,
            )
            if self.dry_run:
                logger.info("Dry run: not recording %s event", event_type)
                return event
            self._persist(event)
        except Exception:
            logger.error("Failed to track %s event", event_type, exc_info=True)
            return None

        logger.debug("Tracked %s event %s", event_type, event.id)
        return event

    def _persist(self, event: RawEvent) -> None:
        self.store.append(event)
        try:
            self.store.save()
        except Exception:
            # Unsaved events must not ride along with a later save
            self.store.discard(event.id)
            raise

    def track_page_view(self, path: str) -> RawEvent | None:
        return self.track_event("page_view", path)

    def track_search(self, code: str, brand: str | None = None) -> RawEvent | None:
        meta: dict[str, Any] = {"code": code}
        if brand:
            meta["brand"] = brand
        return self.track_event("search", meta=meta)

    def track_click(
        self,
        label: str,
        meta: Mapping[str, MetaValue] | None = None,
    ) -> RawEvent | None:
        """Record a click; extra meta keys are merged after the label."""
        return self.track_event("click", meta={"label": label, **(meta or {})})

    def track_error_code_view(self, code: str, system_name: str) -> RawEvent | None:
        return self.track_event(
            "error_code_view",
            meta={"errorCode": code, "systemName": system_name},
        )
