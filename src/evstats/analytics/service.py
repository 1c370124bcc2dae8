"""Fetch events from the store and aggregate them."""

from __future__ import annotations

import logging
from datetime import datetime

from evstats.analytics.aggregator import AnalyticsStats, compute
from evstats.events.store import EventFilters, EventStore, EventStoreError

logger = logging.getLogger(__name__)


def get_analytics_stats(
    filters: EventFilters | None = None,
    store: EventStore | None = None,
    chronological_hours: bool = False,
) -> AnalyticsStats:
    """Compute statistics for the events matching filters.

    A store that can't be read yields empty statistics instead of an error;
    the failure is logged. A missing project is not a store failure.

    Raises:
        FileNotFoundError: If no store is given and no project root exists
    """
    if store is None:
        store = EventStore()
    try:
        events = store.query(filters)
    except (EventStoreError, OSError) as e:
        logger.warning("Failed to fetch events for analytics: %s", e)
        return AnalyticsStats.empty()

    return compute(events, chronological_hours=chronological_hours)


def get_analytics_for_date_range(
    start_date: datetime,
    end_date: datetime,
    store: EventStore | None = None,
) -> AnalyticsStats:
    return get_analytics_stats(
        EventFilters(start_date=start_date, end_date=end_date),
        store=store,
    )
