"""
Event analytics aggregator.

Turns a collection of raw events into the ranked, bucketed summaries shown
on the dashboard. Pure computation: no I/O, no state between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from evstats.events.models import RawEvent

SEARCH_EVENT_TYPE = "search"

PAGE_VIEWS_LIMIT = 10
SEARCHED_CODES_LIMIT = 10
BRANDS_LIMIT = 10
USERS_LIMIT = 10
ERROR_CODES_LIMIT = 15


@dataclass(frozen=True)
class PathCount:
    path: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "count": self.count}


@dataclass(frozen=True)
class CodeCount:
    """A search code or error code with its occurrence count."""

    code: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "count": self.count}


@dataclass(frozen=True)
class BrandCount:
    brand: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"brand": self.brand, "count": self.count}


@dataclass(frozen=True)
class UserCount:
    user_id: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"userId": self.user_id, "count": self.count}


@dataclass(frozen=True)
class HourCount:
    """Events in one local hour-of-day bucket, labelled like '9:00'."""

    hour: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"hour": self.hour, "count": self.count}


@dataclass(frozen=True)
class AnalyticsStats:
    """Dashboard summary of one event collection."""

    total_page_views: int
    total_searches: int
    page_views: tuple[PathCount, ...] = ()
    top_searched_codes: tuple[CodeCount, ...] = ()
    top_brands: tuple[BrandCount, ...] = ()
    top_users: tuple[UserCount, ...] = ()
    error_code_frequency: tuple[CodeCount, ...] = ()
    activity_by_hour: tuple[HourCount, ...] = ()

    @classmethod
    def empty(cls) -> AnalyticsStats:
        return cls(total_page_views=0, total_searches=0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dashboard's JSON shape."""
        return {
            "totalPageViews": self.total_page_views,
            "totalSearches": self.total_searches,
            "pageViews": [p.to_dict() for p in self.page_views],
            "topSearchedCodes": [c.to_dict() for c in self.top_searched_codes],
            "topBrands": [b.to_dict() for b in self.top_brands],
            "topUsers": [u.to_dict() for u in self.top_users],
            "errorCodeFrequency": [c.to_dict() for c in self.error_code_frequency],
            "activityByHour": [h.to_dict() for h in self.activity_by_hour],
        }


def _top(keys: Iterable[str | None], limit: int | None) -> list[tuple[str, int]]:
    """Count non-empty keys and rank them by count, descending.

    Equal counts keep first-seen order (Counter.most_common is stable).
    """
    return Counter(k for k in keys if k).most_common(limit)


def hour_label(hour: int) -> str:
    return f"{hour}:00"


def lexicographic_hour_key(entry: tuple[str, int]) -> Any:
    # Plain string order, so "10:00" sorts before "2:00". Kept for
    # compatibility with existing dashboards.
    return entry[0]


def chronological_hour_key(entry: tuple[str, int]) -> Any:
    return int(entry[0].split(":", 1)[0])


def compute(
    events: Iterable[RawEvent],
    *,
    chronological_hours: bool = False,
) -> AnalyticsStats:
    """Compute dashboard statistics for a collection of events.

    Args:
        events: Events in delivery order (ties between equal counts follow it)
        chronological_hours: Order activity_by_hour by numeric hour instead of
            by label text

    Returns:
        AnalyticsStats; all-zero for an empty collection
    """
    events = list(events)

    page_views = _top((e.path for e in events), PAGE_VIEWS_LIMIT)
    searched = _top(
        (e.meta_key("code") for e in events if e.event_type == SEARCH_EVENT_TYPE),
        SEARCHED_CODES_LIMIT,
    )
    brands = _top((e.meta_key("brand") for e in events), BRANDS_LIMIT)
    users = _top((e.user_id for e in events), USERS_LIMIT)
    errors = _top((e.meta_key("errorCode") for e in events), ERROR_CODES_LIMIT)

    hour_key: Callable[[tuple[str, int]], Any] = (
        chronological_hour_key if chronological_hours else lexicographic_hour_key
    )
    hours = sorted(_top((hour_label(e.local_hour) for e in events), None), key=hour_key)

    return AnalyticsStats(
        total_page_views=len(events),
        # Sum of the displayed top codes only, not of every search event
        total_searches=sum(count for _, count in searched),
        page_views=tuple(PathCount(p, c) for p, c in page_views),
        top_searched_codes=tuple(CodeCount(k, c) for k, c in searched),
        top_brands=tuple(BrandCount(b, c) for b, c in brands),
        top_users=tuple(UserCount(u, c) for u, c in users),
        error_code_frequency=tuple(CodeCount(k, c) for k, c in errors),
        activity_by_hour=tuple(HourCount(h, c) for h, c in hours),
    )
