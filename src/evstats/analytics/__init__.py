"""
Event analytics.

Aggregates recorded events into dashboard statistics.
"""

from evstats.analytics.aggregator import (
    AnalyticsStats,
    BrandCount,
    CodeCount,
    HourCount,
    PathCount,
    UserCount,
    compute,
)
from evstats.analytics.service import get_analytics_for_date_range, get_analytics_stats

__all__ = [
    "AnalyticsStats",
    "PathCount",
    "CodeCount",
    "BrandCount",
    "UserCount",
    "HourCount",
    "compute",
    "get_analytics_stats",
    "get_analytics_for_date_range",
]
