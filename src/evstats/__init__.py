"""evstats: activity event tracking and dashboard statistics."""

__version__ = "0.1.0"
