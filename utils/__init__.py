"""Utility modules for cross-cutting concerns."""

from utils.durations import now_utc, parse_duration
