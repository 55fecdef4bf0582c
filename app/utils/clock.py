"""Time helpers.

Timestamps are stored as naive UTC. Calendar questions ("today", "midnight")
are answered in the configured local timezone.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(name: str | None = None) -> ZoneInfo:
    """Return the configured local timezone."""

    if name is None:
        from app.config.settings import settings

        name = settings.need_tracker.timezone
    return ZoneInfo(name)


def to_local(value: datetime, zone: ZoneInfo) -> datetime:
    """Convert a stored (naive UTC) or aware datetime into ``zone``."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(zone)


def to_storage(value: datetime) -> datetime:
    """Convert any datetime into the naive UTC form used for persistence."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_midnight(now: datetime, zone: ZoneInfo) -> datetime:
    """Return the most recent local midnight at or before ``now`` (aware)."""

    local_now = to_local(now, zone)
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)


__all__ = [
    "utcnow",
    "get_zone",
    "to_local",
    "to_storage",
    "local_midnight",
]
