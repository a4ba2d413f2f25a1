"""Reference clock used wherever "today" or local wall time matters."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ConfigurationError

_LOCALTIME_PATH = Path("/etc/localtime")
_ZONEINFO_MARKER = "zoneinfo/"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _zone_from_key(key: str) -> ZoneInfo | None:
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def _zone_from_localtime_file() -> ZoneInfo | None:
    try:
        with _LOCALTIME_PATH.open("rb") as handle:
            return ZoneInfo.from_file(handle, key="localtime")
    except (OSError, ValueError):
        return None


def system_timezone() -> tzinfo:
    """Return the host timezone with its full daylight-saving rules.

    Looked up from ``TZ``, then the ``/etc/localtime`` link target, then the
    ``/etc/localtime`` file itself. Only when none of those resolve does this
    fall back to the host's current fixed UTC offset.
    """
    key = os.environ.get("TZ", "").lstrip(":")
    if key:
        zone = _zone_from_key(key)
        if zone is not None:
            return zone
    if _LOCALTIME_PATH.exists():
        target = str(_LOCALTIME_PATH.resolve())
        if _ZONEINFO_MARKER in target:
            zone = _zone_from_key(target.split(_ZONEINFO_MARKER, 1)[1])
            if zone is not None:
                return zone
        zone = _zone_from_localtime_file()
        if zone is not None:
            return zone
    local = datetime.now().astimezone().tzinfo
    return local if local is not None else UTC


def resolve_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to the host timezone."""
    if not name:
        return system_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {name!r}.") from exc


@dataclass(frozen=True)
class ReferenceClock:
    """Pairs a source of "now" with the timezone local dates are evaluated in."""

    tz: tzinfo = field(default_factory=system_timezone)
    now_fn: Callable[[], datetime] = _utc_now

    def now(self) -> datetime:
        """Current instant expressed in the clock's local timezone."""
        current = self.now_fn()
        if current.tzinfo is None:
            current = current.replace(tzinfo=self.tz)
        return current.astimezone(self.tz)

    @classmethod
    def fixed(cls, instant: datetime, tz: tzinfo | None = None) -> ReferenceClock:
        """Clock pinned to a single instant; handy for tests and replays."""
        zone = tz if tz is not None else (instant.tzinfo or system_timezone())
        return cls(tz=zone, now_fn=lambda: instant)


def end_of_day(moment: datetime) -> datetime:
    """23:59:59.999 on the same wall-clock date as ``moment``."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def to_js_iso(moment: datetime) -> str:
    """Render an instant as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=system_timezone())
    text = moment.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
