"""Minimal iCal VEVENT reader.

Only the first VEVENT of a block is read, and only SUMMARY, DTSTART and DTEND
are recognized. Property parameters (TZID, VALUE=DATE, ...) are ignored: a
value ending in ``Z`` is UTC, any other date-time is wall time in the supplied
local timezone, and a bare date is local midnight.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from ..exceptions import ParseError
from .models import CalendarEvent

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one block: an event, an error, or neither."""

    event: CalendarEvent | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.event is not None


def parse_ical_date(value: str, tz: tzinfo) -> datetime:
    """Parse ``YYYYMMDD`` or ``YYYYMMDDTHHMMSS[Z]`` by fixed offsets."""
    try:
        year, month, day = int(value[0:4]), int(value[4:6]), int(value[6:8])
        if "T" not in value:
            return datetime(year, month, day, tzinfo=tz)
        hour, minute, second = int(value[9:11]), int(value[11:13]), int(value[13:15])
        zone = UTC if value.endswith("Z") else tz
        return datetime(year, month, day, hour, minute, second, tzinfo=zone)
    except ValueError as exc:
        raise ParseError(f"Invalid iCal date value {value!r}: {exc}") from exc


def parse_event_result(raw_block: str, tz: tzinfo) -> ParseResult:
    summary: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    in_event = False

    try:
        for line in _LINE_SPLIT_RE.split(raw_block):
            if line == "BEGIN:VEVENT":
                in_event = True
                continue
            if line == "END:VEVENT":
                break
            if not in_event:
                continue

            full_prop, sep, value = line.partition(":")
            if not sep:
                continue
            prop = full_prop.split(";", 1)[0]

            if prop == "SUMMARY":
                summary = value
            elif prop == "DTSTART":
                start = parse_ical_date(value, tz)
            elif prop == "DTEND":
                end = parse_ical_date(value, tz)
    except ParseError as exc:
        return ParseResult(error=exc)

    if not summary or start is None:
        return ParseResult()
    return ParseResult(event=CalendarEvent(summary=summary, start=start, end=end))


def parse_event(raw_block: str, tz: tzinfo) -> CalendarEvent | None:
    """Parse one calendar-data block, returning None when no usable event exists."""
    result = parse_event_result(raw_block, tz)
    if result.error is not None:
        logger.warning("Skipping unparseable iCal event: %s", result.error)
    return result.event
