"""CalDAV calendar discovery, event fetching and iCal parsing."""

from .caldav_client import CalDAVCalendarClient, get_calendar_events
from .date_range import RANGE_KEYWORDS, format_caldav_timestamp, resolve_date_window
from .ical import ParseResult, parse_event, parse_event_result
from .models import CalendarEvent, CalendarInfo, DateWindow

__all__ = [
    "RANGE_KEYWORDS",
    "CalDAVCalendarClient",
    "CalendarEvent",
    "CalendarInfo",
    "DateWindow",
    "ParseResult",
    "format_caldav_timestamp",
    "get_calendar_events",
    "parse_event",
    "parse_event_result",
    "resolve_date_window",
]
