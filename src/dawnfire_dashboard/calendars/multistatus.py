"""CalDAV request bodies and DAV multi-status response parsing."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from ..exceptions import UpstreamDataError
from .models import CalendarInfo

DAV_NS = "DAV:"
CALDAV_NS = "urn:ietf:params:xml:ns:caldav"

_RESPONSE = f"{{{DAV_NS}}}response"
_HREF = f".//{{{DAV_NS}}}href"
_RESOURCETYPE = f".//{{{DAV_NS}}}resourcetype"
_DISPLAYNAME = f".//{{{DAV_NS}}}displayname"
_CALENDAR_MARKER = f".//{{{CALDAV_NS}}}calendar"
_CALENDAR_DATA = f".//{{{CALDAV_NS}}}calendar-data"

PROPFIND_BODY = """<?xml version="1.0" encoding="utf-8" ?>
<d:propfind xmlns:d="DAV:" xmlns:cs="http://calendarserver.org/ns/">
  <d:prop>
    <d:resourcetype />
    <d:displayname />
  </d:prop>
</d:propfind>"""

_CALENDAR_QUERY_TEMPLATE = """<?xml version="1.0" encoding="utf-8" ?>
<c:calendar-query xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:prop>
    <d:getetag />
    <c:calendar-data />
  </d:prop>
  <c:filter>
    <c:comp-filter name="VCALENDAR">
      <c:comp-filter name="VEVENT">
        <c:time-range start="{start}" end="{end}"/>
      </c:comp-filter>
    </c:comp-filter>
  </c:filter>
</c:calendar-query>"""


def calendar_query_body(start: str, end: str) -> str:
    """REPORT body for VEVENTs overlapping ``[start, end]`` (CalDAV UTC stamps)."""
    return _CALENDAR_QUERY_TEMPLATE.format(start=start, end=end)


def _parse_document(text: str, context: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise UpstreamDataError(f"CalDAV {context} returned malformed XML: {exc}") from exc


def _text(element: ET.Element | None) -> str | None:
    if element is None or element.text is None:
        return None
    return element.text.strip() or None


def parse_calendar_listing(text: str, user: str) -> list[CalendarInfo]:
    """Extract calendar collections from a PROPFIND multi-status body.

    The user's own home collection (href ending in ``/{user}/``) is skipped.
    """
    root = _parse_document(text, "discovery")
    home_suffix = f"/{user}/"
    calendars: list[CalendarInfo] = []
    for response in root.iter(_RESPONSE):
        href = _text(response.find(_HREF))
        resourcetype = response.find(_RESOURCETYPE)
        is_calendar = resourcetype is not None and resourcetype.find(_CALENDAR_MARKER) is not None
        if not is_calendar or not href or href.endswith(home_suffix):
            continue
        name = _text(response.find(_DISPLAYNAME)) or _last_path_segment(href)
        calendars.append(CalendarInfo(href=href, name=name))
    return calendars


def extract_calendar_data(text: str) -> list[str]:
    """Raw iCal text of every entry in a calendar-query REPORT response."""
    root = _parse_document(text, "report")
    blocks: list[str] = []
    for response in root.iter(_RESPONSE):
        data = response.find(_CALENDAR_DATA)
        if data is not None and data.text:
            blocks.append(data.text)
    return blocks


def _last_path_segment(href: str) -> str:
    segments = [segment for segment in href.split("/") if segment]
    return segments[-1] if segments else href
