"""Read-only CalDAV aggregation: discover calendars, fetch events, merge."""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Any

import httpx

from ..clock import ReferenceClock
from ..exceptions import ConfigurationError, UpstreamDataError, UpstreamError
from ..http_client import DEFAULT_TIMEOUT_SECONDS, UpstreamClient
from .date_range import format_caldav_timestamp, resolve_date_window
from .ical import parse_event
from .models import CalendarEvent, CalendarInfo, DateWindow
from .multistatus import (
    PROPFIND_BODY,
    calendar_query_body,
    extract_calendar_data,
    parse_calendar_listing,
)

logger = logging.getLogger(__name__)

_XML_HEADERS = {"Content-Type": "application/xml", "Depth": "1"}


class CalDAVCalendarClient:
    """Aggregates events across every calendar of one Nextcloud-style account.

    Discovery failures propagate. Each per-calendar REPORT runs in its own
    error boundary, so one broken calendar only drops its own events.
    """

    def __init__(
        self,
        base_url: str | None,
        user: str | None,
        password: str | None,
        *,
        clock: ReferenceClock | None = None,
        max_concurrency: int = 4,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url or not user or not password:
            raise ConfigurationError("Nextcloud credentials not configured")
        self._base_url = base_url.rstrip("/")
        self._user = user
        self._auth = httpx.BasicAuth(user, password)
        self._clock = clock or ReferenceClock()
        self._max_concurrency = max_concurrency
        self._upstream = UpstreamClient(
            "CalDAV",
            logger,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
            client=http_client,
        )

    async def __aenter__(self) -> CalDAVCalendarClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._upstream.aclose()

    @property
    def home_url(self) -> str:
        return f"{self._base_url}/remote.php/dav/calendars/{self._user}/"

    @property
    def tz(self) -> tzinfo:
        return self._clock.tz

    def calendar_url(self, calendar: CalendarInfo) -> str:
        if calendar.href.startswith(("http://", "https://")):
            return calendar.href
        return f"{self._base_url}{calendar.href}"

    async def discover_calendars(self) -> list[CalendarInfo]:
        """PROPFIND the calendar home and return its calendar collections."""
        response = await self._upstream.request(
            "PROPFIND",
            self.home_url,
            context="discovery",
            headers=_XML_HEADERS,
            content=PROPFIND_BODY,
            auth=self._auth,
        )
        calendars = parse_calendar_listing(response.text, self._user)
        logger.info("Discovered %d calendars", len(calendars))
        return calendars

    async def fetch_calendar_events(
        self, calendar: CalendarInfo, window: DateWindow
    ) -> list[CalendarEvent]:
        """REPORT one calendar for VEVENTs inside ``window``; errors propagate."""
        response = await self._upstream.request(
            "REPORT",
            self.calendar_url(calendar),
            context=f"report for {calendar.name!r}",
            headers=_XML_HEADERS,
            content=calendar_query_body(
                format_caldav_timestamp(window.start),
                format_caldav_timestamp(window.end),
            ),
            auth=self._auth,
        )
        events: list[CalendarEvent] = []
        for block in extract_calendar_data(response.text):
            event = parse_event(block, self.tz)
            if event is not None:
                events.append(event.model_copy(update={"calendar": calendar.name}))
        return events

    async def _fetch_calendar_guarded(
        self,
        semaphore: asyncio.Semaphore,
        calendar: CalendarInfo,
        window: DateWindow,
    ) -> list[CalendarEvent]:
        async with semaphore:
            try:
                return await self.fetch_calendar_events(calendar, window)
            except (UpstreamError, UpstreamDataError) as exc:
                logger.warning(
                    "Could not fetch events from %s: %s",
                    calendar.name,
                    exc,
                    extra={"context": {"calendar": calendar.name, "href": calendar.href}},
                )
                return []

    async def get_events(self, range_keyword: str | None = "today") -> list[CalendarEvent]:
        """All events in the keyword's window across calendars, sorted by start."""
        window = resolve_date_window(range_keyword, self._clock.now())
        calendars = await self.discover_calendars()

        semaphore = asyncio.Semaphore(self._max_concurrency)
        per_calendar = await asyncio.gather(
            *(self._fetch_calendar_guarded(semaphore, calendar, window) for calendar in calendars)
        )

        events = [event for batch in per_calendar for event in batch]
        events.sort(key=lambda event: event.start)
        return events


async def get_calendar_events(
    base_url: str | None,
    user: str | None,
    password: str | None,
    range_keyword: str | None = "today",
    *,
    clock: ReferenceClock | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[CalendarEvent]:
    """One-shot convenience wrapper around :class:`CalDAVCalendarClient`."""
    async with CalDAVCalendarClient(
        base_url, user, password, clock=clock, http_client=http_client
    ) as client:
        return await client.get_events(range_keyword)
