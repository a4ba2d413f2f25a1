"""Typed models for calendar discovery and normalized events."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_serializer

from ..clock import to_js_iso


class CalendarInfo(BaseModel):
    """A calendar collection found during discovery."""

    href: str
    name: str


class CalendarEvent(BaseModel):
    """Normalized event shown by the calendar widgets."""

    summary: str
    start: datetime
    end: datetime | None = None
    calendar: str | None = None

    @field_serializer("start", "end")
    def _serialize_instant(self, value: datetime | None) -> str | None:
        return to_js_iso(value) if value is not None else None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DateWindow(BaseModel):
    """Inclusive ``[start, end]`` instant pair used for time-range filters."""

    start: datetime
    end: datetime
