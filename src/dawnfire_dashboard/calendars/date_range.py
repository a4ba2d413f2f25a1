"""Range keywords (``today``/``tomorrow``/``week``) to concrete date windows."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Literal, get_args

from ..clock import end_of_day, start_of_day
from ..exceptions import ValidationError
from .models import DateWindow

RangeKeyword = Literal["today", "tomorrow", "week"]
RANGE_KEYWORDS: tuple[str, ...] = get_args(RangeKeyword)
WEEK_SPAN_DAYS = 7


def resolve_date_window(keyword: str | None, now: datetime) -> DateWindow:
    """Map a range keyword to local-midnight / 23:59:59.999 bounds around ``now``."""
    keyword = (keyword or "today").strip().lower()
    if keyword not in RANGE_KEYWORDS:
        raise ValidationError(
            f"Unsupported date range {keyword!r}; expected one of {', '.join(RANGE_KEYWORDS)}."
        )

    start = now
    end = now
    if keyword == "tomorrow":
        start = now + timedelta(days=1)
        end = now + timedelta(days=1)
    elif keyword == "week":
        end = now + timedelta(days=WEEK_SPAN_DAYS)

    return DateWindow(start=start_of_day(start), end=end_of_day(end))


def format_caldav_timestamp(moment: datetime) -> str:
    """CalDAV basic UTC form, e.g. ``20250101T090000Z``."""
    return moment.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")
