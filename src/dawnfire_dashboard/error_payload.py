"""Map dashboard exceptions to ``(status, {"error": message})`` pairs."""

from __future__ import annotations

from typing import Any

from .exceptions import (
    ConfigurationError,
    DashboardError,
    UpstreamDataError,
    UpstreamError,
    ValidationError,
)
from .redaction import sanitize_text

GENERIC_MESSAGE = "Internal server error"


def error_status(exc: BaseException, *, passthrough_status: bool = False) -> int:
    if isinstance(exc, (ConfigurationError, ValidationError)):
        return 400
    if isinstance(exc, UpstreamError):
        status = exc.status_code
        if passthrough_status and status is not None and 400 <= status < 600:
            return status
        return 500
    if isinstance(exc, UpstreamDataError):
        return 502
    return 500


def error_payload(
    exc: BaseException, *, passthrough_status: bool = False
) -> tuple[int, dict[str, Any]]:
    """Structured error for the HTTP boundary; never includes tracebacks or secrets."""
    status = error_status(exc, passthrough_status=passthrough_status)
    if isinstance(exc, DashboardError):
        message = sanitize_text(str(exc)) or type(exc).__name__
    else:
        message = GENERIC_MESSAGE
    return status, {"error": message}
