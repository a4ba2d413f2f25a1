"""Application exception classes."""


class DashboardError(Exception):
    """Base class for dashboard backend failures."""


class ConfigurationError(DashboardError):
    """Raised when a required credential, URL, or key is missing or invalid."""


class ValidationError(DashboardError):
    """Raised when a caller-supplied parameter is malformed or missing."""


class UpstreamError(DashboardError):
    """Raised when an external dependency answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamDataError(DashboardError):
    """Raised when an upstream response lacks the data needed for a result."""


class ParseError(DashboardError):
    """Raised internally for malformed iCal content; never leaves the parser."""
