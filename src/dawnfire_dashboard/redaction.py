"""Masking of upstream credentials before they reach logs or error payloads.

Three kinds of secret pass through this backend: the OpenWeatherMap ``appid``
query parameter, the Nextcloud Basic-auth password (in headers or URL
userinfo) and whatever an upstream echoes back in an error body.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

_SECRET_NAMES = r"authorization|token|secret|password|passwd|api[_-]?key|appid"

_SENSITIVE_KEY_RE = re.compile(f"({_SECRET_NAMES})", re.IGNORECASE)
_AUTH_SCHEME_RE = re.compile(r"(?i)\b(basic|bearer)\s+[A-Za-z0-9\-._~+/]+=*")
_URL_USERINFO_RE = re.compile(r"(?i)\b(https?://)[^/\s:@]+:[^/\s@]+@")
_KEY_VALUE_SECRET_RE = re.compile(
    rf"(?i)\b({_SECRET_NAMES})\s*[:=]\s*([^\s,;&]+)"
)


def sanitize_text(text: str) -> str:
    """Redact sensitive content embedded in plain text."""
    sanitized = _AUTH_SCHEME_RE.sub(r"\1 " + REDACTED, text)
    sanitized = _URL_USERINFO_RE.sub(r"\1" + REDACTED + "@", sanitized)
    return _KEY_VALUE_SECRET_RE.sub(lambda m: f"{m.group(1)}={REDACTED}", sanitized)


def sanitize_for_logging(value: Any) -> Any:
    """Mask values under sensitive keys; walk dicts, lists and tuples."""
    if isinstance(value, dict):
        return {
            key: REDACTED if _SENSITIVE_KEY_RE.search(str(key)) else sanitize_for_logging(child)
            for key, child in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_for_logging(item) for item in value)
    if isinstance(value, str):
        return sanitize_text(value)
    return value
