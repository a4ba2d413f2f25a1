"""Async HTTP helper shared by the weather, calendar and metrics clients."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .exceptions import UpstreamDataError, UpstreamError
from .redaction import sanitize_text

DEFAULT_TIMEOUT_SECONDS = 15.0
USER_AGENT = "dawnfire-dashboard/0.1"
DEFAULT_HEADERS = {"User-Agent": USER_AGENT}


class UpstreamClient:
    """Thin wrapper over ``httpx.AsyncClient`` with retry and typed failures.

    Transport errors, HTTP 429 and 5xx responses are retried up to
    ``max_retries`` times; any other 4xx fails immediately.
    """

    def __init__(
        self,
        name: str,
        logger: logging.Logger,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.name = name
        self.logger = logger
        self._max_retries = max_retries
        self._retry_delay = retry_delay_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers=DEFAULT_HEADERS,
        )

    async def __aenter__(self) -> UpstreamClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        content: str | bytes | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request, retrying transient failures, and return a 2xx response."""
        attempt = 0
        while True:
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    content=content,
                    auth=auth,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                # Don't retry 4xx client errors except 429 rate-limit.
                if 400 <= status < 500 and status != 429:
                    raise self._status_error(context, exc) from exc
                if attempt < self._max_retries:
                    attempt += 1
                    self.logger.warning(
                        "%s %s failed (HTTP %d); retrying", self.name, context, status
                    )
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise self._status_error(context, exc) from exc
            except httpx.HTTPError as exc:
                if attempt < self._max_retries:
                    attempt += 1
                    self.logger.warning(
                        "%s %s request failed (%s); retrying",
                        self.name,
                        context,
                        type(exc).__name__,
                    )
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise UpstreamError(
                    f"{self.name} {context} request failed: "
                    f"{type(exc).__name__}: {sanitize_text(str(exc))}"
                ) from exc
            return response

    async def get_json(
        self,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = await self.request(
            "GET",
            url,
            context=context,
            params=params,
            headers={"Accept": "application/json"},
        )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamDataError(
                f"{self.name} {context} returned a non-JSON response."
            ) from exc

    def _status_error(self, context: str, exc: httpx.HTTPStatusError) -> UpstreamError:
        status = exc.response.status_code
        return UpstreamError(
            f"{self.name} {context} failed with status {status}: "
            f"{sanitize_text(exc.response.text[:300])}",
            status_code=status,
        )
