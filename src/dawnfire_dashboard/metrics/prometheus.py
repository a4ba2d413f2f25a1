"""Prometheus instant-query pass-through; PromQL is treated as opaque text."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..exceptions import ConfigurationError, ValidationError
from ..http_client import DEFAULT_TIMEOUT_SECONDS, UpstreamClient

logger = logging.getLogger(__name__)

QUERY_PATH = "/api/v1/query"


class PrometheusClient:
    """Forwards a query to ``{base}/api/v1/query`` and returns the body unchanged."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ConfigurationError("Prometheus URL not configured")
        self._base_url = base_url.rstrip("/")
        self._upstream = UpstreamClient(
            "Prometheus",
            logger,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            retry_delay_seconds=retry_delay_seconds,
            client=http_client,
        )

    async def __aenter__(self) -> PrometheusClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._upstream.aclose()

    async def query(self, query: str | None) -> Any:
        if not query or not query.strip():
            raise ValidationError("Missing query parameter")
        return await self._upstream.get_json(
            f"{self._base_url}{QUERY_PATH}",
            context="query",
            params={"query": query},
        )


async def query_metrics(
    base_url: str | None,
    query: str | None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> Any:
    """One-shot convenience wrapper around :class:`PrometheusClient`."""
    if not base_url:
        raise ConfigurationError("Prometheus URL not configured")
    if not query or not query.strip():
        raise ValidationError("Missing query parameter")
    async with PrometheusClient(base_url, http_client=http_client) as client:
        return await client.query(query)
