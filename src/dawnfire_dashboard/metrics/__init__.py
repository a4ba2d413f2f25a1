"""Prometheus query pass-through."""

from .prometheus import PrometheusClient, query_metrics

__all__ = ["PrometheusClient", "query_metrics"]
