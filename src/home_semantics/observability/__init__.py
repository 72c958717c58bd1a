"""Observability components: logging, metrics, and health checks."""

from home_semantics.observability.health import HealthServer
from home_semantics.observability.logging import setup_logging
from home_semantics.observability.metrics import METRICS, MetricsServer

__all__ = ["setup_logging", "METRICS", "MetricsServer", "HealthServer"]
