"""Observability module for Interlace.

Structured logging (structlog) and in-process metrics for the registry
and the discovery engine.

Example:
    >>> from interlace.observability import get_logger, get_metrics
    >>> logger = get_logger(__name__)
    >>> logger.info("interlace.discovery.started", channel="/menu")
    >>> get_metrics().increment_counter("interlace_discoveries_total", {"channel": "/menu"})
"""

from interlace.observability.logging import (
    configure_logging,
    get_logger,
    is_debug_mode,
    reset_logging,
    sanitize_for_logging,
)
from interlace.observability.metrics import (
    MetricsCollector,
    get_metrics,
    reset_metrics,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_metrics",
    "is_debug_mode",
    "reset_logging",
    "reset_metrics",
    "MetricsCollector",
    "sanitize_for_logging",
]
