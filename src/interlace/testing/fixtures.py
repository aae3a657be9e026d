"""Pytest fixtures for Interlace tests.

Load with ``pytest_plugins = ["interlace.testing.fixtures"]``.

Fixtures:
    registry: An empty ServiceRegistry.
    engine: A DiscoveryEngine over ``registry`` with default settings.
    call_log: A shared list for RecordingHandler(call_log=...).
    metrics: The global metrics collector, reset before the test.
"""

import pytest

from interlace.dispatch.engine import DiscoveryEngine
from interlace.dispatch.registry import ServiceRegistry
from interlace.observability.metrics import MetricsCollector, get_metrics, reset_metrics


@pytest.fixture
def registry() -> ServiceRegistry:
    """Create an empty registry for the test."""
    return ServiceRegistry()


@pytest.fixture
def engine(registry: ServiceRegistry) -> DiscoveryEngine:
    """Create an engine over the test's ``registry``."""
    return DiscoveryEngine(registry)


@pytest.fixture
def call_log() -> list[str]:
    """Shared, initially empty handler call log."""
    return []


@pytest.fixture
def metrics() -> MetricsCollector:
    """Global metrics collector with all values reset."""
    reset_metrics()
    return get_metrics()
