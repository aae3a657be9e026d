"""Shared pytest fixtures for Interlace tests.

Loads the ``interlace.testing.fixtures`` plugin (registry, engine, call_log,
metrics) and provides a few seeds used across test modules.
"""

from __future__ import annotations

import pytest

from interlace.observability import reset_metrics
from tests.factories import Click

pytest_plugins = ["interlace.testing.fixtures"]


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    """Start every test with zeroed metrics."""
    reset_metrics()


@pytest.fixture
def click() -> Click:
    """A click seed on a generic element."""
    return Click(element_id="node-1")
