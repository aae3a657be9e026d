"""Interlace testing utilities.

Modules:
    fixtures: Pytest fixtures (registry, engine, call_log, metrics).
    mocks: RecordingHandler, a configurable handler double.
    assertions: assert_discovery_ok, assert_invoked_in_order, assert_labels.

Example:
    >>> from interlace.testing import RecordingHandler, assert_invoked_in_order
"""

from interlace.testing.assertions import (
    assert_discovery_ok,
    assert_invoked_in_order,
    assert_labels,
)
from interlace.testing.mocks import RecordedCall, RecordingHandler

__all__ = [
    "RecordedCall",
    "RecordingHandler",
    "assert_discovery_ok",
    "assert_invoked_in_order",
    "assert_labels",
]
