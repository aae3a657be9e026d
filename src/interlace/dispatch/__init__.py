"""Interaction dispatch and discovery.

Public exports:
    ServiceRegistry: Ordered registry of handlers keyed by (channel, input type)
    HandlerKey: Composite registry key
    HandlerEntry: A registered handler with its owner
    service: Decorator marking methods for register_module
    validate_handler: Handler shape check
    ResultAcceptor: Bounded, type-filtering sink handed to handlers
    DispatchContext: Per-call variables and engine back-reference
    CancelScope: Caller-supplied deadline/cancel flag
    DiscoveryEngine: discover_one / discover_many / discover
    DiscoveryResult: Results, outcome and failures of one call
    DiscoveryOutcome: completed / limit_reached / cancelled
    create_engine: Composition-root factory
    first_of_type: Pick the first value of a type from a collection
"""

from interlace.dispatch.acceptor import ResultAcceptor
from interlace.dispatch.context import CancelScope, DispatchContext
from interlace.dispatch.engine import (
    DiscoveryEngine,
    DiscoveryOutcome,
    DiscoveryResult,
    create_engine,
)
from interlace.dispatch.matching import first_of_type, matches, normalize_type
from interlace.dispatch.registry import (
    Handler,
    HandlerEntry,
    HandlerKey,
    ServiceRegistry,
    service,
    validate_handler,
)

__all__ = [
    # Registry
    "ServiceRegistry",
    "HandlerKey",
    "HandlerEntry",
    "Handler",
    "service",
    "validate_handler",
    # Per-call objects
    "ResultAcceptor",
    "DispatchContext",
    "CancelScope",
    # Engine
    "DiscoveryEngine",
    "DiscoveryResult",
    "DiscoveryOutcome",
    "create_engine",
    # Type matching
    "first_of_type",
    "matches",
    "normalize_type",
]
