"""Dispatch context and cancel scope for one discovery call.

A DispatchContext is created fresh for every discovery call and threaded
through all of that call's handler invocations. It carries caller-defined
variables (a process-instance id, the file a click originated from, ...)
and a back-reference to the engine so a handler can compose its own
nested discovery calls.

Nested calls made on the same thread while a call is running receive a
child context: reads fall through to the enclosing call's variables,
writes stay local to the nested call.
"""

from __future__ import annotations

import threading
import time
from collections import ChainMap
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar, overload

from interlace.dispatch.matching import TypeSpec, normalize_type
from interlace.errors import DiscoveryCancelledError

if TYPE_CHECKING:
    from interlace.dispatch.engine import DiscoveryEngine

T = TypeVar("T")


class CancelScope:
    """Caller-supplied deadline and cancel flag for a discovery call.

    The engine checks the scope before each handler invocation and stops
    dispatching once it has expired. Cancellation is cooperative: a handler
    that is already running is not interrupted, but it can poll
    ``DispatchContext.cancelled`` or call ``raise_if_cancelled``.

    ``cancel()`` may be called from any thread.

    Example:
        >>> scope = CancelScope(timeout_seconds=0.5)
        >>> engine.discover_many(click, MenuItem, cancel_scope=scope)
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {timeout_seconds}")
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline(self) -> float | None:
        """``time.monotonic()`` value after which the scope is expired, if any."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline


class DispatchContext:
    """Per-call key/value scope with a back-reference to the engine."""

    def __init__(
        self,
        engine: DiscoveryEngine,
        channel: str,
        variables: Mapping[str, Any] | None = None,
        parent: DispatchContext | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> None:
        self._engine = engine
        self._channel = channel
        self._parent = parent
        self._cancel_scope = cancel_scope
        local: dict[str, Any] = dict(variables or {})
        if parent is not None:
            self._vars: ChainMap[str, Any] = parent._vars.new_child(local)
        else:
            self._vars = ChainMap(local)

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def parent(self) -> DispatchContext | None:
        return self._parent

    @property
    def depth(self) -> int:
        """0 for a top-level call, 1 for a call nested in it, and so on."""
        return 0 if self._parent is None else self._parent.depth + 1

    @property
    def cancel_scope(self) -> CancelScope | None:
        return self._cancel_scope

    @overload
    def get_context_var(self, key: str) -> Any: ...

    @overload
    def get_context_var(self, key: str, expected_type: type[T]) -> T | None: ...

    def get_context_var(self, key: str, expected_type: TypeSpec = object) -> Any:
        """Return the variable if set and of ``expected_type``, otherwise None.

        An unsupported ``expected_type`` also yields None; handler bodies
        only ever see absence, never an exception.
        """
        if key not in self._vars:
            return None
        value = self._vars[key]
        try:
            classes = normalize_type(expected_type)
        except TypeError:
            return None
        return value if isinstance(value, classes) else None

    def set_context_var(self, key: str, value: Any) -> None:
        self._vars[key] = value

    def has_context_var(self, key: str) -> bool:
        return key in self._vars

    def snapshot(self) -> dict[str, Any]:
        """Flattened copy of every visible variable, innermost value winning."""
        return dict(self._vars)

    def get_current_engine(self) -> DiscoveryEngine:
        return self._engine

    @property
    def cancelled(self) -> bool:
        """True if this call or any enclosing call has been cancelled."""
        if self._cancel_scope is not None and self._cancel_scope.cancelled:
            return True
        return self._parent is not None and self._parent.cancelled

    def raise_if_cancelled(self) -> None:
        """Raise DiscoveryCancelledError if ``cancelled``.

        The engine records the error like any handler failure but logs it
        at info level.
        """
        if self.cancelled:
            raise DiscoveryCancelledError(self._channel)
