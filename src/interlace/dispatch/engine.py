"""Discovery engine: find handlers for a seed object and collect their results.

A discovery call takes a seed (a click, a document element, a semantic
URI), a channel, an expected result type and a result limit. The engine
looks up the handlers registered for (channel, type(seed)), invokes each
in registration order, and collects the values they accept through their
ResultAcceptor, until the handlers are exhausted, the limit is reached or
the call is cancelled.

Only the seed is ever dispatched. Accepted results are returned, never fed
back into the engine; handlers that want deeper composition issue nested
calls through ``context.get_current_engine()``.

A handler that raises is logged, recorded in ``DiscoveryResult.failures``
and skipped; the remaining handlers still run and partial results are
returned. Nothing raised by a handler escapes a discovery call.

Example:
    >>> engine = create_engine(SketchDocument("figure.svg", parts))
    >>> engine.discover_one(click, MenuItem, channel="/menu")
    MenuItem(label='open', frame='', explanation='')
    >>> engine.discover_many(click, MenuItem, channel="/menu", limit=5)
    [MenuItem(label='open', ...), MenuItem(label='delete', ...)]
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, overload

from interlace.config import EngineSettings
from interlace.dispatch.acceptor import ResultAcceptor
from interlace.dispatch.context import CancelScope, DispatchContext
from interlace.dispatch.matching import TypeSpec, normalize_type, type_chain, type_name
from interlace.dispatch.registry import HandlerEntry, ServiceRegistry
from interlace.errors import DiscoveryCancelledError, HandlerInvocationError
from interlace.observability import get_logger, get_metrics, is_debug_mode, sanitize_for_logging

logger = get_logger(__name__)

T = TypeVar("T")

# Context of the discovery call currently running on this thread/task
_active_context: ContextVar[DispatchContext | None] = ContextVar(
    "interlace_active_context", default=None
)


class DiscoveryOutcome(str, Enum):
    """Terminal state of a discovery call."""

    COMPLETED = "completed"
    LIMIT_REACHED = "limit_reached"
    CANCELLED = "cancelled"


@dataclass
class DiscoveryResult(Generic[T]):
    """Everything a discovery call produced.

    Attributes:
        channel: Channel the call ran on
        results: Accepted values, in acceptance order, at most ``limit``
        outcome: Why dispatching stopped
        invoked: Number of handlers actually invoked
        failures: One HandlerInvocationError per handler that raised
        duration_ms: Wall time of the call
    """

    channel: str
    results: list[T]
    outcome: DiscoveryOutcome
    invoked: int = 0
    failures: list[HandlerInvocationError] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def first(self) -> T | None:
        """First accepted result, or None if there is none.

        An accepted ``None`` (possible when the expected type admits it, e.g.
        ``Any``) looks the same as no result; check ``results`` to tell them apart.
        """
        return self.results[0] if self.results else None

    @property
    def ok(self) -> bool:
        """True if no handler failed."""
        return not self.failures


class DiscoveryEngine:
    """Synchronous, re-entrant dispatcher over a ServiceRegistry.

    The engine holds no per-call state, so one instance serves any number
    of threads. Each call gets its own accumulator and DispatchContext.
    """

    def __init__(
        self,
        registry: ServiceRegistry | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._registry = registry if registry is not None else ServiceRegistry()
        self._settings = settings if settings is not None else EngineSettings()

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def register_module(self, instance: object) -> int:
        """Shortcut for ``self.registry.register_module(instance)``."""
        return self._registry.register_module(instance)

    @overload
    def discover_one(
        self,
        seed: object,
        expected_type: type[T],
        channel: str | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> T | None: ...

    @overload
    def discover_one(
        self,
        seed: object,
        expected_type: TypeSpec,
        channel: str | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> Any: ...

    def discover_one(
        self,
        seed: object,
        expected_type: TypeSpec,
        channel: str | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> Any:
        """Return the first accepted result, or None if no handler produced one.

        When the expected type admits ``None`` (``Any``, ``Optional[...]``), an
        accepted ``None`` cannot be told apart from no result. Use
        ``discover(..., limit=1).results`` in that case.
        """
        result = self.discover(
            seed,
            expected_type,
            channel,
            limit=1,
            context_vars=context_vars,
            cancel_scope=cancel_scope,
        )
        return result.first

    @overload
    def discover_many(
        self,
        seed: object,
        expected_type: type[T],
        channel: str | None = None,
        limit: int | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> list[T]: ...

    @overload
    def discover_many(
        self,
        seed: object,
        expected_type: TypeSpec,
        channel: str | None = None,
        limit: int | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> list[Any]: ...

    def discover_many(
        self,
        seed: object,
        expected_type: TypeSpec,
        channel: str | None = None,
        limit: int | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> list[Any]:
        """Return up to ``limit`` accepted results, in acceptance order."""
        return self.discover(
            seed,
            expected_type,
            channel,
            limit,
            context_vars=context_vars,
            cancel_scope=cancel_scope,
        ).results

    def discover(
        self,
        seed: object,
        expected_type: TypeSpec,
        channel: str | None = None,
        limit: int | None = None,
        *,
        context_vars: Mapping[str, Any] | None = None,
        cancel_scope: CancelScope | None = None,
    ) -> DiscoveryResult[Any]:
        """Run one discovery call and report results, outcome and failures.

        Args:
            seed: The object handlers are looked up for.
            expected_type: Type spec results must satisfy (see ``matching``).
            channel: Channel to dispatch on; defaults to settings.default_channel.
            limit: Maximum number of results; defaults to settings.default_limit.
            context_vars: Initial variables of this call's DispatchContext.
            cancel_scope: Deadline/cancel flag checked before each handler.
                Defaults to a scope built from settings.call_timeout_seconds
                for top-level calls; nested calls inherit the enclosing scope.

        Raises:
            TypeError: If ``expected_type`` is not a supported type spec.
            ValueError: If ``limit`` is less than 1 or ``channel`` is empty.
        """
        channel = channel if channel is not None else self._settings.default_channel
        limit = limit if limit is not None else self._settings.default_limit
        if not isinstance(channel, str) or not channel:
            raise ValueError(f"channel must be a non-empty string, got {channel!r}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        normalize_type(expected_type)

        parent = _active_context.get()
        if parent is not None and parent.get_current_engine() is not self:
            parent = None
        if cancel_scope is None and parent is None and self._settings.call_timeout_seconds:
            cancel_scope = CancelScope(self._settings.call_timeout_seconds)
        context = DispatchContext(
            self,
            channel,
            variables=context_vars,
            parent=parent,
            cancel_scope=cancel_scope,
        )

        seed_type = type(seed)
        entries = self._registry.lookup_all(
            channel, type_chain(seed_type, self._settings.match_subclasses)
        )

        start_time = time.perf_counter()
        results: list[Any] = []
        failures: list[HandlerInvocationError] = []
        invoked = 0
        outcome = DiscoveryOutcome.COMPLETED

        logger.debug(
            "interlace.discovery.started",
            channel=channel,
            seed_type=type_name(seed_type),
            expected_type=repr(expected_type),
            limit=limit,
            depth=context.depth,
            handler_count=len(entries),
            context_vars=self._loggable_vars(context),
        )

        token = _active_context.set(context)
        try:
            for entry in entries:
                if len(results) >= limit:
                    break
                if context.cancelled:
                    outcome = DiscoveryOutcome.CANCELLED
                    break
                acceptor: ResultAcceptor[Any] = ResultAcceptor(
                    results, limit, expected_type, channel=channel, handler_name=entry.name
                )
                invoked += 1
                failure = self._invoke(entry, seed, acceptor, context)
                if failure is not None:
                    failures.append(failure)
        finally:
            _active_context.reset(token)

        if outcome is not DiscoveryOutcome.CANCELLED and len(results) >= limit:
            outcome = DiscoveryOutcome.LIMIT_REACHED

        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics = get_metrics()
        metrics.increment_counter(
            "interlace_discoveries_total", {"channel": channel, "outcome": outcome.value}
        )
        metrics.observe_histogram(
            "interlace_discovery_duration_seconds", duration_ms / 1000.0, {"channel": channel}
        )
        logger.debug(
            "interlace.discovery.completed",
            channel=channel,
            seed_type=type_name(seed_type),
            outcome=outcome.value,
            result_count=len(results),
            invoked=invoked,
            skipped=len(entries) - invoked,
            failures=len(failures),
            duration_ms=round(duration_ms, 2),
        )
        return DiscoveryResult(
            channel=channel,
            results=results,
            outcome=outcome,
            invoked=invoked,
            failures=failures,
            duration_ms=duration_ms,
        )

    def _invoke(
        self,
        entry: HandlerEntry,
        seed: object,
        acceptor: ResultAcceptor[Any],
        context: DispatchContext,
    ) -> HandlerInvocationError | None:
        channel = context.channel
        candidate_type = type_name(type(seed))
        metrics = get_metrics()
        metrics.increment_counter("interlace_handler_invocations_total", {"channel": channel})
        start_time = time.perf_counter()
        try:
            entry.invoke(seed, acceptor, context)
        except DiscoveryCancelledError as e:
            logger.info(
                "interlace.handler.cancelled",
                handler_name=entry.name,
                channel=channel,
                candidate_type=candidate_type,
            )
            return self._failure(entry, channel, candidate_type, e)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            metrics.increment_counter("interlace_handler_errors_total", {"channel": channel})
            logger.exception(
                "interlace.handler.error",
                handler_name=entry.name,
                channel=channel,
                candidate_type=candidate_type,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration_ms, 2),
            )
            return self._failure(entry, channel, candidate_type, e)
        finally:
            metrics.observe_histogram(
                "interlace_handler_duration_seconds",
                time.perf_counter() - start_time,
                {"channel": channel},
            )
        return None

    @staticmethod
    def _failure(
        entry: HandlerEntry, channel: str, candidate_type: str, cause: Exception
    ) -> HandlerInvocationError:
        error = HandlerInvocationError(
            handler_name=entry.name,
            channel=channel,
            candidate_type=candidate_type,
            reason=f"{type(cause).__name__}: {cause}",
        )
        error.__cause__ = cause
        return error

    @staticmethod
    def _loggable_vars(context: DispatchContext) -> dict[str, Any]:
        snapshot = context.snapshot()
        return snapshot if is_debug_mode() else sanitize_for_logging(snapshot)


def create_engine(
    *modules: object,
    settings: EngineSettings | None = None,
) -> DiscoveryEngine:
    """Create an engine over a fresh registry and register ``modules`` on it.

    This is the composition root for applications: build the engine once,
    then pass it to every consumer that needs to discover interactions.

    Example:
        >>> engine = create_engine(html_doc, sketch_doc, settings=EngineSettings.from_env())
        >>> len(engine.registry) > 0
        True
    """
    engine = DiscoveryEngine(ServiceRegistry(), settings)
    for module in modules:
        engine.register_module(module)
    return engine
