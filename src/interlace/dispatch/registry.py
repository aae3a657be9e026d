"""Service registry for interaction handlers.

Handlers are indexed by HandlerKey, the pair (channel, declared input
type). Every key maps to an ordered list of HandlerEntry; registration
order is preserved and reproduced exactly at dispatch time. Duplicate
registrations are kept.

A handler follows one convention: it takes three positional parameters,
the candidate value, a ResultAcceptor and a DispatchContext, and returns
nothing. Candidates that break the convention are rejected with a logged
diagnostic; rejection never raises out of ``register`` or
``register_module``.

Thread Safety:
    Registration and lookup are guarded by an internal RLock. ``lookup``
    returns an immutable snapshot, so no lock is held while handlers run
    and handlers may re-enter the engine freely.

Example:
    >>> registry = ServiceRegistry()
    >>> def open_item(click, acceptor, context):
    ...     acceptor.accept_result(MenuItem(label="open"))
    >>> registry.register(None, "/menu", Click, open_item)
    True
    >>> [entry.name for entry in registry.lookup("/menu", Click)]
    ['open_item']
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from threading import RLock
from typing import Any, Protocol, TypeVar, get_type_hints, overload

from interlace.dispatch.acceptor import ResultAcceptor
from interlace.dispatch.context import DispatchContext
from interlace.dispatch.matching import accepts_instances_of, type_name
from interlace.errors import RegistrationShapeError
from interlace.models.constants import DEFAULT_CHANNEL
from interlace.observability import get_logger, get_metrics

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Attribute the @service decorator sets on marked functions
SERVICE_MARKER_ATTR = "__interlace_service__"


class Handler(Protocol):
    """Protocol for interaction handlers."""

    def __call__(
        self, value: Any, acceptor: ResultAcceptor[Any], context: DispatchContext
    ) -> None: ...


@dataclass(frozen=True)
class HandlerKey:
    """Composite registry key; both fields take part in equality and hashing."""

    channel: str
    input_type: type

    def __str__(self) -> str:
        return f"{self.channel} [{type_name(self.input_type)}]"


@dataclass(frozen=True)
class HandlerEntry:
    """A registered handler together with the instance that owns it.

    Attributes:
        owner: Module instance the handler belongs to, None for free functions
        handler: The callable invoked with (value, acceptor, context)
        name: Display name used in logs ("SketchDocument.navigate_to")
    """

    owner: object | None
    handler: Handler
    name: str

    def invoke(self, value: Any, acceptor: ResultAcceptor[Any], context: DispatchContext) -> None:
        self.handler(value, acceptor, context)


@dataclass(frozen=True)
class ServiceMarker:
    """What ``@service`` records on a method for ``register_module``."""

    channel: str
    input_type: type | None


@overload
def service(fn: F) -> F: ...


@overload
def service(
    fn: None = None, *, channel: str = DEFAULT_CHANNEL, input_type: type | None = None
) -> Callable[[F], F]: ...


def service(
    fn: Any = None, *, channel: str = DEFAULT_CHANNEL, input_type: type | None = None
) -> Any:
    """Mark a method as a handler for ``ServiceRegistry.register_module``.

    ``input_type`` names the candidate type explicitly; when omitted, the
    annotation of the method's first parameter is used.

    Example:
        >>> class SketchDocument:
        ...     @service(channel="navigateTo", input_type=SoftwareObject)
        ...     def navigate_to(self, obj, acceptor, context): ...
        ...
        ...     @service
        ...     def on_uri(self, uri: SemanticUri, acceptor, context): ...
    """

    def decorate(func: F) -> F:
        setattr(func, SERVICE_MARKER_ATTR, ServiceMarker(channel=channel, input_type=input_type))
        return func

    if fn is not None:
        return decorate(fn)
    return decorate


def _owner_name(owner: object | None) -> str:
    return type(owner).__qualname__ if owner is not None else "<function>"


def _callable_name(handler: object) -> str:
    name = getattr(handler, "__name__", None)
    if name is None:
        name = type(handler).__qualname__
    return str(name)


def _type_hints(handler: object) -> dict[str, Any]:
    target = handler
    if not (inspect.isfunction(handler) or inspect.ismethod(handler)):
        target = getattr(type(handler), "__call__", handler)
    try:
        return get_type_hints(target)
    except Exception:
        # Unresolvable forward references leave the annotations unchecked
        return {}


def validate_handler(handler: object, owner: object | None = None) -> inspect.Parameter:
    """Check that ``handler`` follows the (value, acceptor, context) convention.

    Bound methods and callable instances are inspected without ``self``.
    Annotations on the acceptor and context parameters are optional, but
    when present they must admit a ResultAcceptor and a DispatchContext.

    Args:
        handler: The candidate callable.
        owner: The owning instance, used only for diagnostics.

    Returns:
        The first (value) parameter, annotation resolved where possible.

    Raises:
        RegistrationShapeError: Naming the violated rule.

    Example:
        >>> def bad(value, acceptor): ...
        >>> validate_handler(bad)
        Traceback (most recent call last):
            ...
        interlace.errors.RegistrationShapeError: <function>.bad is not a valid handler: ...
    """
    owner_name = _owner_name(owner)
    handler_name = _callable_name(handler)

    if not callable(handler):
        raise RegistrationShapeError(owner_name, handler_name, "handler must be callable")
    try:
        sig = inspect.signature(handler)
    except (ValueError, TypeError):
        raise RegistrationShapeError(
            owner_name, handler_name, "handler signature could not be inspected"
        ) from None

    positional = [
        p
        for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) != 3:
        raise RegistrationShapeError(
            owner_name,
            handler_name,
            "expected 3 positional parameters (value, acceptor, context), "
            f"got {len(positional)}: {[p.name for p in positional]}",
        )
    for param in sig.parameters.values():
        if (
            param.kind is inspect.Parameter.KEYWORD_ONLY
            and param.default is inspect.Parameter.empty
        ):
            raise RegistrationShapeError(
                owner_name,
                handler_name,
                f"keyword-only parameter '{param.name}' must have a default",
            )

    hints = _type_hints(handler)
    value_param, acceptor_param, context_param = positional
    acceptor_hint = hints.get(acceptor_param.name)
    if acceptor_hint is not None and not accepts_instances_of(acceptor_hint, ResultAcceptor):
        raise RegistrationShapeError(
            owner_name,
            handler_name,
            f"2nd parameter '{acceptor_param.name}' must accept a ResultAcceptor",
        )
    context_hint = hints.get(context_param.name)
    if context_hint is not None and not accepts_instances_of(context_hint, DispatchContext):
        raise RegistrationShapeError(
            owner_name,
            handler_name,
            f"3rd parameter '{context_param.name}' must accept a DispatchContext",
        )

    value_hint = hints.get(value_param.name, inspect.Parameter.empty)
    return value_param.replace(annotation=value_hint)


class ServiceRegistry:
    """Ordered, append-only registry of interaction handlers.

    Attributes:
        _handlers: HandlerKey -> handlers in registration order
        _lock: Reentrant lock guarding ``_handlers``
    """

    def __init__(self) -> None:
        self._handlers: dict[HandlerKey, list[HandlerEntry]] = {}
        self._lock = RLock()

    def register(
        self,
        owner: object | None,
        channel: str,
        input_type: type,
        handler: Handler,
        name: str | None = None,
    ) -> bool:
        """Register ``handler`` for candidates of exactly ``input_type`` on ``channel``.

        Args:
            owner: Module instance the handler belongs to (None for functions).
            channel: Channel name; must be a non-empty string.
            input_type: Class of the candidates this handler processes.
            handler: Callable taking (value, acceptor, context).
            name: Display name; defaults to "Owner.function".

        Returns:
            True if the handler was registered, False if it was rejected.
        """
        try:
            self._check_key(owner, channel, input_type, handler)
            validate_handler(handler, owner)
        except RegistrationShapeError as e:
            self._log_rejection(e, channel)
            return False

        entry = HandlerEntry(
            owner=owner,
            handler=handler,
            name=name or self._default_name(owner, handler),
        )
        self._add(HandlerKey(channel, input_type), entry)
        return True

    def register_module(self, instance: object) -> int:
        """Register every public ``@service`` method of ``instance``.

        Methods are scanned in definition order, base classes first. A
        malformed method is logged and skipped; scanning continues.

        Returns:
            Number of handlers registered.
        """
        registered = 0
        for attr_name, marker in self._service_markers(type(instance)):
            owner_name = type(instance).__qualname__
            try:
                if attr_name.startswith("_"):
                    raise RegistrationShapeError(
                        owner_name, attr_name, "handler methods must be public"
                    )
                bound = getattr(instance, attr_name)
                value_param = validate_handler(bound, instance)
                input_type = marker.input_type
                if input_type is None:
                    annotation = value_param.annotation
                    if annotation is inspect.Parameter.empty or not isinstance(annotation, type):
                        raise RegistrationShapeError(
                            owner_name,
                            attr_name,
                            "input type is neither declared with @service(input_type=...) "
                            f"nor a class annotation on '{value_param.name}'",
                        )
                    input_type = annotation
                self._check_key(instance, marker.channel, input_type, bound)
            except RegistrationShapeError as e:
                self._log_rejection(e, marker.channel)
                continue

            entry = HandlerEntry(owner=instance, handler=bound, name=f"{owner_name}.{attr_name}")
            self._add(HandlerKey(marker.channel, input_type), entry)
            registered += 1

        logger.debug(
            "interlace.registry.module_registered",
            owner=type(instance).__qualname__,
            handler_count=registered,
        )
        return registered

    def lookup(self, channel: str, runtime_type: type) -> tuple[HandlerEntry, ...]:
        """Handlers for exactly (channel, runtime_type), in registration order.

        A missing key yields an empty tuple.
        """
        key = HandlerKey(channel, runtime_type)
        with self._lock:
            return tuple(self._handlers.get(key, ()))

    def lookup_all(self, channel: str, runtime_types: Iterable[type]) -> tuple[HandlerEntry, ...]:
        """Concatenated ``lookup`` results for several types, in the order given."""
        entries: list[HandlerEntry] = []
        with self._lock:
            for runtime_type in runtime_types:
                entries.extend(self._handlers.get(HandlerKey(channel, runtime_type), ()))
        return tuple(entries)

    def has_handlers(self, channel: str, input_type: type) -> bool:
        with self._lock:
            return HandlerKey(channel, input_type) in self._handlers

    def list_keys(self) -> list[HandlerKey]:
        """Registered keys in order of first registration."""
        with self._lock:
            return list(self._handlers.keys())

    def describe(self) -> list[tuple[HandlerKey, list[str]]]:
        """Every key with its handler names, for listings and diagnostics."""
        with self._lock:
            return [(key, [e.name for e in entries]) for key, entries in self._handlers.items()]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._handlers.values())

    def _add(self, key: HandlerKey, entry: HandlerEntry) -> None:
        with self._lock:
            entries = self._handlers.get(key)
            if entries is None:
                entries = []
                self._handlers[key] = entries
            entries.append(entry)
            position = len(entries)
        logger.debug(
            "interlace.registry.registered",
            channel=key.channel,
            input_type=type_name(key.input_type),
            handler_name=entry.name,
            position=position,
        )
        get_metrics().increment_counter("interlace_registrations_total", {"channel": key.channel})

    @staticmethod
    def _check_key(
        owner: object | None, channel: object, input_type: object, handler: object
    ) -> None:
        if not isinstance(channel, str) or not channel:
            raise RegistrationShapeError(
                _owner_name(owner), _callable_name(handler), "channel must be a non-empty string"
            )
        if not isinstance(input_type, type):
            raise RegistrationShapeError(
                _owner_name(owner),
                _callable_name(handler),
                f"input type must be a class, got {input_type!r}",
            )

    @staticmethod
    def _default_name(owner: object | None, handler: object) -> str:
        if owner is None:
            return _callable_name(handler)
        return f"{_owner_name(owner)}.{_callable_name(handler)}"

    @staticmethod
    def _service_markers(cls: type) -> list[tuple[str, ServiceMarker]]:
        # Definition order, base classes first; overrides keep the base position
        ordered: dict[str, object] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, attr in vars(klass).items():
                ordered[attr_name] = attr
        markers: list[tuple[str, ServiceMarker]] = []
        for attr_name, attr in ordered.items():
            func = getattr(attr, "__func__", attr)
            marker = getattr(func, SERVICE_MARKER_ATTR, None)
            if isinstance(marker, ServiceMarker):
                markers.append((attr_name, marker))
        return markers

    @staticmethod
    def _log_rejection(error: RegistrationShapeError, channel: object) -> None:
        logger.error(
            "interlace.registry.rejected",
            owner=error.owner,
            handler_name=error.handler_name,
            rule=error.rule,
            channel=channel,
        )
        get_metrics().increment_counter("interlace_registrations_rejected_total")
