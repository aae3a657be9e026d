"""Type matching for handler keys, result filtering and typed lookups.

A "type spec" is what callers hand the engine as an expected result type
or what a handler declares as its input type. Supported forms:

- a class (``MenuItem``), including runtime-checkable Protocols
- a tuple of classes (``(MenuItem, MessageForward)``)
- a union (``MenuItem | MessageForward`` or ``typing.Union[...]``)
- ``typing.Any`` or ``object``, which match everything
- a parameterized generic (``list[str]``), matched on its origin only

Example:
    >>> matches(MenuItem(label="open"), MenuItem | MessageForward)
    True
    >>> first_of_type({"a": 1, "b": "two"}, str)
    'two'
"""

from __future__ import annotations

import types
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar, Union, get_args, get_origin, overload

T = TypeVar("T")

TypeSpec = Any


def normalize_type(spec: TypeSpec) -> tuple[type, ...]:
    """Flatten a type spec into a tuple of classes usable with ``isinstance``.

    Raises:
        TypeError: If ``spec`` is not a supported type spec, or is a Protocol
            that is not ``@runtime_checkable``
    """
    if spec is Any:
        return (object,)
    if spec is None:
        return (type(None),)
    if isinstance(spec, tuple):
        flattened: list[type] = []
        for item in spec:
            flattened.extend(normalize_type(item))
        return tuple(flattened)

    origin = get_origin(spec)
    if origin is Union or origin is types.UnionType:
        return normalize_type(get_args(spec))
    if origin is not None:
        if isinstance(origin, type):
            return (origin,)
        raise TypeError(f"Unsupported type spec: {spec!r}")

    if not isinstance(spec, type):
        raise TypeError(f"Expected a class, tuple of classes or union; got {spec!r}")
    if getattr(spec, "_is_protocol", False) and not getattr(spec, "_is_runtime_protocol", False):
        raise TypeError(f"Protocol {spec.__qualname__} must be @runtime_checkable to be matched")
    return (spec,)


def matches(value: object, spec: TypeSpec) -> bool:
    """Return True if ``value``'s runtime type satisfies ``spec``."""
    return isinstance(value, normalize_type(spec))


def accepts_instances_of(annotation: TypeSpec, provided: type) -> bool:
    """Return True if a parameter annotated ``annotation`` can receive a ``provided``.

    Unsupported annotations (strings that could not be resolved, Literal,
    etc.) are treated as accepting anything, since they carry no class the
    check could use.
    """
    try:
        classes = normalize_type(annotation)
    except TypeError:
        return True
    return any(issubclass(provided, cls) for cls in classes)


def type_chain(runtime_type: type, include_bases: bool) -> tuple[type, ...]:
    """Types whose handlers apply to an instance of ``runtime_type``, most specific first."""
    if not include_bases:
        return (runtime_type,)
    return runtime_type.__mro__


def type_name(cls: type) -> str:
    """Qualified class name for logs and diagnostics."""
    module = getattr(cls, "__module__", "")
    qualname = getattr(cls, "__qualname__", repr(cls))
    if module in ("builtins", ""):
        return qualname
    return f"{module}.{qualname}"


@overload
def first_of_type(values: Mapping[Any, object], expected: type[T]) -> T | None: ...


@overload
def first_of_type(values: Iterable[object], expected: type[T]) -> T | None: ...


def first_of_type(values: Iterable[object] | Mapping[Any, object], expected: Any) -> Any:
    """Return the first element (or mapping value) that satisfies ``expected``.

    Workflow adapters receive loosely typed parameter maps and use this to
    pick out, say, the first ``SoftwareObject`` among them.
    """
    classes = normalize_type(expected)
    items = values.values() if isinstance(values, Mapping) else values
    for item in items:
        if isinstance(item, classes):
            return item
    return None
