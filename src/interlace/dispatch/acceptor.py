"""Result acceptor handed to every handler invocation.

A ResultAcceptor is a bounded, type-filtering sink over the accumulator of
one discovery call. Handlers report candidates by calling
``accept_result``; values of the wrong type are dropped without error and
nothing is appended once the call's limit is reached.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from interlace.dispatch.matching import TypeSpec, normalize_type, type_name
from interlace.observability import get_logger, get_metrics

logger = get_logger(__name__)

T = TypeVar("T")


class ResultAcceptor(Generic[T]):
    """Sink a handler uses to emit zero or more candidate results.

    Several acceptors (one per handler invocation) share the same
    ``results`` list, so the limit applies to the whole discovery call.

    Example:
        >>> results: list[MenuItem] = []
        >>> acceptor = ResultAcceptor(results, limit=1, expected_type=MenuItem)
        >>> acceptor.accept_result("not a menu item")
        >>> acceptor.accept_result(MenuItem(label="open"))
        >>> acceptor.accept_result(MenuItem(label="delete"))
        >>> [item.label for item in results]
        ['open']
    """

    def __init__(
        self,
        results: list[T],
        limit: int,
        expected_type: TypeSpec,
        channel: str = "",
        handler_name: str = "",
    ) -> None:
        self._results = results
        self._limit = limit
        self._expected_type = expected_type
        self._classes = normalize_type(expected_type)
        self._channel = channel
        self._handler_name = handler_name
        self.accepted_count = 0

    @property
    def expected_type(self) -> TypeSpec:
        return self._expected_type

    @property
    def full(self) -> bool:
        """True once the shared accumulator holds ``limit`` results."""
        return len(self._results) >= self._limit

    def accept_result(self, value: Any) -> None:
        """Append ``value`` if there is room and it has the expected type."""
        if self.full:
            return
        if not isinstance(value, self._classes):
            logger.debug(
                "interlace.acceptor.discarded",
                channel=self._channel,
                handler_name=self._handler_name,
                value_type=type_name(type(value)),
            )
            get_metrics().increment_counter(
                "interlace_results_discarded_total", {"channel": self._channel}
            )
            return
        self._results.append(value)
        self.accepted_count += 1
        get_metrics().increment_counter(
            "interlace_results_accepted_total", {"channel": self._channel}
        )
