"""Tests for ResultAcceptor."""

from __future__ import annotations

from typing import Any

import pytest

from interlace.dispatch import ResultAcceptor
from interlace.models import MenuItem, MessageForward
from interlace.observability import MetricsCollector


class TestResultAcceptor:
    """Tests for the bounded, type-filtering result sink."""

    def test_accepts_expected_type(self) -> None:
        results: list[MenuItem] = []
        acceptor: ResultAcceptor[MenuItem] = ResultAcceptor(results, 5, MenuItem)

        acceptor.accept_result(MenuItem(label="open"))

        assert results == [MenuItem(label="open")]
        assert acceptor.accepted_count == 1

    def test_discards_wrong_type_silently(self) -> None:
        """Test that a value of the wrong type is dropped without raising."""
        results: list[MenuItem] = []
        acceptor: ResultAcceptor[MenuItem] = ResultAcceptor(results, 5, MenuItem)

        acceptor.accept_result("open")
        acceptor.accept_result(None)
        acceptor.accept_result(MessageForward(message_type="x"))

        assert results == []
        assert acceptor.accepted_count == 0

    def test_stops_at_limit(self) -> None:
        results: list[Any] = []
        acceptor: ResultAcceptor[Any] = ResultAcceptor(results, 2, MenuItem)

        for label in ("a", "b", "c"):
            acceptor.accept_result(MenuItem(label=label))

        assert [item.label for item in results] == ["a", "b"]
        assert acceptor.full

    def test_limit_is_shared_between_acceptors(self) -> None:
        """Test that acceptors over one result list share its limit."""
        results: list[Any] = []
        first: ResultAcceptor[Any] = ResultAcceptor(results, 2, MenuItem)
        second: ResultAcceptor[Any] = ResultAcceptor(results, 2, MenuItem)

        first.accept_result(MenuItem(label="a"))
        second.accept_result(MenuItem(label="b"))
        second.accept_result(MenuItem(label="c"))

        assert [item.label for item in results] == ["a", "b"]
        assert first.full and second.full
        assert second.accepted_count == 1

    def test_union_expected_type(self) -> None:
        results: list[Any] = []
        acceptor: ResultAcceptor[Any] = ResultAcceptor(results, 5, MenuItem | MessageForward)

        acceptor.accept_result(MenuItem(label="a"))
        acceptor.accept_result(MessageForward(message_type="m"))
        acceptor.accept_result(3)

        assert len(results) == 2
        assert acceptor.expected_type == MenuItem | MessageForward

    def test_any_accepts_everything(self) -> None:
        """Test that Any admits values of every type."""
        results: list[Any] = []
        acceptor: ResultAcceptor[Any] = ResultAcceptor(results, 5, Any)

        acceptor.accept_result(1)
        acceptor.accept_result("two")

        assert results == [1, "two"]

    def test_invalid_expected_type(self) -> None:
        with pytest.raises(TypeError):
            ResultAcceptor([], 1, "MenuItem")

    def test_metrics(self, metrics: MetricsCollector) -> None:
        """Test that accepted and discarded values are counted per channel."""
        acceptor: ResultAcceptor[Any] = ResultAcceptor([], 5, MenuItem, channel="/menu")

        acceptor.accept_result(MenuItem(label="a"))
        acceptor.accept_result("b")

        assert metrics.get_counter("interlace_results_accepted_total", {"channel": "/menu"}) == 1.0
        assert metrics.get_counter("interlace_results_discarded_total", {"channel": "/menu"}) == 1.0
