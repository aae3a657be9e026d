"""Tests for type matching used by the registry, the acceptor and adapters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Optional, Protocol, Union, runtime_checkable

import pytest

from interlace.dispatch.acceptor import ResultAcceptor
from interlace.dispatch.matching import (
    accepts_instances_of,
    first_of_type,
    matches,
    normalize_type,
    type_chain,
    type_name,
)
from interlace.models import MenuItem, MessageForward
from tests.factories import Click, DoubleClick


@runtime_checkable
class Labelled(Protocol):
    label: str


class NotCheckable(Protocol):
    label: str


class TestNormalizeType:
    """Tests for normalize_type."""

    def test_class_is_wrapped_in_tuple(self) -> None:
        assert normalize_type(MenuItem) == (MenuItem,)

    def test_any_matches_object(self) -> None:
        assert normalize_type(Any) == (object,)

    def test_pep604_union_is_flattened(self) -> None:
        """Test that X | Y becomes a flat tuple of classes."""
        assert normalize_type(MenuItem | MessageForward) == (MenuItem, MessageForward)

    def test_typing_union_and_optional(self) -> None:
        """Test that Union and Optional flatten like the | form."""
        assert normalize_type(Union[MenuItem, str]) == (MenuItem, str)
        assert normalize_type(Optional[str]) == (str, type(None))

    def test_tuple_of_classes(self) -> None:
        assert normalize_type((MenuItem, (str, int))) == (MenuItem, str, int)

    def test_generic_matches_on_origin(self) -> None:
        """Test that list[int] matches on list alone."""
        assert normalize_type(list[str]) == (list,)
        assert normalize_type(ResultAcceptor[Any]) == (ResultAcceptor,)

    def test_rejects_instances(self) -> None:
        """Test that an instance given as a type spec raises TypeError."""
        with pytest.raises(TypeError) as exc_info:
            normalize_type("MenuItem")
        assert "Expected a class" in str(exc_info.value)

    def test_rejects_non_runtime_protocol(self) -> None:
        """Test that a Protocol without @runtime_checkable is refused."""
        with pytest.raises(TypeError) as exc_info:
            normalize_type(NotCheckable)
        assert "runtime_checkable" in str(exc_info.value)


class TestMatches:
    """Tests for matches."""

    def test_exact_type(self) -> None:
        assert matches(MenuItem(label="open"), MenuItem)

    def test_subclass_instance_is_assignable(self) -> None:
        """Test that a subclass instance satisfies its base class."""
        assert matches(DoubleClick(), Click)

    def test_base_instance_is_not_assignable_to_subclass(self) -> None:
        """Test that a base instance does not satisfy a subclass."""
        assert not matches(Click(), DoubleClick)

    def test_union_accepts_either(self) -> None:
        spec = MenuItem | MessageForward
        assert matches(MessageForward(message_type="x"), spec)
        assert not matches("text", spec)

    def test_runtime_protocol(self) -> None:
        """Test that runtime-checkable protocols match structurally."""
        assert matches(MenuItem(label="open"), Labelled)
        assert not matches(Click(), Labelled)

    def test_callable_abc(self) -> None:
        assert matches(lambda: None, Callable)
        assert not matches(42, Callable)


class TestAcceptsInstancesOf:
    """Tests for accepts_instances_of (handler annotation checks)."""

    def test_same_class(self) -> None:
        assert accepts_instances_of(ResultAcceptor, ResultAcceptor)

    def test_base_class_annotation(self) -> None:
        assert accepts_instances_of(object, ResultAcceptor)

    def test_unrelated_annotation(self) -> None:
        assert not accepts_instances_of(str, ResultAcceptor)

    def test_unsupported_annotation_is_permissive(self) -> None:
        """Test that annotations the matcher cannot read accept everything."""
        assert accepts_instances_of("ResultAcceptor", ResultAcceptor)


class TestTypeChain:
    """Tests for type_chain."""

    def test_exact_only(self) -> None:
        assert type_chain(DoubleClick, include_bases=False) == (DoubleClick,)

    def test_with_bases_follows_mro(self) -> None:
        """Test that the type chain follows the MRO down to object."""
        chain = type_chain(DoubleClick, include_bases=True)
        assert chain[:2] == (DoubleClick, Click)
        assert chain[-1] is object


class TestTypeName:
    """Tests for type_name."""

    def test_builtin_has_no_module_prefix(self) -> None:
        assert type_name(int) == "int"

    def test_user_class_is_qualified(self) -> None:
        """Test that user classes are named module.qualname."""
        assert type_name(MenuItem) == "interlace.models.interactions.MenuItem"


class TestFirstOfType:
    """Tests for first_of_type."""

    def test_first_match_in_sequence(self) -> None:
        assert first_of_type([1, "a", "b"], str) == "a"

    def test_mapping_values_are_searched(self) -> None:
        """Test that first_of_type looks at mapping values, not keys."""
        params = {"count": 3, "choices": [MenuItem(label="open")], "name": "x"}
        assert first_of_type(params, list) == [MenuItem(label="open")]

    def test_none_when_absent(self) -> None:
        assert first_of_type([1, 2], str) is None

    def test_subclass_values_match(self) -> None:
        """Test that first_of_type accepts subclass instances."""
        double = DoubleClick()
        assert first_of_type(["x", double], Click) is double
