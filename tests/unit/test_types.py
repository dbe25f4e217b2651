"""Unit tests for treeclassify.core.types: annotation analysis and
object construction.
"""
from __future__ import annotations

import collections
from collections.abc import Mapping, MutableSequence, Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Generic, Optional, TypeVar, Union

import pytest

from treeclassify import Deferred, Node
from treeclassify.core.errors import ConfigurationError, ConstructionError
from treeclassify.core.types import (
    Char,
    TypeKind,
    analyze,
    construct,
    full_name,
    is_generic,
    is_nested,
    short_name,
    store_name,
)

T = TypeVar("T")


class Colour(Enum):
    RED = "r"


class Plain:
    pass


class Box(Generic[T]):
    pass


class Scores(dict[str, int]):
    pass


class Tags(set[str]):
    pass


class Broken:
    def __init__(self) -> None:
        raise RuntimeError("cannot build")


class Factory:
    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def __classify_default__(cls) -> "Factory":
        return cls(3)


class TestAnalyzeScalars:
    @pytest.mark.parametrize("cls", [bool, int, float, Decimal, str, datetime, date])
    def test_leaf_types(self, cls: type) -> None:
        ref = analyze(cls)
        assert ref.kind is TypeKind.LEAF
        assert ref.cls is cls
        assert ref.is_leaf

    def test_enum(self) -> None:
        ref = analyze(Colour)
        assert ref.kind is TypeKind.ENUM
        assert ref.is_leaf

    def test_char(self) -> None:
        assert analyze(Char).kind is TypeKind.CHAR

    def test_node(self) -> None:
        assert analyze(Node).kind is TypeKind.NODE

    @pytest.mark.parametrize("annotation", [Any, object, None, Union[int, str], int | str | None])
    def test_untyped(self, annotation: Any) -> None:
        assert analyze(annotation).kind is TypeKind.ANY

    def test_object(self) -> None:
        ref = analyze(Plain)
        assert ref.kind is TypeKind.OBJECT
        assert ref.cls is Plain
        assert not ref.is_leaf
        assert not ref.is_container

    def test_optional_unwraps(self) -> None:
        assert analyze(Optional[int]) == analyze(int)
        assert analyze(Plain | None) == analyze(Plain)

    def test_annotated_unwraps(self) -> None:
        assert analyze(Annotated[int, "meta"]) == analyze(int)

    def test_parametrized_user_class(self) -> None:
        ref = analyze(Box[int])
        assert ref.kind is TypeKind.OBJECT
        assert ref.cls is Box

    @pytest.mark.parametrize("annotation", ["int", 3, len])
    def test_non_types_are_rejected(self, annotation: Any) -> None:
        with pytest.raises(ConfigurationError):
            analyze(annotation)

    def test_results_are_cached(self) -> None:
        assert analyze(list[int]) is analyze(list[int])


class TestAnalyzeContainers:
    def test_list(self) -> None:
        ref = analyze(list[int])
        assert ref.kind is TypeKind.COLLECTION
        assert ref.cls is list
        assert ref.element is int
        assert ref.is_container

    def test_bare_list_has_untyped_elements(self) -> None:
        assert analyze(list).element is Any

    @pytest.mark.parametrize(
        ("annotation", "cls"),
        [
            (Sequence[int], list),
            (MutableSequence[int], list),
            (set[int], set),
            (frozenset[int], frozenset),
            (collections.deque[int], collections.deque),
        ],
    )
    def test_collection_classes(self, annotation: Any, cls: type) -> None:
        ref = analyze(annotation)
        assert ref.kind is TypeKind.COLLECTION
        assert ref.cls is cls

    def test_array(self) -> None:
        ref = analyze(tuple[str, ...])
        assert ref.kind is TypeKind.ARRAY
        assert ref.element is str

    def test_fixed_tuple(self) -> None:
        ref = analyze(tuple[int, str])
        assert ref.kind is TypeKind.TUPLE
        assert ref.elements == (int, str)

    def test_empty_tuple(self) -> None:
        assert analyze(tuple[()]).elements == ()

    def test_dict(self) -> None:
        ref = analyze(dict[str, float])
        assert ref.kind is TypeKind.DICT
        assert ref.key is str
        assert ref.element is float

    def test_abstract_mapping_decodes_as_dict(self) -> None:
        assert analyze(Mapping[str, int]).cls is dict

    def test_dict_subclass_keeps_its_arguments(self) -> None:
        ref = analyze(Scores)
        assert ref.kind is TypeKind.DICT
        assert ref.cls is Scores
        assert (ref.key, ref.element) == (str, int)

    def test_set_subclass_keeps_its_argument(self) -> None:
        ref = analyze(Tags)
        assert ref.cls is Tags
        assert ref.element is str

    def test_deferred(self) -> None:
        ref = analyze(Optional[Deferred[Plain]])
        assert ref.kind is TypeKind.DEFERRED
        assert ref.inner is Plain


class TestNames:
    def test_short_and_full_names(self) -> None:
        assert short_name(Plain) == "Plain"
        assert full_name(Plain) == f"{Plain.__module__}:Plain"

    def test_store_name(self) -> None:
        assert store_name(Plain) == "Plain"

    def test_is_generic(self) -> None:
        assert is_generic(Box)
        assert not is_generic(Plain)

    def test_is_nested(self) -> None:
        class Local:
            pass

        assert is_nested(Local)
        assert not is_nested(Plain)


class TestConstruct:
    def test_no_argument_constructor(self) -> None:
        assert isinstance(construct(Plain), Plain)

    def test_default_factory(self) -> None:
        assert construct(Factory).value == 3

    def test_failure_is_wrapped(self) -> None:
        with pytest.raises(ConstructionError) as info:
            construct(Broken)
        assert info.value.type_name == f"{Broken.__module__}:Broken"
        assert isinstance(info.value.cause, RuntimeError)
        assert "cannot build" in str(info.value)
