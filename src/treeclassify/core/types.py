"""Analysis of Python type annotations for (de)serialization.

``analyze`` turns a declared annotation such as ``int``,
``list[Book]``, ``dict[str, float] | None`` or ``Deferred[Chapter]`` into
a ``TypeRef`` that tells the engine which codec handles it and which
element, key or inner types it must recurse into.  Results are cached by
annotation.
"""
from __future__ import annotations

import collections
import collections.abc
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, auto
from typing import Any, NewType

from treeclassify.core.deferred import Deferred
from treeclassify.core.errors import ConfigurationError, ConstructionError
from treeclassify.tree.nodes import Node

Char = NewType("Char", str)
"""Declared type of a single-character string."""

# bool must precede int, datetime must precede date.
LEAF_TYPES: tuple[type, ...] = (bool, int, float, Decimal, str, datetime, date)

INTEGER_KEY_TYPES: tuple[type, ...] = (int,)


class TypeKind(Enum):
    """The codec family responsible for a declared type."""

    ANY = auto()
    NODE = auto()
    LEAF = auto()
    ENUM = auto()
    CHAR = auto()
    ARRAY = auto()
    TUPLE = auto()
    COLLECTION = auto()
    DICT = auto()
    DEFERRED = auto()
    OBJECT = auto()


@dataclass(frozen=True)
class TypeRef:
    """The analyzed form of a declared type.

    Parameters
    ----------
    kind:
        Which codec handles values of this type.
    cls:
        The concrete class: the leaf type, enum, object class, or the
        container class used to build decoded collections.
    element:
        Element type of arrays and collections, value type of dicts.
    key:
        Key type of dicts.
    elements:
        Per-position element types of fixed-shape tuples.
    inner:
        The referenced type of ``Deferred[T]``.
    """

    kind: TypeKind
    cls: Any = None
    element: Any = Any
    key: Any = None
    elements: tuple[Any, ...] = ()
    inner: Any = None

    @property
    def is_leaf(self) -> bool:
        return self.kind in (TypeKind.LEAF, TypeKind.ENUM, TypeKind.CHAR)

    @property
    def is_container(self) -> bool:
        return self.kind in (TypeKind.ARRAY, TypeKind.TUPLE, TypeKind.COLLECTION, TypeKind.DICT)


_SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.deque: collections.deque,
    set: set,
    frozenset: frozenset,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}

_MAPPING_ORIGINS: dict[Any, type] = {
    dict: dict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.OrderedDict: collections.OrderedDict,
}

_cache: dict[Any, TypeRef] = {}


def analyze(annotation: Any) -> TypeRef:
    """Return the ``TypeRef`` describing ``annotation``.

    ``Optional[T]`` and ``T | None`` analyze as ``T``: nullability is
    handled uniformly by the null-marker before any codec runs.

    Raises
    ------
    ConfigurationError
        If the annotation is not a type the engine can classify.
    """
    try:
        return _cache[annotation]
    except KeyError:
        pass
    except TypeError:
        return _analyze(annotation)
    ref = _analyze(annotation)
    _cache[annotation] = ref
    return ref


def _analyze(annotation: Any) -> TypeRef:
    if annotation is Any or annotation is object or annotation is None:
        return TypeRef(TypeKind.ANY)
    if annotation is Char:
        return TypeRef(TypeKind.CHAR, cls=Char)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Union or origin is types.UnionType:
        inner = [a for a in args if a is not type(None)]
        if len(inner) == 1:
            return analyze(inner[0])
        return TypeRef(TypeKind.ANY)
    if origin is typing.Annotated:
        return analyze(args[0])

    if origin is None:
        if not isinstance(annotation, type):
            raise ConfigurationError(f"{annotation!r} is not a type that can be classified")
        return _analyze_class(annotation)

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeRef(TypeKind.ARRAY, cls=tuple, element=args[0])
        if args == ((),):
            return TypeRef(TypeKind.TUPLE, cls=tuple, elements=())
        return TypeRef(TypeKind.TUPLE, cls=tuple, elements=args)
    if origin in _MAPPING_ORIGINS:
        key, value = args if args else (Any, Any)
        return TypeRef(TypeKind.DICT, cls=_MAPPING_ORIGINS[origin], key=key, element=value)
    if origin in _SEQUENCE_ORIGINS:
        element = args[0] if args else Any
        return TypeRef(TypeKind.COLLECTION, cls=_SEQUENCE_ORIGINS[origin], element=element)
    if origin is Deferred:
        return TypeRef(TypeKind.DEFERRED, cls=Deferred, inner=args[0] if args else Any)
    if isinstance(origin, type):
        # A parametrized user class, e.g. Box[int]: classified by its origin.
        return _analyze_class(origin)
    raise ConfigurationError(f"{annotation!r} is not a type that can be classified")


def _analyze_class(cls: type) -> TypeRef:
    if cls is Node:
        return TypeRef(TypeKind.NODE, cls=Node)
    if issubclass(cls, Enum):
        return TypeRef(TypeKind.ENUM, cls=cls)
    if cls in LEAF_TYPES:
        return TypeRef(TypeKind.LEAF, cls=cls)
    if cls is tuple:
        return TypeRef(TypeKind.ARRAY, cls=tuple)
    if cls is Deferred:
        return TypeRef(TypeKind.DEFERRED, cls=Deferred, inner=Any)
    if issubclass(cls, collections.abc.Mapping):
        key, value = _generic_base_args(cls, collections.abc.Mapping, 2)
        return TypeRef(TypeKind.DICT, cls=_MAPPING_ORIGINS.get(cls, cls), key=key, element=value)
    if issubclass(cls, (list, set, frozenset, collections.deque)) or cls in _SEQUENCE_ORIGINS:
        (element,) = _generic_base_args(cls, collections.abc.Iterable, 1)
        return TypeRef(TypeKind.COLLECTION, cls=_SEQUENCE_ORIGINS.get(cls, cls), element=element)
    return TypeRef(TypeKind.OBJECT, cls=cls)


def _generic_base_args(cls: type, family: type, count: int) -> tuple[Any, ...]:
    """Return the type arguments a container subclass passes to its base.

    For ``class Names(list[str])`` this is ``(str,)``; bare containers
    yield ``Any`` for every argument.
    """
    for base in getattr(cls, "__orig_bases__", ()):
        origin = typing.get_origin(base)
        args = typing.get_args(base)
        if isinstance(origin, type) and issubclass(origin, family) and len(args) == count:
            return args
    return (Any,) * count


# ---------------------------------------------------------------------------
# Names and construction
# ---------------------------------------------------------------------------


def short_name(cls: type) -> str:
    """Return the discriminator short name of ``cls``."""
    return cls.__name__


def full_name(cls: type) -> str:
    """Return the import path of ``cls`` as ``module:qualname``."""
    return f"{cls.__module__}:{cls.__qualname__}"


def store_name(annotation: Any) -> str:
    """Return the name under which values of ``annotation`` are stored."""
    return getattr(annotation, "__name__", None) or str(annotation)


def is_generic(cls: type) -> bool:
    """Return True if ``cls`` declares unbound type parameters."""
    return bool(getattr(cls, "__parameters__", ()))


def is_nested(cls: type) -> bool:
    """Return True if ``cls`` is defined inside a class or function."""
    return "." in cls.__qualname__


def construct(cls: type) -> Any:
    """Create a default instance of ``cls``.

    A ``__classify_default__`` classmethod takes precedence over calling
    the class with no arguments, so types with required constructor
    arguments can still be deserialized.

    Raises
    ------
    ConstructionError
        If no instance could be created.
    """
    factory = getattr(cls, "__classify_default__", None)
    try:
        return factory() if factory is not None else cls()
    except Exception as exc:
        raise ConstructionError(full_name(cls), exc) from exc
