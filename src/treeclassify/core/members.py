"""Member descriptors and per-member classify policies.

Serializable classes are ordinary dataclasses.  Per-member behaviour is
declared through ``dataclasses.field`` metadata using the helpers in this
module; class-wide defaults come from the ``classify_options`` decorator.

Example
-------
::

    @classify_options(ignore_if_default=True)
    @dataclass
    class Chapter:
        title: str = ""
        book: Book | None = parent()
        key: str | None = id_member()
        body: Deferred[Body] | None = follow_id()
        draft: bool = ignore()
        pages: int = ignore_if(0, default=0)

The descriptor table of a class is built once, validated, and cached by
class identity.  Members appear in field declaration order, which keeps
repeated serializations of the same value identical.
"""
from __future__ import annotations

import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Any

from treeclassify.core.errors import ConfigurationError
from treeclassify.core.types import TypeKind, analyze

logger = logging.getLogger(__name__)

METADATA_KEY = "treeclassify"

class _Nothing:
    """Sentinel meaning "no ``ignore_if`` value was declared"."""

    def __repr__(self) -> str:
        return "NOTHING"


NOTHING: Any = _Nothing()


@dataclass(frozen=True)
class MemberPolicy:
    """How a single member is treated by the walker.

    Parameters
    ----------
    ignore:
        Never written, never read.
    parent:
        Never written; on read, receives the object that contains the
        object being decoded.
    follow_id:
        Written as an ``id`` reference; the value itself goes to the
        object store.  The member must be declared as ``Deferred[T]``.
    ignore_if_default:
        Not written when the value is ``None`` or its type's zero value.
    ignore_if_empty:
        Not written when the encoded node is empty (no text, children or
        attributes), e.g. an empty collection.
    ignore_if_equal:
        Not written when the value equals this one.
    id:
        Receives the id of the deferred reference that loaded the object.
    """

    ignore: bool = False
    parent: bool = False
    follow_id: bool = False
    ignore_if_default: bool = False
    ignore_if_empty: bool = False
    ignore_if_equal: Any = NOTHING
    id: bool = False
    name: str | None = None


@dataclass(frozen=True)
class ClassOptions:
    """Class-wide defaults applied to every member of a class."""

    ignore_if_default: bool = False
    ignore_if_empty: bool = False


@dataclass(frozen=True)
class MemberDescriptor:
    """A persisted member of a class.

    Parameters
    ----------
    name:
        The Python attribute name.
    storage_name:
        The tag of the child node that holds the member.
    declared_type:
        The resolved annotation of the member.
    policy:
        The effective policy, with class-wide options merged in.
    """

    name: str
    storage_name: str
    declared_type: Any
    policy: MemberPolicy


# ---------------------------------------------------------------------------
# Declaration helpers
# ---------------------------------------------------------------------------


def member(
    *,
    name: str | None = None,
    ignore: bool = False,
    parent: bool = False,
    follow_id: bool = False,
    ignore_if_default: bool = False,
    ignore_if_empty: bool = False,
    ignore_if_equal: Any = NOTHING,
    id: bool = False,
    **field_kwargs: Any,
) -> Any:
    """Return a ``dataclasses.field`` carrying a ``MemberPolicy``.

    Any extra keyword (``default``, ``default_factory``, ``repr``, ...)
    is passed through to ``dataclasses.field``.
    """
    policy = MemberPolicy(
        ignore=ignore,
        parent=parent,
        follow_id=follow_id,
        ignore_if_default=ignore_if_default,
        ignore_if_empty=ignore_if_empty,
        ignore_if_equal=ignore_if_equal,
        id=id,
        name=name,
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = policy
    return dataclasses.field(metadata=metadata, **field_kwargs)


def ignore(**field_kwargs: Any) -> Any:
    """Declare a member that is neither written nor read."""
    return member(ignore=True, **field_kwargs)


def parent(**field_kwargs: Any) -> Any:
    """Declare a member that receives the containing object on read.

    Excluded from ``repr`` and ``==`` by default, since it points back up
    the graph.
    """
    field_kwargs.setdefault("default", None)
    field_kwargs.setdefault("repr", False)
    field_kwargs.setdefault("compare", False)
    return member(parent=True, **field_kwargs)


def follow_id(**field_kwargs: Any) -> Any:
    """Declare a ``Deferred[T]`` member stored by id in the object store."""
    field_kwargs.setdefault("default", None)
    return member(follow_id=True, **field_kwargs)


def id_member(**field_kwargs: Any) -> Any:
    """Declare a string member that receives the id of its deferred reference."""
    field_kwargs.setdefault("default", None)
    return member(id=True, **field_kwargs)


def ignore_if(value: Any, **field_kwargs: Any) -> Any:
    """Declare a member that is not written when it equals ``value``."""
    return member(ignore_if_equal=value, **field_kwargs)


def ignore_if_default(**field_kwargs: Any) -> Any:
    """Declare a member that is not written when it holds its zero value."""
    return member(ignore_if_default=True, **field_kwargs)


def ignore_if_empty(**field_kwargs: Any) -> Any:
    """Declare a member that is not written when it encodes to an empty node."""
    return member(ignore_if_empty=True, **field_kwargs)


def classify_options(*, ignore_if_default: bool = False, ignore_if_empty: bool = False):
    """Class decorator setting class-wide member options.

    Options are inherited by subclasses.  Note that combining both options
    erases the distinction between ``None`` and an empty collection: both
    are omitted and both read back as the member's default.
    """

    def decorator(cls: type) -> type:
        cls.__classify_options__ = ClassOptions(  # type: ignore[attr-defined]
            ignore_if_default=ignore_if_default,
            ignore_if_empty=ignore_if_empty,
        )
        for described in list(_descriptors):
            if issubclass(described, cls):
                del _descriptors[described]
        return cls

    return decorator


def class_options(cls: type) -> ClassOptions:
    """Return the effective class-wide options of ``cls``.

    Each option is enabled when ``cls`` or any of its bases enables it.
    """
    declared = [
        vars(c)["__classify_options__"]
        for c in getattr(cls, "__mro__", ())
        if "__classify_options__" in vars(c)
    ]
    return ClassOptions(
        ignore_if_default=any(o.ignore_if_default for o in declared),
        ignore_if_empty=any(o.ignore_if_empty for o in declared),
    )


# ---------------------------------------------------------------------------
# Descriptor tables
# ---------------------------------------------------------------------------

_descriptors: dict[type, tuple[MemberDescriptor, ...]] = {}


def describe(cls: type) -> tuple[MemberDescriptor, ...]:
    """Return the cached descriptor table of ``cls``.

    Raises
    ------
    ConfigurationError
        If annotations cannot be resolved, or a member's policy does not
        fit its declared type.
    """
    try:
        return _descriptors[cls]
    except KeyError:
        pass
    table = tuple(_build(cls))
    _descriptors[cls] = table
    logger.debug("Built descriptor table for %s: %d member(s)", cls.__qualname__, len(table))
    return table


def _build(cls: type) -> list[MemberDescriptor]:
    try:
        hints = typing.get_type_hints(cls)
    except Exception as exc:
        raise ConfigurationError(
            f"Cannot resolve the annotations of {cls.__qualname__}: {exc}"
        ) from exc

    if dataclasses.is_dataclass(cls):
        declared = [
            (f.name, f.metadata.get(METADATA_KEY) or MemberPolicy())
            for f in dataclasses.fields(cls)
        ]
    else:
        declared = [
            (name, MemberPolicy())
            for name, hint in hints.items()
            if typing.get_origin(hint) is not typing.ClassVar
        ]

    options = class_options(cls)
    table = []
    for name, policy in declared:
        declared_type = hints.get(name, Any)
        policy = dataclasses.replace(
            policy,
            ignore_if_default=policy.ignore_if_default or options.ignore_if_default,
            ignore_if_empty=policy.ignore_if_empty or options.ignore_if_empty,
        )
        _check(cls, name, declared_type, policy)
        storage_name = policy.name or name.lstrip("_") or name
        table.append(MemberDescriptor(name, storage_name, declared_type, policy))
    return table


def _check(cls: type, name: str, declared_type: Any, policy: MemberPolicy) -> None:
    if policy.ignore or policy.parent:
        return
    kind = analyze(declared_type).kind
    if policy.follow_id and kind is not TypeKind.DEFERRED:
        raise ConfigurationError(
            f"The member {cls.__qualname__}.{name} uses follow_id(), "
            "but is not declared as Deferred[T] for some T."
        )
    if kind is TypeKind.DEFERRED and not policy.follow_id:
        raise ConfigurationError(
            f"The member {cls.__qualname__}.{name} is declared as Deferred[T] "
            "and must use follow_id()."
        )


def id_members(cls: type) -> list[str]:
    """Return the names of the string members of ``cls`` marked ``id_member()``."""
    if analyze(cls).kind is not TypeKind.OBJECT:
        return []
    return [
        d.name
        for d in describe(cls)
        if d.policy.id and analyze(d.declared_type).cls is str
    ]
