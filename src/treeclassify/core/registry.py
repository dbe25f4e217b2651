"""Type discriminator registry for treeclassify.

When a value's runtime class differs from the class its member is
declared with, the written node records the runtime class in a
``type`` or ``fulltype`` attribute.  This module decides which attribute
and text to write, and resolves them back to a class on read.

Classes are found without registration in most cases: the short name is
looked up in the declared class's module, a dotted name within the
declared class's top-level package, and a ``module:qualname`` full name by
import.  Classes that move between modules, or that must be found under a
stable alias, can be registered explicitly.

Example
-------
Register a class under a stable name::

    from treeclassify.core.registry import default_registry

    @default_registry.register("circle")
    class Circle(Shape):
        radius: float = 1.0

Resolution never fails: a name that does not resolve falls back to the
declared class.
"""
from __future__ import annotations

import importlib
import importlib.metadata
import logging
import sys
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from treeclassify.core.types import full_name, is_generic, is_nested, short_name
from treeclassify.tree.nodes import Node

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)

TYPE_ATTRIBUTE = "type"
FULLTYPE_ATTRIBUTE = "fulltype"


class TypeNotRegisteredError(KeyError):
    """Raised when a requested discriminator name is not in the registry."""

    def __init__(self, name: str, registry_name: str) -> None:
        self.type_name = name
        self.registry_name = registry_name
        super().__init__(
            f"Type {name!r} is not registered in the {registry_name!r} registry."
        )


class TypeAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a name that already exists."""

    def __init__(self, name: str, registry_name: str) -> None:
        self.type_name = name
        self.registry_name = registry_name
        super().__init__(
            f"Type {name!r} is already registered in the {registry_name!r} registry. "
            "Use a unique name or explicitly deregister the existing entry first."
        )


class TypeRegistry:
    """Maps discriminator names to classes and back.

    Parameters
    ----------
    name:
        A human-readable name for this registry (used in error messages).
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._types: dict[str, type] = {}
        self._names: dict[type, str] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str | None = None) -> Callable[[T], T]:
        """Return a class decorator that registers the decorated class.

        Parameters
        ----------
        name:
            The discriminator written for the class. Defaults to the
            class's ``__name__``.

        Raises
        ------
        TypeAlreadyRegisteredError
            If the name is already in use in this registry.
        """

        def decorator(cls: T) -> T:
            self.register_class(name or cls.__name__, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type) -> None:
        """Register ``cls`` under ``name`` without using the decorator syntax.

        Raises
        ------
        TypeAlreadyRegisteredError
            If ``name`` is already registered.
        TypeError
            If ``cls`` is not a class.
        """
        if name in self._types:
            raise TypeAlreadyRegisteredError(name, self._name)
        if not isinstance(cls, type):
            raise TypeError(f"Cannot register {cls!r} under {name!r}: it is not a class.")
        self._types[name] = cls
        self._names[cls] = name
        logger.debug("Registered type %r -> %s in registry %r", name, cls.__qualname__, self._name)

    def deregister(self, name: str) -> None:
        """Remove a registered name.

        Raises
        ------
        TypeNotRegisteredError
            If ``name`` is not currently registered.
        """
        if name not in self._types:
            raise TypeNotRegisteredError(name, self._name)
        cls = self._types.pop(name)
        self._names.pop(cls, None)
        logger.debug("Deregistered type %r from registry %r", name, self._name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type:
        """Return the class registered under ``name``.

        Raises
        ------
        TypeNotRegisteredError
            If no class is registered under ``name``.
        """
        try:
            return self._types[name]
        except KeyError:
            raise TypeNotRegisteredError(name, self._name) from None

    def list_types(self) -> list[str]:
        """Return a sorted list of all registered names."""
        return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TypeRegistry(name={self._name!r}, types={self.list_types()})"

    # ------------------------------------------------------------------
    # Discriminators
    # ------------------------------------------------------------------

    def discriminator(self, runtime: type, declared: type | None) -> tuple[str, str]:
        """Return the ``(attribute, value)`` pair recording ``runtime``.

        ``declared`` is the statically declared class, or ``None`` when the
        member is untyped.  Short names are only written for top-level,
        non-generic classes that can be found again from ``declared``.
        """
        registered = self._names.get(runtime)
        if registered is not None:
            return TYPE_ATTRIBUTE, registered
        if declared is not None and not is_nested(runtime) and not is_generic(runtime):
            if runtime.__module__ == declared.__module__:
                return TYPE_ATTRIBUTE, short_name(runtime)
            if _package(runtime.__module__) == _package(declared.__module__):
                return TYPE_ATTRIBUTE, f"{runtime.__module__}.{short_name(runtime)}"
        return FULLTYPE_ATTRIBUTE, full_name(runtime)

    def resolve(self, node: Node, declared: type | None) -> type | None:
        """Return the class recorded on ``node``, or ``None``.

        ``None`` means the node carries no discriminator or the
        discriminator matched no class; callers fall back to the declared
        class in both cases.
        """
        name = node.get(TYPE_ATTRIBUTE)
        if name is not None:
            found = self._types.get(name) or _resolve_short(name, declared)
        else:
            name = node.get(FULLTYPE_ATTRIBUTE)
            if name is None:
                return None
            found = _resolve_full(name, declared)
        if found is None:
            logger.debug("Discriminator %r on <%s> did not resolve; using %r", name, node.name, declared)
        return found

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str) -> None:
        """Register classes declared as package entry-points in ``group``.

        Names that are already registered are skipped, which makes
        repeated calls idempotent.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._types:
                logger.debug("Entry-point %r already registered in %r; skipping.", ep.name, self._name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception("Failed to load entry-point %r from group %r; skipping.", ep.name, group)
                continue
            try:
                self.register_class(ep.name, cls)
            except (TypeAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered in registry %r; skipping.",
                    ep.name,
                    self._name,
                )


default_registry = TypeRegistry("default")


# ---------------------------------------------------------------------------
# Resolution helpers
# ---------------------------------------------------------------------------


def _package(module: str) -> str:
    return module.partition(".")[0]


def _subclasses(cls: type) -> Iterator[type]:
    for sub in cls.__subclasses__():
        yield sub
        yield from _subclasses(sub)


def _as_class(candidate: Any) -> type | None:
    return candidate if isinstance(candidate, type) else None


def _resolve_short(name: str, declared: type | None) -> type | None:
    if declared is None:
        return None
    module_name, _, cls_name = name.rpartition(".")
    if not module_name:
        module = sys.modules.get(declared.__module__)
        found = _as_class(getattr(module, cls_name, None))
        if found is not None:
            return found
        module_name = declared.__module__
    elif _package(module_name) == _package(declared.__module__):
        found = _attribute(module_name, cls_name)
        if found is not None:
            return found
    for sub in _subclasses(declared):
        if sub.__module__ == module_name and sub.__name__ == cls_name:
            return sub
    return None


def _resolve_full(name: str, declared: type | None) -> type | None:
    module_name, _, qualname = name.partition(":")
    found = _attribute(module_name, qualname)
    if found is not None or declared is None:
        return found
    for sub in _subclasses(declared):
        if sub.__module__ == module_name and sub.__qualname__ == qualname:
            return sub
    return None


def _attribute(module_name: str, qualname: str) -> type | None:
    try:
        target: Any = importlib.import_module(module_name)
    except (ImportError, ValueError):
        return None
    for part in qualname.split("."):
        target = getattr(target, part, None)
        if target is None:
            return None
    return _as_class(target)
