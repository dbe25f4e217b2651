"""Lazily-resolved, id-keyed references to sub-objects.

A ``Deferred`` is the runtime side of a follow-id member: instead of
storing a sub-object inline, the parent tree only records the id, and the
sub-object is loaded from an object store the first time ``value`` is read.

Example
-------
::

    ref = Deferred("chapter-1", generator=lambda: load_chapter("chapter-1"))
    ref.evaluated   # False
    ref.value       # runs the generator once
    ref.value       # cached
"""
from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class Deferred(Generic[T]):
    """A memoizing handle to a value identified by ``id``.

    Parameters
    ----------
    id:
        Identifier of the referenced object inside its store. Immutable.
    value:
        The already-available value. When given, the reference starts out
        resolved and no generator is needed.
    generator:
        Zero-argument callable producing the value. Called at most once,
        on the first read of ``value``.
    """

    __slots__ = ("_id", "_generator", "_value", "_lock")

    def __init__(
        self,
        id: str,
        value: T = _UNSET,  # type: ignore[assignment]
        *,
        generator: Callable[[], T] | None = None,
    ) -> None:
        if value is _UNSET and generator is None:
            raise TypeError("Deferred needs either a value or a generator")
        self._id = id
        self._generator = None if value is not _UNSET else generator
        self._value = value
        self._lock = threading.Lock()

    @property
    def id(self) -> str:
        """The identifier of the referenced object."""
        return self._id

    @property
    def evaluated(self) -> bool:
        """Return True once the value has been produced or assigned."""
        return self._value is not _UNSET

    @property
    def value(self) -> T:
        """Return the referenced value, running the generator on first access.

        Only on the generator path, every string member of the produced
        value marked with ``id_member()`` is set to this reference's id.
        """
        if self._value is _UNSET:
            from treeclassify.core.members import id_members

            with self._lock:
                if self._value is _UNSET:
                    logger.debug("Evaluating deferred reference %r", self._id)
                    produced = self._generator()  # type: ignore[misc]
                    if produced is not None:
                        for name in id_members(type(produced)):
                            object.__setattr__(produced, name, self._id)
                    self._value = produced
                    self._generator = None
        return self._value  # type: ignore[return-value]

    @value.setter
    def value(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._generator = None

    def __eq__(self, other: object) -> bool:
        """Compare ids, then values. Unresolved operands are evaluated."""
        if not isinstance(other, Deferred):
            return NotImplemented
        return self._id == other._id and self.value == other.value

    def __hash__(self) -> int:
        return hash(self._id)

    def __copy__(self) -> Deferred[T]:
        return self._clone(self._value)

    def __deepcopy__(self, memo: dict[int, object]) -> Deferred[T]:
        clone = self._clone(_UNSET)
        memo[id(self)] = clone
        if self._value is not _UNSET:
            clone._value = copy.deepcopy(self._value, memo)
        return clone

    def __getstate__(self) -> tuple[str, bool, object, object]:
        evaluated = self.evaluated
        return (self._id, evaluated, self._value if evaluated else None, self._generator)

    def __setstate__(self, state: tuple[str, bool, object, object]) -> None:
        self._id, evaluated, value, self._generator = state
        self._value = value if evaluated else _UNSET
        self._lock = threading.Lock()

    def _clone(self, value: object) -> Deferred[T]:
        clone = type(self).__new__(type(self))
        clone._id = self._id
        clone._generator = self._generator
        clone._value = value
        clone._lock = threading.Lock()
        return clone

    def __repr__(self) -> str:
        state = "resolved" if self.evaluated else "unresolved"
        return f"Deferred(id={self._id!r}, {state})"
