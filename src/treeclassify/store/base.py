"""Object store interface used by follow-id members.

Stores are keyed by ``(type_name, id)``.  ``type_name`` is the
``__name__`` of the referenced class and ``id`` the id of the
``Deferred`` reference.  Stores give no transactional guarantees: a
failure while saving a graph leaves earlier saves in place.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from treeclassify.tree.nodes import Node


class ObjectNotFoundError(KeyError):
    """Raised when a store has no object under the requested key."""

    def __init__(self, type_name: str, id: str, store_name: str) -> None:
        self.type_name = type_name
        self.id = id
        self.store_name = store_name
        super().__init__(f"No {type_name} with id {id!r} in {store_name}.")


class ObjectStore(ABC):
    """Keyed load/save of sub-trees."""

    @abstractmethod
    def load(self, type_name: str, id: str) -> Node:
        """Return the tree stored under ``(type_name, id)``.

        Raises
        ------
        ObjectNotFoundError
            If nothing is stored under the key.
        """

    @abstractmethod
    def save(self, type_name: str, id: str, node: Node) -> None:
        """Store ``node`` under ``(type_name, id)``, replacing any previous tree."""

    @abstractmethod
    def exists(self, type_name: str, id: str) -> bool:
        """Return True if a tree is stored under ``(type_name, id)``."""
