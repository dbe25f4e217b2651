"""In-memory object store."""
from __future__ import annotations

import logging

from treeclassify.store.base import ObjectNotFoundError, ObjectStore
from treeclassify.tree.nodes import Node

logger = logging.getLogger(__name__)


class MemoryObjectStore(ObjectStore):
    """Keeps stored trees in a dict. Trees are copied on the way in and out."""

    def __init__(self) -> None:
        self._nodes: dict[tuple[str, str], Node] = {}

    def load(self, type_name: str, id: str) -> Node:
        try:
            return self._nodes[(type_name, id)].copy()
        except KeyError:
            raise ObjectNotFoundError(type_name, id, repr(self)) from None

    def save(self, type_name: str, id: str, node: Node) -> None:
        logger.debug("Storing %s %r in memory", type_name, id)
        self._nodes[(type_name, id)] = node.copy()

    def exists(self, type_name: str, id: str) -> bool:
        return (type_name, id) in self._nodes

    def keys(self) -> list[tuple[str, str]]:
        """Return the stored keys in sorted order."""
        return sorted(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"MemoryObjectStore({len(self._nodes)} object(s))"
