"""Object stores backing follow-id members."""
from __future__ import annotations

from treeclassify.store.base import ObjectNotFoundError, ObjectStore
from treeclassify.store.directory import DirectoryObjectStore
from treeclassify.store.memory import MemoryObjectStore

__all__ = [
    "ObjectStore",
    "ObjectNotFoundError",
    "MemoryObjectStore",
    "DirectoryObjectStore",
]
