"""treeclassify: reflective object-graph ⇄ tree serialization.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    from dataclasses import dataclass, field

    import treeclassify
    from treeclassify import ignore

    @dataclass
    class Settings:
        name: str = "default"
        volume: int = 5
        tags: list[str] = field(default_factory=list)
        cache: dict[str, str] = ignore(default_factory=dict)

    node = treeclassify.serialize(Settings(name="main"))
    print(treeclassify.to_xml(node))
    settings = treeclassify.deserialize(Settings, node)

    treeclassify.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import Any, TypeVar

from treeclassify.convenience import load_object, save_object
from treeclassify.core import (
    Char,
    ClassifyError,
    Classifier,
    ConfigurationError,
    ConstructionError,
    Deferred,
    FormatError,
    TypeRegistry,
    UnknownEnumValueError,
    classify_options,
    default_registry,
    follow_id,
    id_member,
    ignore,
    ignore_if,
    ignore_if_default,
    ignore_if_empty,
    member,
    parent,
)
from treeclassify.store import (
    DirectoryObjectStore,
    MemoryObjectStore,
    ObjectNotFoundError,
    ObjectStore,
)
from treeclassify.tree import Node, TreeSerializer, from_xml, to_xml

__version__: str = "0.1.0"

T = TypeVar("T")


def serialize(
    value: Any,
    declared_type: Any = None,
    name: str = "item",
    store: ObjectStore | None = None,
) -> Node:
    """Encode ``value`` as a ``Node`` tree.

    Parameters
    ----------
    value:
        The value to encode.
    declared_type:
        The static type of ``value``; defaults to its runtime type.
    name:
        Tag of the root node.
    store:
        Object store receiving resolved follow-id members.

    Returns
    -------
    Node
        The root of the encoded tree.
    """
    return Classifier(store=store).serialize(value, declared_type, name)


def deserialize(
    type_: type[T] | Any,
    node: Node,
    parent: Any = None,
    store: ObjectStore | None = None,
) -> T:
    """Decode ``node`` as a value of ``type_``.

    Parameters
    ----------
    type_:
        The declared type of the value.
    node:
        The root of the tree.
    parent:
        Assigned to the ``parent()`` members of the decoded object.
    store:
        Object store that follow-id members load from.

    Raises
    ------
    treeclassify.FormatError
        If a present node does not parse as its declared type.
    treeclassify.ConfigurationError
        If a type involved cannot be classified.
    treeclassify.ConstructionError
        If an object could not be instantiated.
    """
    return Classifier(store=store).deserialize(type_, node, parent)


__all__ = [
    "__version__",
    "serialize",
    "deserialize",
    "load_object",
    "save_object",
    # Engine
    "Classifier",
    "Deferred",
    "TypeRegistry",
    "default_registry",
    # Declarations
    "Char",
    "classify_options",
    "follow_id",
    "id_member",
    "ignore",
    "ignore_if",
    "ignore_if_default",
    "ignore_if_empty",
    "member",
    "parent",
    # Tree
    "Node",
    "TreeSerializer",
    "from_xml",
    "to_xml",
    # Stores
    "ObjectStore",
    "MemoryObjectStore",
    "DirectoryObjectStore",
    "ObjectNotFoundError",
    # Errors
    "ClassifyError",
    "ConfigurationError",
    "ConstructionError",
    "FormatError",
    "UnknownEnumValueError",
]
