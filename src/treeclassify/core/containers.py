"""Container codec: arrays, collections and dictionaries.

Every element is written as a child node named ``item``; dictionary
items additionally carry their key in the ``key`` attribute.  Elements are
encoded against the declared element type, so subclass instances inside
a collection get a type discriminator just like members do.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from treeclassify.core.errors import ConfigurationError, FormatError
from treeclassify.core.leaf import parse_int
from treeclassify.core.types import INTEGER_KEY_TYPES, TypeKind, TypeRef
from treeclassify.tree.nodes import Node

if TYPE_CHECKING:
    from treeclassify.core.walker import Classifier

logger = logging.getLogger(__name__)

ITEM = "item"
KEY_ATTRIBUTE = "key"


def check_key_type(key_type: Any, name: str) -> None:
    """Raise ``ConfigurationError`` unless ``key_type`` is a supported key kind."""
    if key_type is str or key_type in INTEGER_KEY_TYPES:
        return
    if isinstance(key_type, type) and issubclass(key_type, Enum):
        return
    raise ConfigurationError(
        f"The member {name} is of a dictionary type, but its key type is {key_type!r}. "
        "Only str, int and enum keys are supported."
    )


def _key_text(key: Any, key_type: Any) -> str:
    if key_type is str:
        return str(key)
    if key_type in INTEGER_KEY_TYPES:
        return str(int(key))
    return (key if isinstance(key, key_type) else key_type(key)).name


def _parse_key(text: str, key_type: Any) -> Any:
    if key_type is str:
        return text
    if key_type in INTEGER_KEY_TYPES:
        return parse_int(text)
    return key_type[text]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_container(classifier: "Classifier", value: Any, ref: TypeRef, name: str) -> Node:
    """Encode a container ``value`` of declared type ``ref``."""
    node = Node(name=name)
    if ref.kind is TypeKind.DICT:
        check_key_type(ref.key, name)
        for key, item in value.items():
            child = classifier.encode(item, ref.element, ITEM)
            child.attributes[KEY_ATTRIBUTE] = _key_text(key, ref.key)
            node.add(child)
    elif ref.kind is TypeKind.TUPLE:
        if len(value) != len(ref.elements):
            raise FormatError(
                f"Expected {len(ref.elements)} element(s) but the tuple has {len(value)}"
            )
        for item, element in zip(value, ref.elements):
            node.add(classifier.encode(item, element, ITEM))
    else:
        for item in _ordered(value):
            node.add(classifier.encode(item, ref.element, ITEM))
    return node


def _ordered(value: Any) -> list[Any]:
    """Return the items of ``value``; sets are sorted so output is stable."""
    if not isinstance(value, (set, frozenset)):
        return list(value)
    try:
        return sorted(value)
    except TypeError:
        return list(value)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_container(classifier: "Classifier", node: Node, ref: TypeRef, parent: Any) -> Any:
    """Decode the children of ``node`` into a container of type ``ref``.

    ``parent`` is handed on to every element for its parent members.
    """
    items = list(node.children_named(ITEM))
    if ref.kind is TypeKind.DICT:
        check_key_type(ref.key, node.name)
        result = {}
        for index, item in enumerate(items):
            text = item.get(KEY_ATTRIBUTE)
            if text is None:
                logger.debug("Skipping item %d of %r: no key", index, node.name)
                continue
            try:
                key = _parse_key(text, ref.key)
            except (TypeError, ValueError, KeyError):
                logger.debug("Skipping item %d of %r: bad key %r", index, node.name, text)
                continue
            result[key] = _decode_item(classifier, item, ref.element, parent, index)
        return result if ref.cls is dict else ref.cls(result)

    if ref.kind is TypeKind.TUPLE:
        if len(items) != len(ref.elements):
            raise FormatError(
                f"Expected {len(ref.elements)} item(s) but the node has {len(items)}"
            )
        return tuple(
            _decode_item(classifier, item, element, parent, index)
            for index, (item, element) in enumerate(zip(items, ref.elements))
        )

    if ref.kind is TypeKind.ARRAY:
        array: list[Any] = [None] * len(items)
        for index, item in enumerate(items):
            array[index] = _decode_item(classifier, item, ref.element, parent, index)
        return tuple(array)

    collection = set() if ref.cls is frozenset else ref.cls()
    append = getattr(collection, "add", None) or collection.append
    for index, item in enumerate(items):
        append(_decode_item(classifier, item, ref.element, parent, index))
    return collection if ref.cls is not frozenset else frozenset(collection)


def _decode_item(
    classifier: "Classifier", item: Node, element: Any, parent: Any, index: int
) -> Any:
    if item.is_null:
        return None
    try:
        return classifier.decode(element, item, parent)
    except FormatError as exc:
        raise exc.within(f"{ITEM}[{index}]")
