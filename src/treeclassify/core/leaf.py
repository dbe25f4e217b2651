"""Leaf codec: primitive values to and from a single text node.

Strings containing control characters are not representable in every
tree text model, so they are stored base64-encoded; single characters at
or below the space are stored as their decimal code point.
"""
from __future__ import annotations

import base64
import binascii
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum, Flag
from typing import Any

from treeclassify.core.errors import FormatError, UnknownEnumValueError
from treeclassify.core.types import Char
from treeclassify.tree.nodes import Node

ENCODING_ATTRIBUTE = "encoding"
BASE64 = "base64"
CODEPOINT = "codepoint"
FLAG_SEPARATOR = "|"

_INTEGER = re.compile(r"-?[0-9]+\Z")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_leaf(value: Any, cls: Any, name: str) -> Node:
    """Encode ``value`` as a leaf node of declared type ``cls``."""
    node = Node(name=name)
    if cls is Char:
        _encode_char(node, value)
    elif isinstance(cls, type) and issubclass(cls, Enum):
        member = value if isinstance(value, cls) else cls(value)
        node.text = _enum_text(member)
    elif cls is str:
        _encode_str(node, str(value))
    elif cls is bool:
        node.text = "True" if value else "False"
    elif cls is int:
        node.text = str(int(value))
    elif cls is float:
        node.text = repr(float(value))
    elif cls is Decimal:
        node.text = str(Decimal(value))
    elif cls is datetime or cls is date:
        node.text = value.isoformat()
    else:
        raise TypeError(f"{cls!r} is not a leaf type")
    return node


def _encode_str(node: Node, value: str) -> None:
    if any(ch < " " for ch in value):
        node.attributes[ENCODING_ATTRIBUTE] = BASE64
        node.text = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")
    else:
        node.text = value


def _encode_char(node: Node, value: str) -> None:
    if not isinstance(value, str) or len(value) != 1:
        raise FormatError(f"{value!r} is not a single character")
    if value <= " ":
        node.attributes[ENCODING_ATTRIBUTE] = CODEPOINT
        node.text = str(ord(value))
    else:
        node.text = value


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_leaf(node: Node, cls: Any) -> Any:
    """Decode the leaf ``node`` as a value of type ``cls``.

    Raises
    ------
    FormatError
        If the text does not parse as ``cls``.
    UnknownEnumValueError
        If ``cls`` is an enum that does not declare the stored name.
    """
    text = node.text
    if cls is str:
        return _decode_str(node)
    if cls is Char:
        return _decode_char(node)
    if isinstance(cls, type) and issubclass(cls, Flag) and not text:
        return cls(0)
    if text is None:
        raise FormatError(f"Expected a {_type_label(cls)} value but the node has no text")
    if isinstance(cls, type) and issubclass(cls, Enum):
        return _decode_enum(text, cls)
    if cls is bool:
        lowered = text.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        raise FormatError(f"{text!r} is not a valid bool")
    try:
        if cls is int:
            return parse_int(text)
        if cls is float:
            return float(text)
        if cls is Decimal:
            return Decimal(text)
        if cls is datetime:
            return datetime.fromisoformat(text)
        if cls is date:
            return date.fromisoformat(text)
    except (ValueError, InvalidOperation) as exc:
        raise FormatError(f"{text!r} is not a valid {_type_label(cls)}") from exc
    raise TypeError(f"{cls!r} is not a leaf type")


def _decode_str(node: Node) -> str:
    text = node.text or ""
    if node.get(ENCODING_ATTRIBUTE) != BASE64:
        return text
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise FormatError(f"{text!r} is not valid base64-encoded UTF-8") from exc


def _decode_char(node: Node) -> str:
    text = node.text or ""
    if node.get(ENCODING_ATTRIBUTE) == CODEPOINT:
        try:
            return chr(int(text))
        except (ValueError, OverflowError) as exc:
            raise FormatError(f"{text!r} is not a valid code point") from exc
    if not text:
        raise FormatError("Expected a character but the node has no text")
    return text[0]


def _type_label(cls: Any) -> str:
    return getattr(cls, "__qualname__", None) or str(cls)


def parse_int(text: str) -> int:
    """Parse ``text`` as written by ``str(int)``.

    Raises
    ------
    ValueError
        For anything else, including padding and digit separators.
    """
    if not _INTEGER.match(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


def _enum_text(member: Enum) -> str:
    if not isinstance(member, Flag):
        return member.name
    if member.name is not None and FLAG_SEPARATOR not in member.name:
        return member.name
    parts = [
        m.name
        for m in type(member).__members__.values()
        if m.value and (m.value & (m.value - 1)) == 0 and m in member
    ]
    return FLAG_SEPARATOR.join(parts)


def _decode_enum(text: str, cls: type[Enum]) -> Enum:
    if not issubclass(cls, Flag):
        try:
            return cls[text]
        except KeyError:
            raise UnknownEnumValueError(cls, text) from None
    result = cls(0)
    for part in text.split(FLAG_SEPARATOR):
        try:
            result |= cls[part]
        except KeyError:
            raise UnknownEnumValueError(cls, text) from None
    return result
