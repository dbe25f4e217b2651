"""Classify engine core.

Exports the ``Classifier``, the member declaration helpers, ``Deferred``,
the type registry and the error types.
"""
from __future__ import annotations

from treeclassify.core.deferred import Deferred
from treeclassify.core.errors import (
    ClassifyError,
    ConfigurationError,
    ConstructionError,
    FormatError,
    UnknownEnumValueError,
)
from treeclassify.core.members import (
    MemberDescriptor,
    MemberPolicy,
    classify_options,
    describe,
    follow_id,
    id_member,
    ignore,
    ignore_if,
    ignore_if_default,
    ignore_if_empty,
    member,
    parent,
)
from treeclassify.core.registry import (
    TypeAlreadyRegisteredError,
    TypeNotRegisteredError,
    TypeRegistry,
    default_registry,
)
from treeclassify.core.types import Char, TypeKind, TypeRef, analyze
from treeclassify.core.walker import Classifier

__all__ = [
    # Engine
    "Classifier",
    "Deferred",
    # Declarations
    "Char",
    "MemberDescriptor",
    "MemberPolicy",
    "classify_options",
    "describe",
    "follow_id",
    "id_member",
    "ignore",
    "ignore_if",
    "ignore_if_default",
    "ignore_if_empty",
    "member",
    "parent",
    # Types
    "TypeKind",
    "TypeRef",
    "analyze",
    # Registry
    "TypeRegistry",
    "TypeAlreadyRegisteredError",
    "TypeNotRegisteredError",
    "default_registry",
    # Errors
    "ClassifyError",
    "ConfigurationError",
    "ConstructionError",
    "FormatError",
    "UnknownEnumValueError",
]
