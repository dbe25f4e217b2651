"""Object graph walker: the entry point of the classify engine.

``Classifier.serialize`` turns a value into a ``Node`` tree and
``Classifier.deserialize`` rebuilds a value from one.  Both dispatch on
the *declared* type: the null-marker is handled first, then leaves,
containers, raw tree members and finally objects, whose members are walked
recursively according to their ``MemberPolicy``.

Usage
-----
::

    from treeclassify import Classifier, MemoryObjectStore

    classifier = Classifier(store=MemoryObjectStore())
    node = classifier.serialize(library, Library)
    library2 = classifier.deserialize(Library, node)
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, TypeVar

from treeclassify.core.containers import decode_container, encode_container
from treeclassify.core.deferred import Deferred
from treeclassify.core.errors import ConfigurationError, FormatError
from treeclassify.core.leaf import decode_leaf, encode_leaf
from treeclassify.core.members import NOTHING, MemberDescriptor, describe
from treeclassify.core.registry import TypeRegistry, default_registry
from treeclassify.core.types import TypeKind, analyze, construct, store_name
from treeclassify.tree.nodes import Node

if TYPE_CHECKING:
    from treeclassify.store.base import ObjectStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ID_ATTRIBUTE = "id"

_ZERO_TYPES = (bool, int, float, complex, Decimal)


class Classifier:
    """Converts object graphs to ``Node`` trees and back.

    Parameters
    ----------
    store:
        Object store used by ``follow_id()`` members. Only needed when the
        classified types have such members.
    registry:
        Registry consulted for type discriminators. Defaults to the
        process-wide ``default_registry``.
    root_name:
        Tag of the root node produced by ``serialize`` when no name is
        given, and of the nodes saved to the object store.
    """

    def __init__(
        self,
        store: "ObjectStore | None" = None,
        registry: TypeRegistry | None = None,
        root_name: str = "item",
    ) -> None:
        self.store = store
        self.registry = registry if registry is not None else default_registry
        self.root_name = root_name

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def serialize(self, value: Any, declared_type: Any = None, name: str | None = None) -> Node:
        """Encode ``value`` as a ``Node`` named ``name``.

        Parameters
        ----------
        value:
            The value to encode. ``None`` yields a null-marker node.
        declared_type:
            The static type the value is known by. When the runtime class
            of an object differs, a type discriminator is written. Defaults
            to the runtime type of ``value``.
        name:
            Tag of the produced node. Defaults to ``root_name``.
        """
        if declared_type is None and value is not None:
            declared_type = type(value)
        return self.encode(value, declared_type, name or self.root_name)

    def deserialize(self, type_: type[T] | Any, node: Node, parent: Any = None) -> T:
        """Decode ``node`` as a value of ``type_``.

        Parameters
        ----------
        type_:
            The declared type of the value.
        node:
            The root of the tree to decode.
        parent:
            Assigned to the ``parent()`` members of the decoded object.

        Raises
        ------
        FormatError
            If a present node does not parse; the error's ``path`` names the
            nodes from ``node`` down to the offending one.
        ConfigurationError
            If a type involved cannot be classified.
        ConstructionError
            If an object could not be instantiated.
        """
        try:
            return self.decode(type_, node, parent)
        except FormatError as exc:
            raise exc.within(node.name)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, value: Any, declared: Any, name: str) -> Node:
        """Encode ``value`` against ``declared``; ``Any`` records the runtime type."""
        if value is None:
            return Node.null_marker(name)
        ref = analyze(declared)
        kind = ref.kind
        if kind is TypeKind.ANY:
            runtime = type(value)
            node = self.encode(value, runtime, name)
            attribute, text = self.registry.discriminator(runtime, None)
            node.attributes.setdefault(attribute, text)
            return node
        if kind is TypeKind.NODE:
            return Node(name=name, children=[value.copy()])
        if ref.is_leaf:
            return encode_leaf(value, ref.cls, name)
        if ref.is_container:
            return encode_container(self, value, ref, name)
        if kind is TypeKind.DEFERRED:
            raise ConfigurationError(
                f"Deferred values can only be stored through follow_id() members (node {name!r})"
            )
        return self._encode_object(value, ref.cls, name)

    def _encode_object(self, value: Any, declared: type, name: str) -> Node:
        runtime = type(value)
        node = Node(name=name)
        for member in describe(runtime):
            policy = member.policy
            if policy.ignore or policy.parent:
                continue
            current = getattr(value, member.name, None)
            if policy.ignore_if_default and _is_default(current, member.declared_type):
                continue
            if policy.ignore_if_equal is not NOTHING and current == policy.ignore_if_equal:
                continue
            try:
                if policy.follow_id:
                    node.add(self._encode_follow_id(current, member))
                    continue
                child = self.encode(current, member.declared_type, member.storage_name)
            except FormatError as exc:
                raise exc.within(member.storage_name)
            if policy.ignore_if_empty and child.is_empty:
                continue
            node.add(child)

        if runtime is not declared:
            attribute, text = self.registry.discriminator(runtime, declared)
            node.attributes[attribute] = text
        return node

    def _encode_follow_id(self, reference: Any, member: MemberDescriptor) -> Node:
        if reference is None:
            return Node.null_marker(member.storage_name)
        if not isinstance(reference, Deferred):
            raise ConfigurationError(
                f"The member {member.name} uses follow_id() but holds {type(reference).__name__}, "
                "not a Deferred."
            )
        inner = analyze(member.declared_type).inner
        if reference.evaluated:
            store = self._require_store(member.name)
            type_name = store_name(inner)
            logger.debug("Saving %s %r to the object store", type_name, reference.id)
            store.save(type_name, reference.id, self.encode(reference.value, inner, self.root_name))
        return Node(name=member.storage_name, attributes={ID_ATTRIBUTE: reference.id})

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, type_: Any, node: Node, parent: Any = None) -> Any:
        """Decode ``node`` as ``type_`` without adding the root to error paths."""
        if node.is_null:
            return None
        ref = analyze(type_)
        kind = ref.kind
        if kind is TypeKind.ANY:
            resolved = self.registry.resolve(node, None)
            if resolved is None:
                if node.children:
                    raise FormatError("The node carries no type discriminator for its untyped value")
                return decode_leaf(node, str)
            return self.decode(resolved, node, parent)
        if kind is TypeKind.NODE:
            return node.children[0].copy() if node.children else None
        if ref.is_leaf:
            return decode_leaf(node, ref.cls)
        if ref.is_container:
            return decode_container(self, node, ref, parent)
        if kind is TypeKind.DEFERRED:
            raise ConfigurationError(
                f"Deferred values can only be loaded through follow_id() members (node {node.name!r})"
            )
        return self._decode_object(ref.cls, node, parent)

    def _decode_object(self, declared: type, node: Node, parent: Any) -> Any:
        cls = self.registry.resolve(node, declared) or declared
        instance = construct(cls)
        for member in describe(cls):
            policy = member.policy
            if policy.ignore:
                continue
            if policy.parent:
                object.__setattr__(instance, member.name, parent)
                continue
            child = node.child(member.storage_name)
            if child is None:
                continue
            if child.is_null:
                object.__setattr__(instance, member.name, None)
                continue
            if policy.follow_id:
                reference = self._decode_follow_id(child, member, instance)
                if reference is not None:
                    object.__setattr__(instance, member.name, reference)
                continue
            try:
                value = self.decode(member.declared_type, child, instance)
            except FormatError as exc:
                raise exc.within(member.storage_name)
            object.__setattr__(instance, member.name, value)
        return instance

    def _decode_follow_id(self, child: Node, member: MemberDescriptor, owner: Any) -> Deferred | None:
        id = child.get(ID_ATTRIBUTE)
        if id is None:
            logger.debug("follow_id member %r has no id attribute; keeping default", member.name)
            return None
        inner = analyze(member.declared_type).inner

        def load() -> Any:
            store = self._require_store(member.name)
            type_name = store_name(inner)
            logger.debug("Loading %s %r from the object store", type_name, id)
            return self.deserialize(inner, store.load(type_name, id), owner)

        return Deferred(id, generator=load)

    def _require_store(self, member_name: str) -> "ObjectStore":
        if self.store is None:
            raise ConfigurationError(
                f"The follow_id() member {member_name} needs an object store, "
                "but the Classifier was created without one."
            )
        return self.store


def _is_default(value: Any, declared: Any) -> bool:
    """Return True for ``None`` and the zero value of numbers, bools and chars."""
    if value is None:
        return True
    if type(value) in _ZERO_TYPES:
        return value == type(value)()
    if analyze(declared).kind is TypeKind.CHAR:
        return value == "\0"
    return False
