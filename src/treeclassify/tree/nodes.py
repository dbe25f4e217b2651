"""Tree node definition for treeclassify.

A ``Node`` is the only structure the classify engine reads and writes.
It is deliberately format-agnostic: the XML and dict/JSON/YAML codecs in
this package translate nodes to and from text, but the engine itself only
ever sees names, optional text, string attributes and ordered children.

A node is one of three shapes:

leaf
    Has ``text`` and no children.
composite
    Has children only.
null-marker
    Carries the ``null`` attribute and nothing else.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

NULL_ATTRIBUTE = "null"


@dataclass(slots=True)
class Node:
    """A named tree node with optional text, attributes and children.

    Parameters
    ----------
    name:
        The tag name of the node.
    text:
        Text content, or ``None`` for composite and null-marker nodes.
    attributes:
        String-keyed attributes. Insertion order is preserved so that
        repeated serialization produces identical output.
    children:
        Ordered child nodes owned by this node.
    """

    name: str
    text: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)

    @classmethod
    def null_marker(cls, name: str) -> "Node":
        """Return a node that represents ``None``."""
        return cls(name=name, attributes={NULL_ATTRIBUTE: "1"})

    @property
    def is_null(self) -> bool:
        """Return True if this node carries the ``null`` attribute."""
        return NULL_ATTRIBUTE in self.attributes

    @property
    def is_empty(self) -> bool:
        """Return True if the node has no text, no children and no attributes."""
        return self.text is None and not self.children and not self.attributes

    def child(self, name: str) -> "Node | None":
        """Return the first child called ``name``, or ``None``."""
        for node in self.children:
            if node.name == name:
                return node
        return None

    def children_named(self, name: str) -> Iterator["Node"]:
        """Yield every child called ``name`` in document order."""
        return (node for node in self.children if node.name == name)

    def add(self, node: "Node") -> "Node":
        """Append ``node`` as the last child and return it."""
        self.children.append(node)
        return node

    def get(self, attribute: str, default: str | None = None) -> str | None:
        """Return the value of ``attribute``, or ``default`` if absent."""
        return self.attributes.get(attribute, default)

    def copy(self) -> "Node":
        """Return a deep copy of this node and all of its descendants."""
        return Node(
            name=self.name,
            text=self.text,
            attributes=dict(self.attributes),
            children=[c.copy() for c in self.children],
        )

    def walk(self) -> Iterator["Node"]:
        """Yield this node and then all descendants, depth first."""
        yield self
        for node in self.children:
            yield from node.walk()
