"""Node serialization to and from plain dicts, JSON and YAML.

Provides round-trip conversion of ``Node`` trees to a plain dict/list
structure that maps naturally to both JSON and YAML.  Empty text,
attributes and children are omitted from the dict form.

Usage
-----
::

    from treeclassify.tree.serializer import TreeSerializer

    serializer = TreeSerializer()
    data = serializer.to_dict(node)
    json_text = serializer.to_json(node)
    node2 = serializer.from_json(json_text)
    assert node == node2
"""
from __future__ import annotations

import json

import yaml

from treeclassify.tree.nodes import Node


class TreeSerializer:
    """Converts between ``Node`` trees and plain Python dicts."""

    # ------------------------------------------------------------------
    # Serialization (Node → dict)
    # ------------------------------------------------------------------

    def to_dict(self, node: Node) -> dict[str, object]:
        """Serialize a ``Node`` to a JSON-compatible dict."""
        data: dict[str, object] = {"name": node.name}
        if node.text is not None:
            data["text"] = node.text
        if node.attributes:
            data["attributes"] = dict(node.attributes)
        if node.children:
            data["children"] = [self.to_dict(c) for c in node.children]
        return data

    # ------------------------------------------------------------------
    # Deserialization (dict → Node)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> Node:
        """Deserialize a ``Node`` from a plain dict."""
        text = data.get("text")
        attributes = data.get("attributes") or {}
        return Node(
            name=str(data["name"]),
            text=None if text is None else str(text),
            attributes={str(k): str(v) for k, v in attributes.items()},
            children=[self.from_dict(c) for c in data.get("children", [])],
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, node: Node, indent: int = 2) -> str:
        """Serialize a ``Node`` to a JSON string."""
        return json.dumps(self.to_dict(node), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Node:
        """Deserialize a ``Node`` from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, node: Node) -> str:
        """Serialize a ``Node`` to a YAML string."""
        return yaml.dump(
            self.to_dict(node), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, text: str) -> Node:
        """Deserialize a ``Node`` from a YAML string."""
        data: dict[str, object] = yaml.safe_load(text)
        return self.from_dict(data)
