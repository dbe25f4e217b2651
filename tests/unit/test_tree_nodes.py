"""Unit tests for treeclassify.tree: Node helpers, XML text boundary,
and dict/JSON/YAML round trips.
"""
from __future__ import annotations

import json

import yaml

from treeclassify.tree import Node, TreeSerializer, from_xml, read_xml, to_xml, write_xml


def _sample() -> Node:
    root = Node("library", attributes={"type": "Library"})
    books = root.add(Node("books"))
    books.add(Node("item", text="Dune", attributes={"key": "a"}))
    books.add(Node.null_marker("item"))
    root.add(Node("name", text="Main"))
    root.add(Node("empty"))
    return root


# ===========================================================================
# Node
# ===========================================================================


class TestNode:
    def test_null_marker_has_only_null_attribute(self) -> None:
        node = Node.null_marker("x")
        assert node.is_null
        assert node.attributes == {"null": "1"}
        assert node.text is None
        assert node.children == []

    def test_is_empty(self) -> None:
        assert Node("x").is_empty
        assert not Node("x", text="").is_empty
        assert not Node("x", attributes={"a": "b"}).is_empty
        assert not Node("x", children=[Node("y")]).is_empty

    def test_child_returns_first_match(self) -> None:
        root = Node("r", children=[Node("a", text="1"), Node("a", text="2")])
        assert root.child("a").text == "1"
        assert root.child("missing") is None

    def test_children_named_filters_in_order(self) -> None:
        root = Node("r", children=[Node("item", text="1"), Node("x"), Node("item", text="2")])
        assert [c.text for c in root.children_named("item")] == ["1", "2"]

    def test_get_attribute_default(self) -> None:
        node = Node("x", attributes={"a": "1"})
        assert node.get("a") == "1"
        assert node.get("b") is None
        assert node.get("b", "z") == "z"

    def test_copy_is_deep(self) -> None:
        original = _sample()
        copied = original.copy()
        assert copied == original
        copied.children[0].children[0].text = "changed"
        copied.attributes["new"] = "1"
        assert original.children[0].children[0].text == "Dune"
        assert "new" not in original.attributes

    def test_walk_is_depth_first(self) -> None:
        names = [n.name for n in _sample().walk()]
        assert names == ["library", "books", "item", "item", "name", "empty"]


# ===========================================================================
# XML
# ===========================================================================


class TestXml:
    def test_round_trip(self) -> None:
        node = _sample()
        assert from_xml(to_xml(node)) == node

    def test_round_trip_without_indentation(self) -> None:
        node = _sample()
        assert from_xml(to_xml(node, pretty=False)) == node

    def test_leaf_text_whitespace_is_preserved(self) -> None:
        node = Node("r", children=[Node("s", text="  padded  ")])
        assert from_xml(to_xml(node)).child("s").text == "  padded  "

    def test_attributes_are_written(self) -> None:
        text = to_xml(Node("item", attributes={"null": "1"}), pretty=False)
        assert text == '<item null="1" />'

    def test_write_and_read_file(self, tmp_path) -> None:
        path = tmp_path / "nested" / "dir" / "tree.xml"
        write_xml(_sample(), path)
        assert path.is_file()
        assert read_xml(path) == _sample()


# ===========================================================================
# TreeSerializer
# ===========================================================================


class TestTreeSerializer:
    def test_to_dict_omits_empty_parts(self) -> None:
        data = TreeSerializer().to_dict(Node("x"))
        assert data == {"name": "x"}

    def test_to_dict_full(self) -> None:
        node = Node("x", text="t", attributes={"a": "1"}, children=[Node("y")])
        assert TreeSerializer().to_dict(node) == {
            "name": "x",
            "text": "t",
            "attributes": {"a": "1"},
            "children": [{"name": "y"}],
        }

    def test_dict_round_trip(self) -> None:
        serializer = TreeSerializer()
        assert serializer.from_dict(serializer.to_dict(_sample())) == _sample()

    def test_json_round_trip(self) -> None:
        serializer = TreeSerializer()
        text = serializer.to_json(_sample())
        assert json.loads(text)["name"] == "library"
        assert serializer.from_json(text) == _sample()

    def test_yaml_round_trip(self) -> None:
        serializer = TreeSerializer()
        text = serializer.to_yaml(_sample())
        assert yaml.safe_load(text)["name"] == "library"
        assert serializer.from_yaml(text) == _sample()

    def test_yaml_keeps_numeric_looking_text_as_strings(self) -> None:
        serializer = TreeSerializer()
        node = Node("r", children=[Node("n", text="123"), Node("b", text="True")])
        assert serializer.from_yaml(serializer.to_yaml(node)) == node
