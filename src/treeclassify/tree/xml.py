"""XML text boundary for ``Node`` trees.

Uses the standard library ``xml.etree.ElementTree``.  Whitespace-only
text inside composite elements (as produced by indentation) is dropped on
read so that pretty-printed files load back into the same tree.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from treeclassify.tree.nodes import Node


def to_element(node: Node) -> ET.Element:
    """Convert a ``Node`` into an ``ElementTree`` element."""
    element = ET.Element(node.name, dict(node.attributes))
    element.text = node.text
    for child in node.children:
        element.append(to_element(child))
    return element


def from_element(element: ET.Element) -> Node:
    """Convert an ``ElementTree`` element into a ``Node``."""
    children = [from_element(e) for e in element]
    text = element.text
    if children and text is not None and not text.strip():
        text = None
    return Node(
        name=element.tag,
        text=text,
        attributes=dict(element.attrib),
        children=children,
    )


def to_xml(node: Node, pretty: bool = True) -> str:
    """Serialize a ``Node`` to an XML string."""
    element = to_element(node)
    if pretty:
        ET.indent(element)
    return ET.tostring(element, encoding="unicode")


def from_xml(text: str) -> Node:
    """Parse an XML string into a ``Node``."""
    return from_element(ET.fromstring(text))


def write_xml(node: Node, path: str | Path) -> None:
    """Write ``node`` to ``path`` as UTF-8 XML, creating parent directories."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(to_xml(node) + "\n", encoding="utf-8")


def read_xml(path: str | Path) -> Node:
    """Read a UTF-8 XML file into a ``Node``."""
    return from_xml(Path(path).read_text(encoding="utf-8"))
