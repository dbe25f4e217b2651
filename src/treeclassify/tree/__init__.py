"""Tree module for treeclassify.

Exports the ``Node`` type and its text boundaries (XML, dict, JSON, YAML).
"""
from __future__ import annotations

from treeclassify.tree.nodes import NULL_ATTRIBUTE, Node
from treeclassify.tree.serializer import TreeSerializer
from treeclassify.tree.xml import from_xml, read_xml, to_xml, write_xml

__all__ = [
    "NULL_ATTRIBUTE",
    "Node",
    "TreeSerializer",
    "from_xml",
    "read_xml",
    "to_xml",
    "write_xml",
]
