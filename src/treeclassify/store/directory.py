"""Directory-backed object store.

Each object lives in its own XML file at ``<base_dir>/<type_name>/<id>.xml``.
"""
from __future__ import annotations

import logging
from pathlib import Path

from treeclassify.store.base import ObjectNotFoundError, ObjectStore
from treeclassify.tree.nodes import Node
from treeclassify.tree.xml import read_xml, write_xml

logger = logging.getLogger(__name__)


class DirectoryObjectStore(ObjectStore):
    """Stores trees as XML files below ``base_dir``.

    Parameters
    ----------
    base_dir:
        Root directory. Created on the first save if missing.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def path_for(self, type_name: str, id: str) -> Path:
        """Return the file that holds ``(type_name, id)``."""
        return self.base_dir / type_name / f"{id}.xml"

    def load(self, type_name: str, id: str) -> Node:
        path = self.path_for(type_name, id)
        logger.debug("Reading %s", path)
        try:
            return read_xml(path)
        except FileNotFoundError:
            raise ObjectNotFoundError(type_name, id, str(self.base_dir)) from None

    def save(self, type_name: str, id: str, node: Node) -> None:
        path = self.path_for(type_name, id)
        logger.debug("Writing %s", path)
        write_xml(node, path)

    def exists(self, type_name: str, id: str) -> bool:
        return self.path_for(type_name, id).is_file()

    def __repr__(self) -> str:
        return f"DirectoryObjectStore({str(self.base_dir)!r})"
