"""File helpers: load and save a whole object graph as XML files.

The root object goes to the given file; objects behind ``follow_id()``
members go to a ``DirectoryObjectStore`` rooted at ``base_dir``, which
defaults to the directory of the root file.

Example
-------
::

    import treeclassify

    treeclassify.save_object(library, "data/library.xml")
    library = treeclassify.load_object(Library, "data/library.xml")
    library.catalogue.value   # loaded from data/Catalogue/<id>.xml
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

from treeclassify.core.walker import Classifier
from treeclassify.store.directory import DirectoryObjectStore
from treeclassify.tree.xml import read_xml, write_xml

T = TypeVar("T")


def _classifier_for(path: Path, base_dir: str | Path | None) -> Classifier:
    base = Path(base_dir) if base_dir is not None else path.parent
    return Classifier(store=DirectoryObjectStore(base))


def load_object(
    type_: type[T],
    path: str | Path,
    base_dir: str | Path | None = None,
    parent: Any = None,
) -> T:
    """Read an object of ``type_`` from the XML file at ``path``.

    Parameters
    ----------
    type_:
        The declared type of the stored object.
    path:
        The XML file to read.
    base_dir:
        Root of the object store for follow-id members. Defaults to the
        directory containing ``path``.
    parent:
        Assigned to the ``parent()`` members of the root object.
    """
    path = Path(path)
    return _classifier_for(path, base_dir).deserialize(type_, read_xml(path), parent)


def save_object(
    value: Any,
    path: str | Path,
    declared_type: Any = None,
    base_dir: str | Path | None = None,
) -> None:
    """Write ``value`` to the XML file at ``path``, creating directories.

    Resolved follow-id members are written to their own files below
    ``base_dir`` as a side effect.
    """
    path = Path(path)
    node = _classifier_for(path, base_dir).serialize(value, declared_type)
    write_xml(node, path)
