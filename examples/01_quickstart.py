#!/usr/bin/env python3
"""Example: Quickstart for treeclassify

Minimal working example: serialize a small object graph to XML, read it
back, and load a chapter lazily from a directory store.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install treeclassify
"""
from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

import treeclassify
from treeclassify import Deferred, follow_id, id_member, ignore_if_empty, parent


class Genre(Enum):
    FICTION = auto()
    REFERENCE = auto()


@dataclass
class Chapter:
    key: str | None = id_member()
    title: str = ""
    text: str = ""
    book: "Book | None" = parent()


@dataclass
class Book:
    title: str = ""
    genre: Genre = Genre.FICTION
    tags: list[str] = ignore_if_empty(default_factory=list)
    first: Deferred[Chapter] | None = follow_id()


@dataclass
class Shelf:
    books: dict[str, Book] = field(default_factory=dict)


def main() -> None:
    print(f"treeclassify version: {treeclassify.__version__}")

    book = Book(title="Notes", tags=["draft"])
    book.first = Deferred("ch1", Chapter(title="Start", text="Line one\nLine two"))
    shelf = Shelf(books={"notes": book})

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "shelf.xml"

        # Step 1: Save. The chapter goes to Chapter/ch1.xml beside the shelf
        treeclassify.save_object(shelf, path)
        print(path.read_text(encoding="utf-8"))
        print((Path(tmp) / "Chapter" / "ch1.xml").read_text(encoding="utf-8"))

        # Step 2: Load. The chapter is only read on first access
        loaded = treeclassify.load_object(Shelf, path)
        notes = loaded.books["notes"]
        print(f"Loaded book {notes.title!r}, chapter evaluated: {notes.first.evaluated}")
        chapter = notes.first.value
        print(f"Chapter {chapter.key!r}: {chapter.title!r}, parent is book: {chapter.book is notes}")


if __name__ == "__main__":
    main()
