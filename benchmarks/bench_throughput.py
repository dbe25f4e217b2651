"""Benchmark: serialize and deserialize throughput.

Measures how many object graphs can be turned into trees, and trees back
into object graphs, per second using the public treeclassify API.
"""
from __future__ import annotations

import json
import sys
import time
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import treeclassify
from treeclassify import Classifier, parent

_ITERATIONS: int = 2_000


class Genre(Enum):
    FICTION = "fiction"
    SCIENCE = "science"


@dataclass
class Item:
    title: str = ""
    shelf: Optional[Shelf] = parent()


@dataclass
class Book(Item):
    author: str = ""
    genre: Genre = Genre.FICTION
    published: Optional[date] = None
    tags: list[str] = field(default_factory=list)


@dataclass
class Journal(Item):
    issue: int = 0


@dataclass
class Shelf:
    label: str = ""
    items: list[Item] = field(default_factory=list)
    ratings: dict[str, float] = field(default_factory=dict)


def sample_shelf(size: int = 20) -> Shelf:
    """Return a shelf mixing books and journals."""
    shelf = Shelf(label="bench")
    for i in range(size):
        if i % 3 == 0:
            shelf.items.append(Journal(title=f"Journal {i}", issue=i))
        else:
            shelf.items.append(
                Book(
                    title=f"Book {i}",
                    author="Anon",
                    genre=Genre.SCIENCE if i % 2 else Genre.FICTION,
                    published=date(2000 + i, 1, 1),
                    tags=["a", "b"],
                )
            )
        shelf.ratings[f"Book {i}"] = i / 2
    return shelf


def _report(operation: str, iterations: int, total: float) -> dict[str, object]:
    result: dict[str, object] = {
        "operation": operation,
        "iterations": iterations,
        "total_seconds": round(total, 4),
        "ops_per_second": round(iterations / total, 1),
        "avg_latency_ms": round(total / iterations * 1000, 4),
    }
    print(
        f"[bench_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def bench_serialize_throughput(iterations: int = _ITERATIONS) -> dict[str, object]:
    """Benchmark object graph to tree throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    shelf = sample_shelf()
    classifier = Classifier()

    start = time.perf_counter()
    for _ in range(iterations):
        classifier.serialize(shelf)
    return _report("serialize_throughput", iterations, time.perf_counter() - start)


def bench_deserialize_throughput(iterations: int = _ITERATIONS) -> dict[str, object]:
    """Benchmark tree to object graph throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    node = treeclassify.serialize(sample_shelf())
    classifier = Classifier()

    start = time.perf_counter()
    for _ in range(iterations):
        classifier.deserialize(Shelf, node)
    return _report("deserialize_throughput", iterations, time.perf_counter() - start)


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_serialize_throughput, "serialize_throughput_baseline.json"),
        (bench_deserialize_throughput, "deserialize_throughput_baseline.json"),
    ]:
        result = bench_fn()
        output_path = results_dir / fname
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2)
        print(f"Results saved to {output_path}")
