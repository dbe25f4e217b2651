"""Benchmark: XML round-trip latency (p50/p95/mean).

Measures per-call latency of serialize, XML text, parse and deserialize
for one object graph.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from bench_throughput import Shelf, sample_shelf

from treeclassify import Classifier, from_xml, to_xml

_WARMUP: int = 50
_ITERATIONS: int = 500


def bench_round_trip_latency(iterations: int = _ITERATIONS) -> dict[str, object]:
    """Benchmark the full XML round trip of a sample shelf.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_ms, p95_ms.
    """
    shelf = sample_shelf()
    classifier = Classifier()

    def round_trip() -> None:
        text = to_xml(classifier.serialize(shelf))
        classifier.deserialize(Shelf, from_xml(text))

    for _ in range(_WARMUP):
        round_trip()

    latencies_ms: list[float] = []
    for _ in range(iterations):
        t0 = time.perf_counter()
        round_trip()
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "xml_round_trip_latency",
        "iterations": iterations,
        "total_seconds": round(total, 4),
        "ops_per_second": round(iterations / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_ms": round(sorted_lats[int(n * 0.50)], 4),
        "p95_ms": round(sorted_lats[min(int(n * 0.95), n - 1)], 4),
    }
    print(
        f"[bench_latency] {result['operation']}: "
        f"p50={result['p50_ms']:.4f}ms  p95={result['p95_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


if __name__ == "__main__":
    result = bench_round_trip_latency()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
