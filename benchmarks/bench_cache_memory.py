"""Benchmark: Memory usage of cached compliance checks.

Uses tracemalloc to measure memory allocated while the pipeline caches rule
check results for many distinct documents, then invalidates them.
"""
from __future__ import annotations

import json
import sys
import tracemalloc
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from aumos_compliance.pipeline import CompliancePipeline

_ITERATIONS: int = 500


def bench_cache_memory_usage() -> dict[str, object]:
    """Benchmark memory held by cached check results.

    Returns
    -------
    dict with keys: operation, iterations, peak_memory_kb, current_memory_kb,
    ops_per_second, avg_latency_ms, memory_peak_mb.
    """
    pipeline = CompliancePipeline.from_config()

    tracemalloc.start()
    snapshot_before = tracemalloc.take_snapshot()

    for i in range(_ITERATIONS):
        pipeline.check(f"Ticket {i}: contact user{i}@example.com about renewal.", "EU")

    snapshot_after = tracemalloc.take_snapshot()
    _, peak_bytes = tracemalloc.get_traced_memory()
    pipeline.cache.invalidate_all()
    tracemalloc.stop()

    stats = snapshot_after.compare_to(snapshot_before, "lineno")
    total_bytes = sum(stat.size_diff for stat in stats if stat.size_diff > 0)
    current_kb = round(total_bytes / 1024, 2)
    peak_kb = round(peak_bytes / 1024, 2)

    result: dict[str, object] = {
        "operation": "cache_memory_usage",
        "iterations": _ITERATIONS,
        "peak_memory_kb": peak_kb,
        "current_memory_kb": current_kb,
        "ops_per_second": 0.0,
        "avg_latency_ms": 0.0,
        "memory_peak_mb": round(peak_kb / 1024, 4),
    }
    print(
        f"[bench_cache_memory] {result['operation']}: "
        f"{current_kb:.2f} KB held by {_ITERATIONS} cached checks (peak {peak_kb:.2f} KB)"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_cache_memory_usage()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "cache_memory_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
