"""Benchmark: Sensitive-data scan latency — per-scan p50/p99.

Measures the per-call latency of SensitiveDataScanner.scan() on a document
holding one item of every built-in category.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from aumos_compliance.detection.scanner import SensitiveDataScanner

_WARMUP: int = 100
_ITERATIONS: int = 5_000

_DOCUMENT = (
    "Patient record for jane.doe@example.org, SSN 123-45-6789, phone 415-555-0100. "
    "Card on file 4111 1111 1111 1111. MRN: 00123456, Patient ID 7654321. "
) * 5


def bench_scanner_latency() -> dict[str, object]:
    """Benchmark SensitiveDataScanner.scan() per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    scanner = SensitiveDataScanner()

    for _ in range(_WARMUP):
        scanner.scan(_DOCUMENT)

    latencies_ms: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        scanner.scan(_DOCUMENT)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "scanner_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_scanner_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_scanner_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "scanner_latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
