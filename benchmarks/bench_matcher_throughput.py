"""Benchmark: Rule matching throughput — documents checked per second.

Measures how many PatternMatcher.match() calls complete per second against
the bundled rule set for one jurisdiction and a contract-sized document.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from aumos_compliance.detection.matcher import PatternMatcher
from aumos_compliance.rules.loader import RuleLoader
from aumos_compliance.rules.store import RuleStore

_ITERATIONS: int = 2_000

_PARAGRAPH = (
    "The Supplier shall process personal data only on documented instructions. "
    "Questions about this agreement may be sent to legal@example.com. "
    "Payments are made to DE89 3704 0044 0532 0130 00 within thirty days. "
    "This agreement will automatically renew for successive one-year terms. "
)


def bench_matcher_throughput() -> dict[str, object]:
    """Benchmark PatternMatcher.match() throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    store = RuleStore()
    RuleLoader(store).reload()
    rules = store.get("EU")
    matcher = PatternMatcher()
    document = _PARAGRAPH * 20

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        matcher.match(document, rules)
    total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "matcher_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "p99_latency_ms": 0.0,
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_matcher_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} docs/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_matcher_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "matcher_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
