"""Unit tests for cache/compliance_cache.py and cache/fingerprint.py."""
from __future__ import annotations

import asyncio
import threading
import time

import pytest

from aumos_compliance.cache.compliance_cache import CacheKey, ComplianceCache
from aumos_compliance.cache.fingerprint import fingerprint
from aumos_compliance.errors import CacheComputeError


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> ComplianceCache:
    return ComplianceCache(expire_after_write_seconds=100, expire_after_access_seconds=50, clock=clock)


EU_KEY = CacheKey("check", "EU", "abc")
US_KEY = CacheKey("check", "US", "abc")


# ---------------------------------------------------------------------------
# Basic read-through
# ---------------------------------------------------------------------------


class TestGetOrCompute:
    def test_miss_then_hit(self, cache: ComplianceCache) -> None:
        calls: list[int] = []

        def compute() -> str:
            calls.append(1)
            return "value"

        assert cache.get_or_compute(EU_KEY, compute) == "value"
        assert cache.get_or_compute(EU_KEY, compute) == "value"
        assert len(calls) == 1
        stats = cache.stats()
        assert stats.misses == 1
        assert stats.hits == 1
        assert stats.entries == 1

    def test_failure_is_not_cached(self, cache: ComplianceCache) -> None:
        def boom() -> str:
            raise ValueError("backend down")

        with pytest.raises(CacheComputeError) as exc_info:
            cache.get_or_compute(EU_KEY, boom)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert cache.peek(EU_KEY) is None
        assert cache.get_or_compute(EU_KEY, lambda: "recovered") == "recovered"
        assert cache.stats().failures == 1

    def test_peek_does_not_compute(self, cache: ComplianceCache) -> None:
        assert cache.peek(EU_KEY) is None
        assert len(cache) == 0

    def test_discard(self, cache: ComplianceCache) -> None:
        cache.get_or_compute(EU_KEY, lambda: 1)
        assert cache.discard(EU_KEY) is True
        assert cache.discard(EU_KEY) is False

    def test_non_positive_windows_rejected(self) -> None:
        with pytest.raises(ValueError):
            ComplianceCache(expire_after_write_seconds=0)


# ---------------------------------------------------------------------------
# Single-flight (threads)
# ---------------------------------------------------------------------------


class TestSingleFlight:
    def test_concurrent_callers_share_one_computation(self) -> None:
        cache = ComplianceCache()
        entered = threading.Event()
        gate = threading.Event()
        calls: list[int] = []
        results: list[object] = []

        def compute() -> str:
            calls.append(1)
            entered.set()
            gate.wait(timeout=5)
            return "shared"

        def worker() -> None:
            results.append(cache.get_or_compute(EU_KEY, compute))

        owner = threading.Thread(target=worker)
        owner.start()
        assert entered.wait(timeout=5)
        waiters = [threading.Thread(target=worker) for _ in range(7)]
        for t in waiters:
            t.start()
        time.sleep(0.05)
        gate.set()
        for t in [owner, *waiters]:
            t.join(timeout=5)

        assert len(calls) == 1
        assert results == ["shared"] * 8
        assert cache.stats().computations == 1

    def test_waiters_receive_the_failure(self) -> None:
        cache = ComplianceCache()
        entered = threading.Event()
        gate = threading.Event()
        errors: list[BaseException] = []

        def compute() -> str:
            entered.set()
            gate.wait(timeout=5)
            raise RuntimeError("upstream failed")

        def worker() -> None:
            try:
                cache.get_or_compute(EU_KEY, compute)
            except CacheComputeError as exc:
                errors.append(exc)

        owner = threading.Thread(target=worker)
        owner.start()
        assert entered.wait(timeout=5)
        waiter = threading.Thread(target=worker)
        waiter.start()
        time.sleep(0.05)
        gate.set()
        owner.join(timeout=5)
        waiter.join(timeout=5)

        assert len(errors) == 2
        assert all(isinstance(e.__cause__, RuntimeError) for e in errors)
        assert cache.peek(EU_KEY) is None


# ---------------------------------------------------------------------------
# Invalidation
# ---------------------------------------------------------------------------


class TestInvalidation:
    def test_invalidate_is_scoped_to_jurisdiction(self, cache: ComplianceCache) -> None:
        cache.get_or_compute(EU_KEY, lambda: "eu")
        cache.get_or_compute(US_KEY, lambda: "us")
        assert cache.invalidate("EU") == 1
        assert cache.peek(EU_KEY) is None
        assert cache.peek(US_KEY) == "us"

    def test_invalidate_all(self, cache: ComplianceCache) -> None:
        cache.get_or_compute(EU_KEY, lambda: "eu")
        cache.get_or_compute(US_KEY, lambda: "us")
        cache.get_or_compute(CacheKey("global"), lambda: "g")
        assert cache.invalidate_all() == 3
        assert len(cache) == 0

    def test_result_computed_across_invalidation_is_discarded(self) -> None:
        cache = ComplianceCache()
        entered = threading.Event()
        gate = threading.Event()
        results: list[object] = []

        def compute() -> str:
            entered.set()
            gate.wait(timeout=5)
            return "stale"

        owner = threading.Thread(target=lambda: results.append(cache.get_or_compute(EU_KEY, compute)))
        owner.start()
        assert entered.wait(timeout=5)
        cache.invalidate("EU")
        gate.set()
        owner.join(timeout=5)

        assert results == ["stale"]
        assert cache.peek(EU_KEY) is None
        assert cache.stats().discarded == 1

    def test_call_after_invalidation_does_not_join_old_flight(self) -> None:
        cache = ComplianceCache()
        entered = threading.Event()
        gate = threading.Event()

        def slow() -> str:
            entered.set()
            gate.wait(timeout=5)
            return "old"

        owner = threading.Thread(target=lambda: cache.get_or_compute(EU_KEY, slow))
        owner.start()
        assert entered.wait(timeout=5)
        cache.invalidate_all()
        assert cache.get_or_compute(EU_KEY, lambda: "new") == "new"
        gate.set()
        owner.join(timeout=5)
        assert cache.peek(EU_KEY) == "new"


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


class TestExpiry:
    def test_expires_after_write(self, cache: ComplianceCache, clock: FakeClock) -> None:
        cache.get_or_compute(EU_KEY, lambda: "v")
        for step in (40, 80):
            clock.now = step
            assert cache.get_or_compute(EU_KEY, lambda: "other") == "v"
        clock.now = 100
        assert cache.get_or_compute(EU_KEY, lambda: "fresh") == "fresh"

    def test_expires_after_idle(self, cache: ComplianceCache, clock: FakeClock) -> None:
        cache.get_or_compute(EU_KEY, lambda: "v")
        clock.now = 50
        assert cache.peek(EU_KEY) is None

    def test_peek_does_not_extend_access(self, cache: ComplianceCache, clock: FakeClock) -> None:
        cache.get_or_compute(EU_KEY, lambda: "v")
        clock.now = 30
        assert cache.peek(EU_KEY) == "v"
        clock.now = 55
        assert cache.peek(EU_KEY) is None

    def test_cleanup_sweeps_expired(self, cache: ComplianceCache, clock: FakeClock) -> None:
        cache.get_or_compute(EU_KEY, lambda: "v")
        clock.now = 10
        cache.get_or_compute(US_KEY, lambda: "v")
        clock.now = 55
        assert cache.cleanup() == 1
        assert len(cache) == 1
        assert cache.stats().expirations == 1


# ---------------------------------------------------------------------------
# Async single-flight
# ---------------------------------------------------------------------------


class TestAsync:
    def test_concurrent_tasks_share_one_computation(self) -> None:
        cache = ComplianceCache()
        calls: list[int] = []

        async def compute() -> str:
            calls.append(1)
            await asyncio.sleep(0.01)
            return "shared"

        async def main() -> list[object]:
            return await asyncio.gather(*(cache.aget_or_compute(EU_KEY, compute) for _ in range(5)))

        assert asyncio.run(main()) == ["shared"] * 5
        assert len(calls) == 1
        assert cache.stats().joins == 4

    def test_failure_reaches_every_task(self) -> None:
        cache = ComplianceCache()

        async def compute() -> str:
            await asyncio.sleep(0.01)
            raise ValueError("bad")

        async def main() -> list[object]:
            return await asyncio.gather(
                *(cache.aget_or_compute(EU_KEY, compute) for _ in range(3)),
                return_exceptions=True,
            )

        results = asyncio.run(main())
        assert all(isinstance(r, CacheComputeError) for r in results)
        assert cache.peek(EU_KEY) is None

    def test_invalidation_during_compute_discards_result(self) -> None:
        cache = ComplianceCache()

        async def main() -> object:
            release = asyncio.Event()

            async def compute() -> str:
                await release.wait()
                return "stale"

            task = asyncio.create_task(cache.aget_or_compute(EU_KEY, compute))
            await asyncio.sleep(0)
            cache.invalidate("EU")
            release.set()
            return await task

        assert asyncio.run(main()) == "stale"
        assert cache.peek(EU_KEY) is None


# ---------------------------------------------------------------------------
# Fingerprints
# ---------------------------------------------------------------------------


class TestFingerprint:
    def test_stable(self) -> None:
        assert fingerprint("Contact: a@b.com") == fingerprint("Contact: a@b.com")

    def test_differs_by_text(self) -> None:
        assert fingerprint("a") != fingerprint("b")

    def test_parts_are_length_prefixed(self) -> None:
        assert fingerprint("ab", "c") != fingerprint("a", "bc")

    def test_none_equals_empty(self) -> None:
        assert fingerprint(None) == fingerprint("")
