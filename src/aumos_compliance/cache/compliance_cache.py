"""Compliance cache with single-flight computation and write-tied invalidation.

The cache memoises active-rule lists, rule-check results, and AI review
results.  Three guarantees hold:

1. At most one computation runs per key at a time.  Threads calling
   :meth:`ComplianceCache.get_or_compute` for a key that is already being
   computed block until the owner finishes and share its result.
   Coroutines calling :meth:`ComplianceCache.aget_or_compute` do the same
   through a shared :class:`asyncio.Future`.
2. :meth:`ComplianceCache.invalidate` and
   :meth:`ComplianceCache.invalidate_all` take effect before they return.
   Each bumps a generation counter and detaches in-flight computations,
   so a computation that started before the invalidation can never
   populate the cache, and no call issued afterwards joins it.
3. A failed computation stores nothing.  The owner and every waiter
   receive :class:`~aumos_compliance.errors.CacheComputeError`; the next
   call retries.

Entries also expire after a time-since-write and a shorter
time-since-last-access window.  Expiry is lazy (checked on read) plus
:meth:`ComplianceCache.cleanup` for explicit sweeps.

Sync and async callers keep separate in-flight tables; a given key is
expected to be used from one flavour only.

Example
-------
>>> cache = ComplianceCache()
>>> key = CacheKey("rules", "EU")
>>> cache.get_or_compute(key, lambda: ["GDPR_EMAIL"])
['GDPR_EMAIL']
>>> cache.invalidate("EU")
1
"""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from aumos_compliance.errors import CacheComputeError

logger = logging.getLogger(__name__)

RULES_NAMESPACE = "rules"
CHECK_NAMESPACE = "check"


@dataclass(frozen=True)
class CacheKey:
    """Identity of one cache entry.

    Attributes
    ----------
    namespace:
        What kind of value is cached (``"rules"``, ``"check"``, or an AI
        operation name).
    jurisdiction:
        Jurisdiction the value depends on.  ``None`` for values that only
        :meth:`ComplianceCache.invalidate_all` clears.
    fingerprint:
        Content fingerprint of the document, when the value depends on it.
    """

    namespace: str
    jurisdiction: str | None = None
    fingerprint: str | None = None


@dataclass
class CacheStats:
    """Counters describing cache behaviour since construction."""

    hits: int = 0
    misses: int = 0
    joins: int = 0
    computations: int = 0
    failures: int = 0
    discarded: int = 0
    expirations: int = 0
    invalidations: int = 0
    entries: int = 0


@dataclass
class _Entry:
    value: object
    written_at: float
    accessed_at: float


class _InFlight:
    """A computation in progress on some thread."""

    def __init__(self, generation: tuple[int, int]) -> None:
        self.generation = generation
        self.done = threading.Event()
        self.value: object = None
        self.error: BaseException | None = None


@dataclass
class _AsyncInFlight:
    generation: tuple[int, int]
    future: asyncio.Future[object]


class ComplianceCache:
    """Keyed memoisation with single-flight computation.

    Parameters
    ----------
    expire_after_write_seconds:
        Maximum age of an entry since it was written.
    expire_after_access_seconds:
        Maximum idle time of an entry since it was last read.
    clock:
        Monotonic time source, overridable for tests.
    """

    def __init__(
        self,
        expire_after_write_seconds: float = 3600.0,
        expire_after_access_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if expire_after_write_seconds <= 0 or expire_after_access_seconds <= 0:
            raise ValueError("Cache expiry windows must be positive.")
        self._write_ttl = expire_after_write_seconds
        self._access_ttl = expire_after_access_seconds
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._in_flight: dict[CacheKey, _InFlight] = {}
        self._async_in_flight: dict[CacheKey, _AsyncInFlight] = {}
        self._global_generation = 0
        self._generations: dict[str | None, int] = {}
        self._stats = CacheStats()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Read-through API
    # ------------------------------------------------------------------

    def get_or_compute(self, key: CacheKey, compute: Callable[[], object]) -> object:
        """Return the cached value for ``key``, computing it on a miss.

        Raises
        ------
        CacheComputeError
            If ``compute`` raised, either in this call or in the
            in-flight computation this call joined.
        """
        with self._lock:
            found, value = self._lookup(key)
            if found:
                return value
            flight = self._in_flight.get(key)
            owner = flight is None
            if flight is None:
                self._stats.misses += 1
                flight = _InFlight(self._generation(key))
                self._in_flight[key] = flight
            else:
                self._stats.joins += 1

        if not owner:
            flight.done.wait()
            if flight.error is not None:
                raise CacheComputeError(key, flight.error) from flight.error
            return flight.value

        try:
            value = compute()
        except BaseException as exc:
            with self._lock:
                self._release(self._in_flight, key, flight)
                self._stats.failures += 1
            flight.error = exc
            flight.done.set()
            if isinstance(exc, Exception):
                logger.warning("Cache computation for %r failed: %s", key, exc)
                raise CacheComputeError(key, exc) from exc
            raise

        with self._lock:
            self._release(self._in_flight, key, flight)
            self._stats.computations += 1
            self._store(key, value, flight.generation)
        flight.value = value
        flight.done.set()
        return value

    async def aget_or_compute(
        self,
        key: CacheKey,
        compute: Callable[[], Awaitable[object]],
    ) -> object:
        """Coroutine counterpart of :meth:`get_or_compute`.

        Concurrent tasks on the same event loop share one computation.
        Cancelling a waiter does not cancel the shared computation.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            found, value = self._lookup(key)
            if found:
                return value
            flight = self._async_in_flight.get(key)
            if flight is not None and flight.future.get_loop() is not loop:
                flight = None
            owner = flight is None
            if flight is None:
                self._stats.misses += 1
                flight = _AsyncInFlight(self._generation(key), loop.create_future())
                self._async_in_flight[key] = flight
            else:
                self._stats.joins += 1

        if not owner:
            return await asyncio.shield(flight.future)

        try:
            value = await compute()
        except BaseException as exc:
            with self._lock:
                self._release(self._async_in_flight, key, flight)
                self._stats.failures += 1
            error = CacheComputeError(key, exc)
            error.__cause__ = exc
            if not flight.future.done():
                flight.future.set_exception(error)
                # Mark retrieved so an unobserved failure is not reported at GC.
                flight.future.exception()
            if isinstance(exc, Exception):
                logger.warning("Cache computation for %r failed: %s", key, exc)
                raise error
            raise

        with self._lock:
            self._release(self._async_in_flight, key, flight)
            self._stats.computations += 1
            self._store(key, value, flight.generation)
        if not flight.future.done():
            flight.future.set_result(value)
        return value

    def peek(self, key: CacheKey) -> object | None:
        """Return the cached value without computing or touching access time."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._is_expired(entry, self._clock()):
                return None
            return entry.value

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, jurisdiction: str) -> int:
        """Drop every entry keyed by ``jurisdiction``.

        In-flight computations for the jurisdiction are detached: their
        results are handed to the callers already waiting but never stored.

        Returns
        -------
        int
            Number of stored entries removed.
        """
        with self._lock:
            self._generations[jurisdiction] = self._generations.get(jurisdiction, 0) + 1
            removed = self._drop(lambda key: key.jurisdiction == jurisdiction)
            self._stats.invalidations += 1
        logger.info("Invalidated %d cache entries for jurisdiction %s", removed, jurisdiction)
        return removed

    def invalidate_all(self) -> int:
        """Drop every entry and detach every in-flight computation."""
        with self._lock:
            self._global_generation += 1
            removed = self._drop(lambda key: True)
            self._stats.invalidations += 1
        logger.info("Invalidated all %d cache entries", removed)
        return removed

    def discard(self, key: CacheKey) -> bool:
        """Remove a single entry.  Returns ``True`` when one was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def cleanup(self) -> int:
        """Remove expired entries and return how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]
            self._stats.expirations += len(expired)
        if expired:
            logger.debug("Expired %d cache entries", len(expired))
        return len(expired)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def stats(self) -> CacheStats:
        """Return a snapshot of the cache counters."""
        with self._lock:
            return replace(self._stats, entries=len(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _generation(self, key: CacheKey) -> tuple[int, int]:
        return (self._global_generation, self._generations.get(key.jurisdiction, 0))

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return (
            now - entry.written_at >= self._write_ttl
            or now - entry.accessed_at >= self._access_ttl
        )

    def _lookup(self, key: CacheKey) -> tuple[bool, object]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        now = self._clock()
        if self._is_expired(entry, now):
            del self._entries[key]
            self._stats.expirations += 1
            return False, None
        entry.accessed_at = now
        self._stats.hits += 1
        return True, entry.value

    def _store(self, key: CacheKey, value: object, generation: tuple[int, int]) -> None:
        if generation != self._generation(key):
            self._stats.discarded += 1
            logger.debug("Discarded result for %r computed before an invalidation", key)
            return
        now = self._clock()
        self._entries[key] = _Entry(value=value, written_at=now, accessed_at=now)

    @staticmethod
    def _release(table: dict[CacheKey, object], key: CacheKey, flight: object) -> None:
        if table.get(key) is flight:
            del table[key]

    def _drop(self, predicate: Callable[[CacheKey], bool]) -> int:
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        for table in (self._in_flight, self._async_in_flight):
            for key in [key for key in table if predicate(key)]:
                del table[key]
        return len(stale)
