from __future__ import annotations

import contextvars
import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from ..core.constants import CACHE_CLEANUP_INTERVAL_SECONDS, MAX_CACHE_SIZE
from .timings import STANDARD_TIMINGS, CacheTimings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    revalidating: bool = False


class QueryCache:
    """In-memory stale-while-revalidate cache keyed by string.

    - younger than ``fresh_ttl``: served from memory, fetcher not called
    - younger than ``stale_ttl``: stale value served, one background refetch per key
    - otherwise: fetcher called inline

    A failed background refetch is logged and the stale value stays until the next
    successful refetch or an explicit invalidation. Nothing survives a restart.
    """

    def __init__(
        self,
        *,
        timings: CacheTimings = STANDARD_TIMINGS,
        clock: Callable[[], float] = time.monotonic,
        executor: Optional[Executor] = None,
        max_size: int = MAX_CACHE_SIZE,
        cleanup_interval: float = CACHE_CLEANUP_INTERVAL_SECONDS,
    ):
        self._timings = timings
        self._clock = clock
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="cache-revalidate")
        self._max_size = int(max_size)
        self._cleanup_interval = float(cleanup_interval)
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._last_cleanup: Optional[float] = None

    def get(
        self,
        key: str,
        fetcher: Callable[[], T],
        *,
        fresh_ttl: Optional[float] = None,
        stale_ttl: Optional[float] = None,
    ) -> T:
        fresh_ttl = self._timings.fresh_ttl if fresh_ttl is None else fresh_ttl
        stale_ttl = self._timings.stale_ttl if stale_ttl is None else stale_ttl
        now = self._clock()

        revalidate: Optional[CacheEntry] = None
        with self._lock:
            self._cleanup(now, stale_ttl)
            entry = self._entries.get(key)

            if entry and now - entry.timestamp < fresh_ttl:
                return entry.data

            if entry and now - entry.timestamp < stale_ttl:
                if not entry.revalidating:
                    entry.revalidating = True
                    revalidate = entry
                stale = entry.data
            else:
                stale = None
                entry = None

        if entry is not None:
            if revalidate is not None:
                # The fetcher runs with the caller's context (request-scoped backend client).
                ctx = contextvars.copy_context()
                self._executor.submit(ctx.run, self._revalidate, key, revalidate, fetcher)
            return stale

        data = fetcher()
        with self._lock:
            self._entries[key] = CacheEntry(data=data, timestamp=now)
        return data

    def _revalidate(self, key: str, entry: CacheEntry, fetcher: Callable[[], Any]) -> Any:
        # entry.revalidating stays set until a replacement is installed or the fetch fails
        try:
            data = fetcher()
        except Exception:
            logger.exception("Cache revalidation failed for %s", key)
            with self._lock:
                entry.revalidating = False
            return entry.data

        with self._lock:
            if self._entries.get(key) is entry:
                self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
        return data

    def set(self, key: str, data: Any) -> None:
        """Pre-populate after a mutation."""
        with self._lock:
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock())

    def invalidate(self, prefix: Optional[str] = None) -> None:
        with self._lock:
            if not prefix:
                self._entries.clear()
                return
            for key in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[key]

    def invalidate_key(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def peek(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _cleanup(self, now: float, stale_ttl: float) -> None:
        # caller holds the lock
        if self._last_cleanup is not None and now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now

        for key in [k for k, e in self._entries.items() if now - e.timestamp > stale_ttl and not e.revalidating]:
            del self._entries[key]

        overflow = len(self._entries) - self._max_size
        if overflow > 0:
            oldest = sorted(self._entries.items(), key=lambda kv: kv[1].timestamp)[:overflow]
            for key, _ in oldest:
                del self._entries[key]
