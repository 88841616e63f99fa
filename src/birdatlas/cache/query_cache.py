"""Keyed query cache with request de-duplication and post-write invalidation.

Reads go through :meth:`QueryCache.query`; writes go through
:meth:`QueryCache.mutate`. The cache never patches entries speculatively: a
successful write only marks the keys it declares as stale, and the next read
of a stale key goes back to the network.

Ordering guarantees:
- invalidation happens after the mutation succeeds
- any refetch happens after invalidation, and a fetch that was already in
  flight when its key was invalidated can never satisfy a later read
"""

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from birdatlas.cache.backends import CacheBackend, CacheEntry, MemoryBackend, QueryKey, key_matches

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchFn = Callable[[], Awaitable[Any]]
KeyLike = QueryKey | str


def make_key(key: KeyLike) -> QueryKey:
    """Normalize a key: a bare string becomes a one-element tuple."""
    if isinstance(key, str):
        return (key,)
    return tuple(key)


def format_key(key: KeyLike) -> str:
    """Render a key as ``namespace:arg`` for logs."""
    return ":".join(str(part) for part in make_key(key))


@dataclass(frozen=True)
class QueryResult:
    """Snapshot of a query as seen by a caller."""

    data: Any = None
    error: BaseException | None = None
    is_loading: bool = False
    is_fetching: bool = False
    is_stale: bool = False

    @property
    def is_success(self) -> bool:
        return self.error is None and not self.is_loading


class QueryObserver:
    """A mounted query: receives a result each time its key settles.

    Closing the observer detaches it; results that arrive afterwards are
    dropped rather than delivered to a consumer that no longer exists.
    """

    def __init__(
        self,
        cache: "QueryCache",
        key: QueryKey,
        fetch_fn: FetchFn,
        callback: Callable[[QueryResult], None] | None,
        enabled: bool,
    ) -> None:
        self._cache = cache
        self.key = key
        self.fetch_fn = fetch_fn
        self.callback = callback
        self.enabled = enabled
        self.closed = False
        self.deliveries = 0

    @property
    def result(self) -> QueryResult:
        if not self.enabled:
            return QueryResult(is_loading=True)
        return self._cache.snapshot(self.key)

    def deliver(self, result: QueryResult) -> None:
        if self.closed:
            return
        self.deliveries += 1
        if self.callback is None:
            return
        try:
            self.callback(result)
        except Exception:
            logger.exception("Query observer callback failed for %s", format_key(self.key))

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._cache._detach(self)


class QueryCache:
    """Keyed cache of remote reads.

    Two reads of the same key share one in-flight request and one cached
    result. Failed fetches are stored as an error state next to the last good
    data and are not retried automatically.
    """

    def __init__(
        self,
        stale_time: float = 5.0,
        refetch_on_invalidate: bool = True,
        backend: CacheBackend | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the query cache.

        Args:
            stale_time: Seconds a fetched entry is served without refetching
            refetch_on_invalidate: Refetch observed keys in the background when
                they are invalidated
            backend: Entry storage (defaults to an in-memory backend)
            clock: Monotonic time source
        """
        self.stale_time = stale_time
        self.refetch_on_invalidate = refetch_on_invalidate
        self._backend = backend or MemoryBackend()
        self._clock = clock

        self._in_flight: dict[QueryKey, asyncio.Task[None]] = {}
        self._epochs: defaultdict[QueryKey, int] = defaultdict(int)
        self._observers: dict[QueryKey, list[QueryObserver]] = {}
        self._background: set[asyncio.Task[None]] = set()
        self._generation = 0

        self._stats = {
            "hits": 0,
            "misses": 0,
            "fetches": 0,
            "deduplicated": 0,
            "errors": 0,
            "mutations": 0,
            "invalidations": 0,
        }

    # ---- Reads ----

    async def query(self, key: KeyLike, fetch_fn: FetchFn, enabled: bool = True) -> QueryResult:
        """Read a key, fetching it when absent or stale.

        Args:
            key: Query key
            fetch_fn: Zero-argument coroutine function performing the remote read
            enabled: False while a prerequisite collaborator is not ready; the
                query then reports loading and performs no call

        Returns:
            The settled result for the key
        """
        key = make_key(key)
        if not enabled:
            return QueryResult(is_loading=True)

        entry = self._backend.get(key)
        if entry is not None and self._is_fresh(entry):
            self._stats["hits"] += 1
            logger.debug("Query cache hit", extra={"key": format_key(key)})
            return self._to_result(key, entry)

        self._stats["misses"] += 1
        await self._fetch(key, fetch_fn)
        return self.snapshot(key)

    async def fetch(self, key: KeyLike, fetch_fn: FetchFn, enabled: bool = True) -> Any:  # noqa: ANN401
        """Read a key and return its data, raising the cached error if any."""
        result = await self.query(key, fetch_fn, enabled=enabled)
        if result.error is not None:
            raise result.error
        return result.data

    def observe(
        self,
        key: KeyLike,
        fetch_fn: FetchFn,
        callback: Callable[[QueryResult], None] | None = None,
        enabled: bool = True,
    ) -> QueryObserver:
        """Mount a query.

        The observer is refetched in the background whenever its key is
        invalidated. If the key is not fresh an initial fetch is started.
        Must be called from a running event loop when ``enabled`` is True.
        """
        key = make_key(key)
        observer = QueryObserver(self, key, fetch_fn, callback, enabled)
        if not enabled:
            return observer

        self._observers.setdefault(key, []).append(observer)
        entry = self._backend.get(key)
        if entry is None or not self._is_fresh(entry):
            self._schedule_fetch(key, fetch_fn)
        return observer

    def snapshot(self, key: KeyLike) -> QueryResult:
        """Current state of a key without triggering a fetch."""
        key = make_key(key)
        entry = self._backend.get(key)
        if entry is None:
            fetching = key in self._in_flight
            return QueryResult(is_loading=fetching, is_fetching=fetching)
        return self._to_result(key, entry)

    def peek(self, key: KeyLike) -> Any:  # noqa: ANN401
        """Cached data for a key, or None."""
        entry = self._backend.get(make_key(key))
        return entry.data if entry is not None else None

    # ---- Writes ----

    async def mutate(
        self, fn: Callable[[], Awaitable[T]], invalidates: Iterable[KeyLike] = ()
    ) -> T:
        """Run a write exactly once, then invalidate the declared keys.

        On failure the error propagates and no entry is touched.
        """
        prefixes = [make_key(k) for k in invalidates]
        self._stats["mutations"] += 1
        try:
            result = await fn()
        except Exception as e:
            logger.debug(
                "Mutation failed; cache untouched",
                extra={"invalidates": [format_key(p) for p in prefixes], "error": str(e)},
            )
            raise
        self.invalidate(prefixes)
        return result

    def invalidate(self, keys: Iterable[KeyLike]) -> int:
        """Mark every key matching the given prefixes as stale.

        In-flight fetches for matching keys are detached so that the next read
        starts a new request. Observed keys are refetched in the background
        when an event loop is running.

        Returns:
            Number of keys invalidated
        """
        count = 0
        refetch: dict[QueryKey, FetchFn] = {}
        for prefix in (make_key(k) for k in keys):
            matched = set(self._backend.keys_with_prefix(prefix))
            matched.update(k for k in self._in_flight if key_matches(k, prefix))
            for key in matched:
                entry = self._backend.get(key)
                if entry is not None:
                    entry.is_stale = True
                self._epochs[key] += 1
                self._in_flight.pop(key, None)
                count += 1

            for key, observers in self._observers.items():
                if key_matches(key, prefix) and observers:
                    refetch.setdefault(key, observers[0].fetch_fn)

        self._stats["invalidations"] += count
        if count:
            logger.debug("Invalidated %d query keys", count)

        if self.refetch_on_invalidate:
            for key, fetch_fn in refetch.items():
                self._schedule_fetch(key, fetch_fn)
        return count

    def remove(self, keys: Iterable[KeyLike]) -> int:
        """Drop every entry matching the given prefixes.

        Returns:
            Number of entries removed
        """
        removed = 0
        for prefix in (make_key(k) for k in keys):
            for key in [k for k in self._in_flight if key_matches(k, prefix)]:
                self._in_flight.pop(key, None)
                self._epochs[key] += 1
            for key in self._backend.keys_with_prefix(prefix):
                self._epochs[key] += 1
            removed += self._backend.delete_prefix(prefix)
        return removed

    def clear(self) -> None:
        """End the cache's session: drop entries, observers and pending results.

        Responses that arrive after clearing are discarded.
        """
        self._generation += 1
        self._backend.clear()
        self._in_flight.clear()
        self._epochs.clear()
        for observers in self._observers.values():
            for observer in observers:
                observer.closed = True
        self._observers.clear()
        for task in self._background:
            task.cancel()
        self._background.clear()
        logger.info("Query cache cleared")

    async def wait_idle(self) -> None:
        """Wait for every background refetch scheduled so far to settle."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- Stats ----

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics including the hit rate."""
        total_reads = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total_reads if total_reads > 0 else 0.0
        return {
            **self._stats,
            "hit_rate": round(hit_rate * 100, 2),
            "total_reads": total_reads,
            "entries": sum(1 for _ in self._backend.keys()),
            "in_flight": len(self._in_flight),
        }

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (
            f"<QueryCache entries={stats['entries']} "
            f"hit_rate={stats['hit_rate']}% "
            f"reads={stats['total_reads']}>"
        )

    # ---- Internals ----

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if entry.is_stale or entry.fetched_at is None:
            return False
        return self._clock() - entry.fetched_at < self.stale_time

    def _to_result(self, key: QueryKey, entry: CacheEntry) -> QueryResult:
        fetching = key in self._in_flight
        return QueryResult(
            data=entry.data,
            error=entry.error,
            is_loading=fetching and not entry.has_data,
            is_fetching=fetching,
            is_stale=not self._is_fresh(entry),
        )

    async def _fetch(self, key: QueryKey, fetch_fn: FetchFn) -> None:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._run_fetch(key, fetch_fn, self._generation, self._epochs[key])
            )
            self._in_flight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        else:
            self._stats["deduplicated"] += 1
            logger.debug("Joined in-flight query", extra={"key": format_key(key)})
        # Shield so a cancelled caller does not cancel a request others share
        await asyncio.shield(task)

    def _release(self, key: QueryKey, task: asyncio.Task[Any] | None) -> None:
        if task is not None and self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _run_fetch(
        self, key: QueryKey, fetch_fn: FetchFn, generation: int, epoch: int
    ) -> None:
        self._stats["fetches"] += 1
        try:
            data = await fetch_fn()
        except Exception as e:
            self._stats["errors"] += 1
            logger.warning(
                "Query fetch failed", extra={"key": format_key(key), "error": str(e)}
            )
            self._release(key, asyncio.current_task())
            if generation != self._generation:
                return
            entry = self._backend.get(key) or CacheEntry()
            entry.error = e
            entry.fetched_at = self._clock()
            entry.is_stale = epoch != self._epochs[key]
            self._backend.set(key, entry)
        else:
            self._release(key, asyncio.current_task())
            if generation != self._generation:
                logger.debug(
                    "Discarded result from a cleared session", extra={"key": format_key(key)}
                )
                return
            superseded = epoch != self._epochs[key]
            if superseded and key in self._in_flight:
                # A newer request for this key is running; let it win
                return
            self._backend.set(
                key,
                CacheEntry(
                    data=data,
                    has_data=True,
                    fetched_at=self._clock(),
                    is_stale=superseded,
                ),
            )
        self._notify(key)

    def _schedule_fetch(self, key: QueryKey, fetch_fn: FetchFn) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "No running loop; refetch deferred to next read", extra={"key": format_key(key)}
            )
            return
        task = loop.create_task(self._fetch(key, fetch_fn))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _notify(self, key: QueryKey) -> None:
        observers = self._observers.get(key)
        if not observers:
            return
        result = self.snapshot(key)
        for observer in list(observers):
            observer.deliver(result)

    def _detach(self, observer: QueryObserver) -> None:
        observers = self._observers.get(observer.key)
        if observers and observer in observers:
            observers.remove(observer)
            if not observers:
                del self._observers[observer.key]
