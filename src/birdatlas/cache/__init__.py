"""Query cache for remote reads.

Main components:
- QueryCache: keyed reads with de-duplication, staleness and invalidation
- Decorators: @cached_query and @invalidates for service methods
- Backend: CacheBackend abstraction with an in-memory implementation
"""

from birdatlas.cache.backends import CacheBackend, CacheEntry, MemoryBackend
from birdatlas.cache.decorator import cached_query, invalidates
from birdatlas.cache.query_cache import QueryCache, QueryObserver, QueryResult, make_key

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "MemoryBackend",
    "QueryCache",
    "QueryObserver",
    "QueryResult",
    "cached_query",
    "invalidates",
    "make_key",
]
