"""Entry storage for the query cache.

The query cache keeps its entries behind :class:`CacheBackend` so the storage
can be swapped without touching fetch, de-duplication or invalidation logic.
Keys are tuples; prefix operations match on leading tuple elements, so the
prefix ``("birdDetails",)`` covers ``("birdDetails", "Eagle Owl")``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

QueryKey = tuple[Any, ...]


@dataclass
class CacheEntry:
    """Last known server truth for one query key.

    ``data`` survives a failed refetch; ``error`` holds the most recent failure
    and is cleared by the next successful fetch.
    """

    data: Any = None
    has_data: bool = False
    fetched_at: float | None = None
    is_stale: bool = False
    error: BaseException | None = None


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    """Return True when ``key`` starts with every element of ``prefix``."""
    return key[: len(prefix)] == prefix


class CacheBackend(ABC):
    """Abstract base class for cache entry storage."""

    @abstractmethod
    def get(self, key: QueryKey) -> CacheEntry | None:
        """Get the entry for a key, or None if absent."""

    @abstractmethod
    def set(self, key: QueryKey, entry: CacheEntry) -> None:
        """Store an entry, replacing any existing one."""

    @abstractmethod
    def delete(self, key: QueryKey) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was removed
        """

    @abstractmethod
    def keys(self) -> Iterator[QueryKey]:
        """Iterate over stored keys."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    def exists(self, key: QueryKey) -> bool:
        return self.get(key) is not None

    def keys_with_prefix(self, prefix: QueryKey) -> list[QueryKey]:
        return [key for key in self.keys() if key_matches(key, prefix)]

    def delete_prefix(self, prefix: QueryKey) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Returns:
            Number of entries deleted
        """
        deleted = 0
        for key in self.keys_with_prefix(prefix):
            if self.delete(key):
                deleted += 1
        if deleted:
            logger.debug("Deleted %d entries matching prefix %r", deleted, prefix)
        return deleted


class MemoryBackend(CacheBackend):
    """In-process dictionary storage.

    Entries live for the lifetime of the owning session; nothing is persisted.
    """

    def __init__(self) -> None:
        self._entries: dict[QueryKey, CacheEntry] = {}

    def get(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, key: QueryKey, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def delete(self, key: QueryKey) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self) -> Iterator[QueryKey]:
        # Snapshot so callers may delete while iterating
        return iter(list(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
