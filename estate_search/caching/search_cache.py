"""
Single-slot search result cache.

Keeps the result set of the last successful search together with the
parameters it was fetched for. Repeating the same search within the
freshness window is served from the slot instead of the record store.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from estate_search.models import CacheEntry, Property


logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SearchCache:
    """
    Parameter-keyed, time-bounded memo of the last search.

    There is exactly one slot: every store overwrites it. A lookup hits only
    when an entry exists, its parameters deep-equal the requested ones, its
    result list is non-empty and it is younger than the TTL.

    Attributes:
        ttl_ms: Freshness window in milliseconds
    """

    def __init__(
        self,
        ttl_ms: int = 300_000,
        clock: Optional[Callable[[], int]] = None,
        session_manager: Any = None
    ):
        """
        Initialize the cache.

        Args:
            ttl_ms: Freshness window in milliseconds (default: 5 minutes)
            clock: Returns the current time in epoch milliseconds
            session_manager: Optional SearchSessionManager persisting the slot
        """
        self.ttl_ms = ttl_ms
        self._clock = clock or _now_ms
        self._session_manager = session_manager
        self._entry: Optional[CacheEntry] = None

        if self._session_manager is not None:
            self._entry = self._session_manager.load_cache_entry()
            if self._entry:
                logger.info(f"Restored cached search with {len(self._entry.results)} results")

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def lookup(self, params: Dict[str, Any]) -> Optional[CacheEntry]:
        """
        Return the cached entry for ``params``, or None on a miss.

        Args:
            params: Parameter snapshot of the requested search

        Returns:
            The fresh matching CacheEntry, or None
        """
        entry = self._entry
        if entry is None:
            return None

        if entry.search_params != params:
            logger.debug("Cache miss: parameters changed")
            return None

        if not entry.results:
            logger.debug("Cache miss: cached result set is empty")
            return None

        age_ms = self._clock() - entry.timestamp_ms
        if age_ms >= self.ttl_ms:
            logger.debug(f"Cache miss: entry is stale ({age_ms}ms old)")
            return None

        logger.info(f"Cache hit: {len(entry.results)} results ({age_ms}ms old)")
        return entry

    def store(self, results: List[Property], params: Dict[str, Any]) -> CacheEntry:
        """
        Replace the slot with a new result set.

        Args:
            results: Properties returned by the record store
            params: Parameter snapshot the results were fetched for

        Returns:
            The stored entry
        """
        self._entry = CacheEntry(
            results=list(results),
            search_params=dict(params),
            timestamp_ms=self._clock(),
        )
        if self._session_manager is not None:
            self._session_manager.save_cache_entry(self._entry)
        return self._entry

    def clear(self) -> None:
        """Empty the slot."""
        self._entry = None
        if self._session_manager is not None:
            self._session_manager.save_cache_entry(None)


_shared_cache: Optional[SearchCache] = None


def get_search_cache(ttl_ms: int = 300_000) -> SearchCache:
    """Return the process-wide cache, creating it on first use."""
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = SearchCache(ttl_ms=ttl_ms)
    return _shared_cache
