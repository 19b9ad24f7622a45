"""
Time-boxed in-memory cache of lookup results.
"""
import logging
import time
from typing import Callable, Dict, Optional

from diagram_lookup.config import config
from diagram_lookup.types import CacheEntry, ResultBundle

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Maps normalized queries to result bundles for a fixed TTL.

    Entries are replaced wholesale, never mutated, so concurrent writers
    for the same key resolve as last-writer-wins. Expired entries are swept
    at the start of every lookup rather than by a timer.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        namespace: Optional[str] = None,
    ):
        self.ttl_seconds = config.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self.namespace = config.cache_namespace if namespace is None else namespace
        self._entries: Dict[str, CacheEntry] = {}

    def make_key(self, query: str) -> str:
        return f"{self.namespace}:{query.lower().strip()}"

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.ttl_seconds

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self.clock()
        expired = [
            key for key, entry in list(self._entries.items())
            if not self._is_fresh(entry, now)
        ]
        for key in expired:
            self._entries.pop(key, None)
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def get(self, query: str) -> Optional[ResultBundle]:
        self.purge_expired()
        entry = self._entries.get(self.make_key(query))
        if entry is None or not self._is_fresh(entry, self.clock()):
            return None
        return entry.bundle

    def set(self, query: str, bundle: ResultBundle) -> None:
        self._entries[self.make_key(query)] = CacheEntry(bundle=bundle, stored_at=self.clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Global singleton
_result_cache: Optional[ResultCache] = None


def get_result_cache() -> ResultCache:
    """Get or create the process-wide result cache"""
    global _result_cache
    if _result_cache is None:
        _result_cache = ResultCache()
    return _result_cache
