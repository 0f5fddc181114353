"""In-memory TTL cache for expensive corpus results.

Corpus analyses (audit, link graph, keyword research, external links)
are memoized here and invalidated wholesale whenever a document is
written. The engine never depends on the cache for correctness.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from seo_engine.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and the moment it stops being valid."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class SeoCache:
    """Thread-safe key/value store with per-entry expiry."""

    def __init__(self, ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            ttl_seconds: Default time-to-live; SEO_CACHE_TTL_SECONDS when omitted
            clock: Monotonic time source in seconds
        """
        self.ttl_seconds = settings.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when missing or expired (expired entries are dropped)."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                logger.debug(f"Cache entry {key} expired")
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """Drop every entry, or only those whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if prefix is None:
                removed = len(self._store)
                self._store.clear()
            else:
                keys = [key for key in self._store if key.startswith(prefix)]
                for key in keys:
                    del self._store[key]
                removed = len(keys)
        if removed:
            logger.debug(f"Invalidated {removed} cache entr{'y' if removed == 1 else 'ies'}")
        return removed

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {'size': len(self._store), 'keys': list(self._store.keys())}


# Shared instance for corpus endpoints
seo_cache = SeoCache()
