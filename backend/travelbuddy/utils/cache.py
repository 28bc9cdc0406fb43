"""In-memory TTL cache for upstream responses.

Process-level cache for geocoding lookups. Survives across requests in the
same uvicorn worker. TTL: 5 minutes. Expiry is absolute from insertion;
reads never extend it.

When the table grows past ``max_size`` a sweep drops expired entries.
Live entries are never evicted, so the table may stay above ``max_size``.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    data: Any
    timestamp: float


class TTLCache:
    """TTL cache keyed by normalized query text."""

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_size: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock

    @staticmethod
    def normalize_key(query: str) -> str:
        """``"  Paris "`` and ``"paris"`` share one entry."""
        return query.strip().lower()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self._ttl

    def get(self, key: str) -> Optional[Any]:
        key = self.normalize_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        logger.info(f"[CACHE] Hit for {key!r}")
        return entry.data

    def put(self, key: str, value: Any) -> None:
        key = self.normalize_key(key)
        self._entries[key] = CacheEntry(key=key, data=value, timestamp=self._clock())
        if len(self._entries) > self._max_size:
            self.sweep()

    def sweep(self) -> int:
        """Delete every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.info(f"[CACHE] Swept {len(expired)} expired entries")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.normalize_key(key) in self._entries

    @property
    def ttl_seconds(self) -> float:
        return self._ttl
