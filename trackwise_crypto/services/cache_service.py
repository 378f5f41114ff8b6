"""
TTL cache for fetched account state and market context.

Entries carry their own time-to-live so wallet snapshots and the short-lived
Hyperliquid market context can share one store. Access is guarded by a lock
because wallet fetches run in worker threads.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass
class CacheEntry(Generic[T]):
    """A cached value, when it was stored and how long it stays valid."""
    data: T
    timestamp: float
    ttl: float

    @property
    def age(self) -> float:
        """Get age of cache entry in seconds."""
        return time.time() - self.timestamp

    def is_expired(self, max_age: Optional[float] = None) -> bool:
        """Check the entry against its own ttl, or against max_age when given."""
        return self.age > (self.ttl if max_age is None else max_age)


class CacheService:
    """Thread-safe in-memory cache with per-entry expiry and hit counters."""

    def __init__(self, default_ttl: float = 30):
        self.default_ttl = default_ttl
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self.logger = logging.getLogger(__name__)

    def get(self, key: str, max_age: Optional[float] = None) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None and entry.is_expired(max_age):
                del self._cache[key]
                entry = None

            if entry is None:
                self._misses += 1
                self.logger.debug(f"Cache miss: {key}")
                return None

            self._hits += 1
            return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store a value; ttl defaults to the service-wide default."""
        with self._lock:
            self._cache[key] = CacheEntry(
                data=data,
                timestamp=time.time(),
                ttl=self.default_ttl if ttl is None else ttl
            )

    def get_or_load(self, key: str, loader: Callable[[], T], ttl: Optional[float] = None) -> T:
        """Return the cached value, or call loader and cache its result.

        Exceptions raised by the loader propagate and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        data = loader()
        self.set(key, data, ttl)
        return data

    def delete(self, key: str) -> bool:
        """Remove one key; False if it was not cached."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix and return the count."""
        with self._lock:
            keys = [k for k in self._cache if k.startswith(prefix)]
            for key in keys:
                del self._cache[key]
            return len(keys)

    def clear(self) -> int:
        """Remove every entry and return the count."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    def cleanup_expired(self) -> int:
        """Remove expired entries and return the count."""
        with self._lock:
            expired = [k for k, entry in self._cache.items() if entry.is_expired()]
            for key in expired:
                del self._cache[key]

        if expired:
            self.logger.info(f"🧹 Removed {len(expired)} expired cache entries")
        return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        """Entry count, hit ratio and entry ages."""
        with self._lock:
            ages = [entry.age for entry in self._cache.values()]
            lookups = self._hits + self._misses
            return {
                'total_entries': len(ages),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / lookups if lookups else 0.0,
                'oldest_age': max(ages, default=0),
                'newest_age': min(ages, default=0)
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class PortfolioCacheService(CacheService):
    """Cache keyed by wallet for snapshots, plus Hyperliquid market context."""

    SNAPSHOT_KEY_PREFIX = "snapshot:"
    HYPERLIQUID_MARKET_KEY = "hyperliquid:meta_and_asset_ctxs"
    HYPERLIQUID_MARKET_TTL = 10

    def _snapshot_key(self, address: str, sub_account_id: int = 0) -> str:
        return f"{self.SNAPSHOT_KEY_PREFIX}{address}:{sub_account_id}"

    def cache_snapshot(self, snapshot: Any) -> None:
        """Cache a fetched wallet snapshot."""
        wallet = snapshot.wallet
        self.set(self._snapshot_key(wallet.address, wallet.sub_account_id), snapshot)

    def get_snapshot(self, address: str, sub_account_id: int = 0) -> Optional[Any]:
        """Get a cached wallet snapshot."""
        return self.get(self._snapshot_key(address, sub_account_id))

    def invalidate_snapshots(self) -> int:
        """Drop every cached wallet snapshot and return the count removed."""
        count = self.delete_prefix(self.SNAPSHOT_KEY_PREFIX)
        self.logger.info(f"Invalidated {count} wallet snapshot cache entries")
        return count

    def get_market_context(self, loader: Callable[[], T]) -> T:
        """Get Hyperliquid meta and asset contexts, reloading after 10 seconds."""
        return self.get_or_load(self.HYPERLIQUID_MARKET_KEY, loader, self.HYPERLIQUID_MARKET_TTL)
