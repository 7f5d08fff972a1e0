"""
In-memory response cache for raw order fetch results.

Provides:
- TTL-based expiration, checked on every read
- Periodic sweep of expired entries (see core.scheduler)
- Hit/miss statistics
- Single-key and full invalidation

Usage:
    from core.cache import ResponseCache, build_cache_key

    cache = ResponseCache(ttl=1800)
    key = build_cache_key("DEV", start, end, {"orderType": "Prepaid"})
    cache.set(key, {"hits": hits})
    data = cache.get(key)
"""
import hashlib
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from core.config import config
from core.observability import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "orders"
MAX_KEY_LENGTH = 200


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    expirations: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "expirations": self.expirations,
            "invalidations": self.invalidations,
            "hit_rate_percent": round(self.hit_rate, 2),
        }


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl


# Key separators and the escape character itself
_KEY_ESCAPES = str.maketrans({"%": "%25", ":": "%3A", "=": "%3D"})


def _escape(part: Any) -> str:
    return str(part).translate(_KEY_ESCAPES)


def build_cache_key(
    environment: str,
    start_date: str,
    end_date: str,
    filters: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Canonical cache key for an order query.

    Filter values are sorted by field name, so the key does not depend on
    the order in which the request listed them. Blank values are skipped.
    Every component is escaped, so distinct queries never share a key.
    """
    key_parts = [
        KEY_PREFIX,
        _escape(str(environment).upper()),
        _escape(start_date),
        _escape(end_date),
    ]

    for name, value in sorted((filters or {}).items()):
        if value is None or str(value).strip() == "":
            continue
        key_parts.append(f"{_escape(name)}={_escape(str(value).strip())}")

    key_str = ":".join(key_parts)

    # Hash if too long
    if len(key_str) > MAX_KEY_LENGTH:
        hash_suffix = hashlib.md5(key_str.encode()).hexdigest()[:12]
        key_str = f"{KEY_PREFIX}:{key_parts[1]}:{hash_suffix}"

    return key_str


class ResponseCache:
    """
    Process-local TTL cache. Values are stored as-is and replaced wholesale
    on ``set``; callers must not mutate what they get back.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl if ttl is not None else config.cache.ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.expired(self.clock())

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Expired entries are dropped here as well, so a late sweep never
        serves stale data.

        Returns:
            Cached value or None if absent/expired
        """
        entry = self._entries.get(key)
        if entry is not None and entry.expired(self.clock()):
            del self._entries[key]
            self._stats.expirations += 1
            entry = None

        if entry is None:
            self._stats.misses += 1
            logger.debug(f"Cache miss: {key}")
            return None

        self._stats.hits += 1
        logger.debug(f"Cache hit: {key}")
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value with the cache TTL, replacing any existing entry."""
        self._entries[key] = CacheEntry(value=value, inserted_at=self.clock(), ttl=self.ttl)
        self._stats.sets += 1

    def clear_one(self, key: str) -> bool:
        """
        Delete a key from cache.

        Returns:
            True if an entry was removed
        """
        if self._entries.pop(key, None) is None:
            return False
        self._stats.invalidations += 1
        logger.info(f"Cache entry cleared: {key}")
        return True

    def clear_all(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed
        """
        removed = len(self._entries)
        self._entries.clear()
        self._stats.invalidations += removed
        logger.info(f"Cache cleared: {removed} entries removed")
        return removed

    def sweep(self) -> int:
        """
        Drop expired entries.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self._stats.expirations += len(expired)
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> dict:
        """Get cache statistics (cumulative since process start)."""
        return {
            "keys": len(self._entries),
            "ttl_seconds": self.ttl,
            **self._stats.to_dict(),
        }

    def keys(self) -> list:
        return list(self._entries)
