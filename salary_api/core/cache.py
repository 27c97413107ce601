import json
import logging
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Union

from prometheus_client import Counter

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
DEFAULT_TTL_SECONDS = 24 * 60 * 60

CACHE_EVENTS = Counter(
    "salary_cache_events_total", "Cache lookups and writes", ["namespace", "event"]
)


def _namespace_of(key: str) -> str:
    return key.split(KEY_DELIMITER, 1)[0]


# In-process TTL cache with per-entry expiry; one instance is shared by the lookup pipeline
class CacheStore:
    def __init__(
        self,
        default_ttl: Union[int, float, timedelta] = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self.clock = clock
        # key -> (expires_at, value); insertion order doubles as write order
        self.store: Dict[str, tuple[float, Any]] = {}
        self._lock = threading.RLock()

    @staticmethod
    def make_key(namespace: str, *parts: str) -> str:
        """Build a namespaced key; every part is trimmed and lowercased."""
        normalized = [str(part).strip().lower() for part in parts]
        return KEY_DELIMITER.join([namespace, *normalized])

    @staticmethod
    def namespace_prefix(namespace: str) -> str:
        """Delimiter-qualified prefix for clear(), so "company" never matches "companyx:..."."""
        return f"{namespace}{KEY_DELIMITER}"

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired.

        An expired entry is deleted on the lookup that observes it.
        """
        namespace = _namespace_of(key)
        with self._lock:
            entry = self.store.get(key)
            if entry is None:
                CACHE_EVENTS.labels(namespace=namespace, event="miss").inc()
                return None
            expires_at, value = entry
            if self.clock() >= expires_at:
                del self.store[key]
                CACHE_EVENTS.labels(namespace=namespace, event="expired").inc()
                logger.debug(f"Cache expired: {key}")
                return None
        CACHE_EVENTS.labels(namespace=namespace, event="hit").inc()
        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: str, value: Any, ttl: Union[int, float, timedelta, None] = None):
        if ttl is None:
            ttl = self.default_ttl
        ttl_seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        with self._lock:
            # overwrite moves the key to the back of the write order
            self.store.pop(key, None)
            if self.max_entries is not None and len(self.store) >= self.max_entries:
                oldest_key = next(iter(self.store), None)
                if oldest_key is not None:
                    self.store.pop(oldest_key)
                    CACHE_EVENTS.labels(namespace=_namespace_of(oldest_key), event="evicted").inc()
            self.store[key] = (self.clock() + ttl_seconds, value)
        CACHE_EVENTS.labels(namespace=_namespace_of(key), event="write").inc()
        logger.debug(f"Cache write: {key} (expires in {ttl_seconds:.0f}s)")

    def clear(self, prefix: Optional[str] = None) -> int:
        """Delete entries whose key starts with ``prefix`` (all entries if omitted).

        Matching is a raw string prefix; pass ``namespace_prefix(...)`` to stay
        inside one namespace. Returns the number of removed entries.
        """
        with self._lock:
            if prefix:
                doomed = [key for key in self.store if key.startswith(prefix)]
            else:
                doomed = list(self.store)
            for key in doomed:
                del self.store[key]
        if prefix:
            logger.info(f"Cache entries cleared with prefix: {prefix} ({len(doomed)} removed)")
        else:
            logger.info(f"All cache entries cleared ({len(doomed)} removed)")
        return len(doomed)

    def stats(self) -> Dict[str, Any]:
        """Entry counts per namespace plus a rough memory estimate.

        memoryUsageEstimate is the serialized JSON length of every value times
        two. It is a heuristic, not byte accounting, and includes entries that
        have expired but not yet been looked up.
        """
        with self._lock:
            entries = list(self.store.items())
        by_prefix: Dict[str, int] = {}
        memory_estimate = 0
        for key, (_, value) in entries:
            namespace = _namespace_of(key)
            by_prefix[namespace] = by_prefix.get(namespace, 0) + 1
            memory_estimate += len(json.dumps(value, default=str, separators=(",", ":"), ensure_ascii=False)) * 2
        return {
            "totalEntries": len(entries),
            "byPrefix": by_prefix,
            "memoryUsageEstimate": memory_estimate,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self.store)
