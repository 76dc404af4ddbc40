"""In-memory cache with per-entry expiration."""

import dataclasses
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

from formula_utils.config import CACHE_SWEEP_INTERVAL, CACHE_TTL

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclasses.dataclass
class CacheEntry:
    value: Any
    expires_at: float


class MemoryCache:
    """A thread-safe key-value store whose entries expire after a TTL.

    Expired entries are removed when they are read. A background sweeper can
    also be started to purge expired entries that are never read again.

    Attributes:
        clock: Zero-argument callable returning the current time in seconds
        sweep_interval: Seconds between background sweeps
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: Optional[float] = None,
    ):
        """Initialize the cache.

        Args:
            clock: Time source; tests pass a controllable clock
            sweep_interval: If given, start a background sweeper running
                every ``sweep_interval`` seconds

        Raises:
            ValueError: If ``sweep_interval`` is not positive
        """
        if sweep_interval is not None and sweep_interval <= 0:
            raise ValueError(f"sweep_interval must be positive, got {sweep_interval}")
        self.clock = clock
        self.sweep_interval = CACHE_SWEEP_INTERVAL if sweep_interval is None else sweep_interval
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._sweeper: Optional[threading.Thread] = None

        if sweep_interval is not None:
            self.start_sweeper()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a cached value, or ``default`` if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if self.clock() >= entry.expires_at:
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value that expires ``ttl_seconds`` from now."""
        with self._lock:
            self._entries[key] = CacheEntry(value, self.clock() + ttl_seconds)

    def has(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        return self.get(key, _MISSING) is not _MISSING

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self.clock()
            expired = [k for k, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            keys: List[str] = list(self._entries)
        return {"size": len(keys), "keys": keys}

    def start_sweeper(self) -> None:
        """Start the background sweeper thread if it is not running."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop_event = threading.Event()
        self._sweeper = threading.Thread(
            target=self._sweep_loop,
            args=(self._stop_event,),
            name="formula-cache-sweeper",
            daemon=True,
        )
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join()
        self._sweeper = None
        self._stop_event = None

    def _sweep_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.sweep_interval):
            self.sweep()

    def cached_fetch(
        self,
        key: str,
        producer: Callable[[], T],
        ttl_seconds: float = CACHE_TTL["medium"],
    ) -> T:
        """Return the cached value for ``key``, producing and storing it on a miss.

        ``producer`` is called at most once. If it raises, the exception
        propagates and nothing is cached.

        Args:
            key: Cache key
            producer: Zero-argument callable computing the value
            ttl_seconds: Lifetime of a newly produced value

        Returns:
            The cached or freshly produced value
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug(f"Cache hit for {key}")
            return cached

        logger.debug(f"Cache miss for {key}")
        value = producer()
        self.set(key, value, ttl_seconds)
        return value
