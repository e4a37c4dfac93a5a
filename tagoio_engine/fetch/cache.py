"""Response cache for the request engine.

Maps request fingerprints to previously produced results for a bounded time.
Expired entries are swept before every read and write.
"""

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

import structlog


logger = structlog.get_logger()

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    """A cached result and the monotonic time it stops being visible."""

    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        """Check whether the entry is still visible at ``now``."""
        return now < self.expires_at


class ResponseCache:
    """TTL keyed store of request results.

    Entries are replaced, never updated in place. The clock returns seconds
    and defaults to ``time.monotonic``.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        """Initialize an empty cache.

        Args:
            clock: Time source in seconds.
        """
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._log = logger.bind(component="cache")

    def sweep(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self._log.debug("cache_sweep", removed=len(expired))
        return len(expired)

    def lookup(self, key: Hashable) -> CacheEntry | None:
        """Return the live entry for a key.

        Distinguishes a cached ``None`` result from a miss.

        Args:
            key: Request fingerprint.

        Returns:
            The entry, or None on a miss.
        """
        self.sweep()
        return self._entries.get(key)

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value for a key, or ``default`` on a miss."""
        entry = self.lookup(key)
        return default if entry is None else entry.value

    def set(self, key: Hashable, value: Any, ttl_ms: int) -> None:
        """Store a value for ``ttl_ms`` milliseconds.

        Args:
            key: Request fingerprint.
            value: Result to cache.
            ttl_ms: Time to live in milliseconds.
        """
        self.sweep()
        self._entries[key] = CacheEntry(
            value=value, expires_at=self._clock() + ttl_ms / 1000.0
        )

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.lookup(key) is not None  # type: ignore[arg-type]
