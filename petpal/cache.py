"""
In-memory key/value store with per-entry expiry.

One instance is created in the FastAPI lifespan and shared by every request.
Reads self-heal (an expired entry is dropped on the read that finds it), so
the periodic sweep only bounds memory; it is never needed for correctness.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class TTLCache:
    """Thread-safe TTL cache. Absent and expired keys both read as None."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def sweep(self) -> int:
        """Drop every entry whose expiry is strictly in the past. Returns the count removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if entry.expires_at < now]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.is_fresh(self._clock())

    def __len__(self) -> int:
        # Raw entry count, including expired entries not yet swept
        with self._lock:
            return len(self._entries)
