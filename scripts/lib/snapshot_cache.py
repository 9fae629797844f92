"""
In-memory TTL cache for computed analytics snapshots.
Purely a latency optimization: callers must stay correct when it is disabled.

Usage:
    from scripts.lib.snapshot_cache import SnapshotCache, cache_ttl_for_days

    cache = SnapshotCache()
    cache.set("analytics:asst_1:30:20", snapshot, ttl=cache_ttl_for_days(30))
    snapshot = cache.get("analytics:asst_1:30:20")
"""
import threading
import time
from typing import Any, Optional

from scripts.lib.logger import setup_logger

logger = setup_logger("snapshot_cache")

# (max days, ttl seconds), checked in order
TTL_POLICY = (
    (1, 60),
    (7, 300),
    (30, 900),
)
MAX_RANGE_TTL = 1800
CLEANUP_INTERVAL = 300


def cache_ttl_for_days(days: int) -> int:
    """Seconds a snapshot for a `days`-long range stays fresh."""
    for max_days, ttl in TTL_POLICY:
        if days <= max_days:
            return ttl
    return MAX_RANGE_TTL


class SnapshotCache:
    """Thread-safe key -> value store with per-entry TTL and lazy cleanup."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._entries: dict = {}  # key -> (value, expires_at)
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._maybe_cleanup()
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _maybe_cleanup(self):
        now = self._clock()
        if now - self._last_cleanup < CLEANUP_INTERVAL:
            return
        expired = [k for k, (_, exp) in self._entries.items() if now >= exp]
        for key in expired:
            del self._entries[key]
        self._last_cleanup = now
        if expired:
            logger.debug("Evicted %d expired snapshots", len(expired))
