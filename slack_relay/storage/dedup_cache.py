"""
Key-value caches with per-key expiry used to remember seen events.
"""
import threading
import time
from typing import Callable, Dict, Protocol

from redis import Redis


class DedupCache(Protocol):
    """A cache offering an atomic add-if-absent with a time-to-live."""

    def add(self, key: str, ttl_seconds: int) -> bool:
        """Record ``key`` unless a live record exists. True if it was recorded."""
        ...


class RedisDedupCache:
    """Dedup records stored in Redis with SET NX EX."""

    def __init__(self, client: Redis, key_prefix: str = "slack_relay:event:"):
        self.client = client
        self.key_prefix = key_prefix

    def add(self, key: str, ttl_seconds: int) -> bool:
        return bool(self.client.set(f"{self.key_prefix}{key}", "1", nx=True, ex=ttl_seconds))


class MemoryDedupCache:
    """
    In-process dedup records for single-worker deployments.

    Expired entries are purged lazily on each add.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at: Dict[str, float] = {}
        self._lock = threading.Lock()

    def add(self, key: str, ttl_seconds: int) -> bool:
        with self._lock:
            now = self._clock()
            self._expires_at = {k: t for k, t in self._expires_at.items() if t > now}
            if key in self._expires_at:
                return False
            self._expires_at[key] = now + ttl_seconds
            return True

    def __len__(self) -> int:
        return len(self._expires_at)
