"""Last-known booking list, kept for a while so reads survive a store outage.

Endpoints run in FastAPI's threadpool and share one instance, so every access
to the underlying ``TTLCache`` goes through a lock.
"""
from __future__ import annotations

import threading
from typing import Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class SimpleTTLCache(Generic[T]):
    def __init__(self, ttl: int, maxsize: int = 32) -> None:
        self._entries: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = value

    def pop(self, key: str) -> Optional[T]:
        """Drop ``key`` and hand back what was stored, if anything."""
        with self._lock:
            return self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
