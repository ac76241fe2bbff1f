# File: contact_scout/store.py
"""contact_scout.store: process-wide key/value state shared by concurrent requests.

The result cache and the rate governor's minute windows are the only state
shared across requests. Both talk to a :class:`KeyValueStore`; the contract
is an atomic read-modify-write per key and a TTL-aware read. The bundled
:class:`InMemoryStore` is a lock-guarded ``OrderedDict``; an external store
(Redis …) can be plugged in by implementing the same protocol.
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Generic, Hashable, Optional, Protocol, Tuple, TypeVar

__all__ = ["KeyValueStore", "InMemoryStore", "Clock"]

V = TypeVar("V")
R = TypeVar("R")
Clock = Callable[[], float]


class KeyValueStore(Protocol[V]):
    def get(self, key: Hashable) -> Optional[V]: ...

    def set(self, key: Hashable, value: V) -> None: ...

    def update(self, key: Hashable, fn: Callable[[Optional[V]], Tuple[V, R]]) -> R: ...

    def __len__(self) -> int: ...


class InMemoryStore(Generic[V]):
    """Mutex-guarded map with lazy TTL expiry and optional LRU bound.

    * ``ttl`` – entries older than this read as absent; ``None`` keeps them.
    * ``max_entries`` – least recently used entries are evicted beyond it.
    * Expired entries are swept on write, at most once per ``ttl``.
    """

    def __init__(
        self,
        *,
        ttl: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._data: OrderedDict[Hashable, Tuple[V, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, key: Hashable) -> Optional[V]:
        with self._lock:
            return self._live(key, self._clock())

    def set(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._store(key, value, self._clock())

    def update(self, key: Hashable, fn: Callable[[Optional[V]], Tuple[V, R]]) -> R:
        """Atomically replace the value of *key* by ``fn(current)[0]``.

        *current* is ``None`` for missing or expired keys. Returns
        ``fn(current)[1]``.
        """
        with self._lock:
            now = self._clock()
            new_value, result = fn(self._live(key, now))
            self._store(key, new_value, now)
            return result

    # internals: caller holds the lock ------------------------------------
    def _live(self, key: Hashable, now: float) -> Optional[V]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self.ttl is not None and now - stored_at > self.ttl:
            return None
        self._data.move_to_end(key)
        return value

    def _store(self, key: Hashable, value: V, now: float) -> None:
        self._data[key] = (value, now)
        self._data.move_to_end(key)
        self._sweep(now)
        if self.max_entries is not None:
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def _sweep(self, now: float) -> None:
        if self.ttl is None or now - self._last_sweep < self.ttl:
            return
        self._last_sweep = now
        stale = [k for k, (_, stored_at) in self._data.items() if now - stored_at > self.ttl]
        for k in stale:
            del self._data[k]
