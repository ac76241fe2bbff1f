# File: contact_scout/cache.py
"""Time-bounded memoization of crawl results, keyed by website."""
from __future__ import annotations

import time
from typing import Optional

from contact_scout.crawler.links import normalize_url
from contact_scout.logger import get_logger
from contact_scout.models import ContactRecord
from contact_scout.store import Clock, InMemoryStore, KeyValueStore

__all__ = ["ResultCache", "DEFAULT_TTL"]

DEFAULT_TTL = 300.0

log = get_logger("cache")


class ResultCache:
    """Crawl outcomes (empty ones included) remembered for ``ttl`` seconds.

    A miss and an expired entry look the same to the caller: both need a
    fresh crawl. ``put`` always overwrites.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        *,
        max_entries: Optional[int] = None,
        store: Optional[KeyValueStore[ContactRecord]] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._store: KeyValueStore[ContactRecord] = (
            store if store is not None else InMemoryStore(ttl=ttl, max_entries=max_entries, clock=clock)
        )

    @staticmethod
    def key_for(website: str) -> str:
        return normalize_url(website)

    def get(self, website: str) -> Optional[ContactRecord]:
        record = self._store.get(self.key_for(website))
        log.debug("cache %s: %s", "hit" if record is not None else "miss", website)
        return record

    def put(self, website: str, record: ContactRecord) -> None:
        self._store.set(self.key_for(website), record)

    def __len__(self) -> int:
        return len(self._store)
