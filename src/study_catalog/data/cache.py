"""Shared read-through cache for repository queries.

Entries are returned as-is on every hit (the same list object), the way an
ORM second-level cache hands back its stored collection. Callers that filter
or annotate results must build their own containers first.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Tuple

from ..config import CONFIG

logger = logging.getLogger('study_catalog.cache')


class QueryCache:
    def __init__(self, max_entries: int | None = None, ttl_seconds: float | None = None,
                 enabled: bool | None = None, clock: Callable[[], float] = time.monotonic):
        cfg = CONFIG.cache
        self.max_entries = cfg.max_entries if max_entries is None else max_entries
        self.ttl_seconds = cfg.ttl_seconds if ttl_seconds is None else ttl_seconds
        self.enabled = cfg.enabled if enabled is None else enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    def _expired(self, stored_at: float) -> bool:
        return self.ttl_seconds > 0 and (self._clock() - stored_at) >= self.ttl_seconds

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        if not self.enabled:
            return loader()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._expired(entry[0]):
                self._entries.move_to_end(key)
                self._hits += 1
                return entry[1]
            self._misses += 1
        # Load outside the lock; concurrent misses for one key may both hit storage.
        value = loader()
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while self.max_entries > 0 and len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                logger.debug("Evicted oldest query cache entry")
        return value

    def clear(self) -> int:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info(f"Query cache cleared ({size} entries)")
        return size

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}
