# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-URL engine result cache.

Pure Python module — no DOM dependencies.

Keys are the exact URL string passed to ``RuleEngine.run``: no
normalization, no TTL.  Entries live until explicitly invalidated (single
URL or everything).  Only successful results are stored; "no match" is never
cached.

Single event loop, no locking: every operation is a synchronous dict
operation, so ``invalidate`` can interleave freely with an in-flight run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from . import EngineResult

logger = logging.getLogger("crossnav.cache")


# ---------------------------------------------------------------------------
# Cache stats (observability)
# ---------------------------------------------------------------------------


@dataclass
class CacheStats:
    """Counters for cache behaviour — used for logging and CLI output."""

    hits: int = 0
    misses: int = 0
    stores: int = 0
    url_invalidations: int = 0
    full_invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


# ---------------------------------------------------------------------------
# ResultCache
# ---------------------------------------------------------------------------


class ResultCache:
    """Exact-URL map of engine results."""

    def __init__(self) -> None:
        self._entries: dict[str, EngineResult] = {}
        self._stats = CacheStats()

    def lookup(self, url: str) -> EngineResult | None:
        """Cached result for exactly ``url``, counting the hit or miss."""
        result = self._entries.get(url)
        if result is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        logger.debug("Cache hit: %s", url)
        return result

    def store(self, url: str, result: EngineResult) -> None:
        self._entries[url] = result
        self._stats.stores += 1
        logger.debug("Cache store: url=%s site=%s size=%d", url, result.site_id, len(self._entries))

    def invalidate(self, url: str | None = None) -> None:
        """Evict ``url``, or everything when ``url`` is None."""
        if url is None:
            self._entries.clear()
            self._stats.full_invalidations += 1
            logger.debug("Cache invalidate_all")
            return
        self._entries.pop(url, None)
        self._stats.url_invalidations += 1
        logger.debug("Cache invalidated: %s", url)

    # -- Introspection --

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        return self._stats
