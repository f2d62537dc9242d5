# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Engine orchestrator — owns the rule set and the per-URL result cache.

States:
  unloaded — no rule set yet; the first ``run()`` (or ``hydrate()``) loads it
  ready    — rule set in memory, result cache possibly populated

Per page: build an ExecutionContext, then try profiles in configured order:
enabled → keyword prefilter → matchers → guards → extractors.  The first
profile that yields at least one identifier wins; its links are built and
the result is cached under the exact URL string.  "No match" returns None
and is not cached.

The only suspension point is rule loading; evaluation itself is synchronous.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from . import EngineResult, SiteProfile
from .cache import ResultCache
from .context import ExecutionContext
from .document import DocumentSnapshot
from .extractors import run_extractors
from .guards import guards_pass
from .links import build_links
from .logging_config import evaluation_scope
from .matchers import keyword_matches, matches_profile

logger = logging.getLogger("crossnav.engine")

RuleLoader = Callable[[], Awaitable[Sequence[SiteProfile]]]


def evaluate(
    profiles: Sequence[SiteProfile],
    url: str,
    document: DocumentSnapshot,
    *,
    now: Callable[[], float] = time.time,
) -> EngineResult | None:
    """Evaluate one page against ``profiles``. Pure apart from logging."""
    ctx = ExecutionContext(url, document)

    for profile in profiles:
        if not profile.enabled:
            continue
        if not keyword_matches(profile, ctx.host):
            continue
        if not matches_profile(profile, ctx):
            continue
        if not guards_pass(profile.guards, ctx):
            logger.debug("Guards rejected %s", profile.id)
            continue
        identifiers = run_extractors(profile.extractors, ctx)
        if not identifiers:
            logger.debug("No identifiers extracted for %s", profile.id)
            continue
        links = build_links(profile, profiles, identifiers)
        logger.info("Rule matched: site=%s identifiers=%d links=%d", profile.id, len(identifiers), len(links))
        return EngineResult(profile=profile, identifiers=identifiers, links=links, timestamp=now())

    return None


class RuleEngine:
    """Long-lived orchestrator; construct once and pass it to every caller."""

    def __init__(self, load_rules: RuleLoader) -> None:
        self._load_rules = load_rules
        self._profiles: tuple[SiteProfile, ...] | None = None
        self._cache = ResultCache()
        self._load_lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self._profiles is not None

    @property
    def profiles(self) -> tuple[SiteProfile, ...]:
        return self._profiles or ()

    @property
    def cache(self) -> ResultCache:
        return self._cache

    async def _load(self) -> None:
        profiles = tuple(await self._load_rules())
        self._profiles = profiles
        logger.info("Loaded %d site rules", len(profiles))

    async def _ensure_loaded(self) -> None:
        # concurrent first runs share one load
        async with self._load_lock:
            if self._profiles is None:
                await self._load()

    async def hydrate(self) -> None:
        """(Re)load the rule set and drop every cached result."""
        async with self._load_lock:
            await self._load()
            self._cache.invalidate()

    def invalidate(self, url: str | None = None) -> None:
        """Evict one URL's result, or all results when ``url`` is None."""
        self._cache.invalidate(url)

    async def run(self, url: str, document: DocumentSnapshot) -> EngineResult | None:
        if self._profiles is None:
            await self._ensure_loaded()

        cached = self._cache.lookup(url)
        if cached is not None:
            return cached

        profiles = self.profiles
        with evaluation_scope(url, profiles=len(profiles)):
            result = evaluate(profiles, url, document)
        if result is not None:
            self._cache.store(url, result)
        return result
