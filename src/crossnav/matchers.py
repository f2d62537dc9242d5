# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Pattern matcher — does a page belong to a site profile?

Two stages:
  1. keyword prefilter: cheap case-sensitive substring test on the URL host
  2. matchers: regex per URL scope; any matcher hit is sufficient, and every
     exclude pattern is a hard veto for its matcher
"""

from __future__ import annotations

import logging

from . import SiteProfile, UrlMatcher
from .context import ExecutionContext
from .patterns import pattern_search

logger = logging.getLogger("crossnav.matchers")


def keyword_matches(profile: SiteProfile, host: str) -> bool:
    """True if ``host`` contains at least one profile keyword.

    A profile without keywords is not prefiltered.
    """
    if not profile.keywords:
        return True
    return any(keyword in host for keyword in profile.keywords)


def matcher_hit(matcher: UrlMatcher, ctx: ExecutionContext) -> bool:
    scope_value = ctx.url_part(matcher.match_scope)
    if not pattern_search(matcher.pattern, scope_value):
        return False
    return not any(pattern_search(excluded, scope_value) for excluded in matcher.exclude)


def matches_profile(profile: SiteProfile, ctx: ExecutionContext) -> bool:
    """True if any matcher of ``profile`` hits. Malformed patterns never hit."""
    for matcher in profile.matchers:
        if matcher_hit(matcher, ctx):
            logger.debug("Matcher %s/%s hit", profile.id, matcher.id)
            return True
    return False
