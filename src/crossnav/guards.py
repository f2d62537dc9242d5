# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Guard evaluator — is a matched page a detail page worth acting on?

Guards run in ascending priority (stable on ties); the first passing guard
short-circuits with an overall pass.  No guards means pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from . import GuardType, PageGuard
from .context import ExecutionContext
from .patterns import compile_pattern

logger = logging.getLogger("crossnav.guards")


def _url_regex(guard: PageGuard, ctx: ExecutionContext) -> bool:
    compiled = compile_pattern(guard.rule)
    if compiled is None:
        logger.warning("Invalid guard regex in %s: %r", guard.id, guard.rule)
        return False
    return compiled.search(ctx.href) is not None


def _selector(guard: PageGuard, ctx: ExecutionContext) -> bool:
    return ctx.query_selector(guard.rule) is not None


def _text_content(guard: PageGuard, ctx: ExecutionContext) -> bool:
    return guard.rule in ctx.body_text()


_EVALUATORS: dict[GuardType, Callable[[PageGuard, ExecutionContext], bool]] = {
    GuardType.URL_REGEX: _url_regex,
    GuardType.SELECTOR: _selector,
    GuardType.TEXT_CONTENT: _text_content,
}


def guards_pass(guards: Sequence[PageGuard] | None, ctx: ExecutionContext) -> bool:
    if not guards:
        return True
    for guard in sorted(guards, key=lambda g: g.priority):
        passed = _EVALUATORS[guard.type](guard, ctx)
        logger.debug("Guard %s => %s", guard.id, passed)
        if passed:
            return True
    return False
