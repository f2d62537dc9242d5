# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Extractor pipeline — builds the identifier registry for a matched page.

Extractors run in ascending priority (stable on ties).  The first extractor
to produce a non-empty value for an identifier type owns that type; later
extractors for the same type are skipped.  Priority orders candidates, not
type slots.

Faults (failing XPath, missing element, bad pattern) mean "no value" for
that extractor and never abort the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from lxml import etree

from . import Extractor, ExtractorMethod, IdentifierRegistry, IdentifierValue
from .context import ExecutionContext
from .patterns import apply_pattern

logger = logging.getLogger("crossnav.extractors")


def _from_url(extractor: Extractor, ctx: ExecutionContext) -> str | None:
    return apply_pattern(ctx.href, extractor.pattern, extractor.replace_with)


def _from_selector(extractor: Extractor, ctx: ExecutionContext) -> str | None:
    if not extractor.selector:
        return None
    if extractor.attribute:
        node = ctx.query_selector(extractor.selector)
        base = ctx.document.get_attribute(node, extractor.attribute) if node is not None else None
    else:
        base = ctx.text_content(extractor.selector)
    if not base:
        return None
    return apply_pattern(base, extractor.pattern, extractor.replace_with)


def _from_xpath(extractor: Extractor, ctx: ExecutionContext) -> str | None:
    if not extractor.selector:
        return None
    try:
        raw = ctx.document.evaluate_string(extractor.selector)
    except etree.XPathError as e:
        logger.warning("XPath extractor %s failed: %s", extractor.id, e)
        return None
    return apply_pattern(raw, extractor.pattern, extractor.replace_with)


_HANDLERS: dict[ExtractorMethod, Callable[[Extractor, ExecutionContext], str | None]] = {
    ExtractorMethod.URL_REGEX: _from_url,
    ExtractorMethod.SELECTOR: _from_selector,
    ExtractorMethod.XPATH: _from_xpath,
}


def run_extractors(extractors: Sequence[Extractor], ctx: ExecutionContext) -> IdentifierRegistry:
    registry: IdentifierRegistry = {}
    for extractor in sorted(extractors, key=lambda e: e.priority):
        if extractor.identifier_type in registry:
            continue
        value = _HANDLERS[extractor.method](extractor, ctx)
        if not value:
            continue
        registry[extractor.identifier_type] = IdentifierValue(
            type=extractor.identifier_type,
            value=value,
            source_extractor_id=extractor.id,
        )
        logger.info("Extractor %s produced %s=%s", extractor.id, extractor.identifier_type, value)
    return registry
