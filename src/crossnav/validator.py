# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Static rule-set validation — gates save/import, never runs mid-evaluation.

``validate()`` is pure and exhaustive: every problem in every profile is
reported so an editor can show them all at once.
"""

from __future__ import annotations

from collections.abc import Sequence

from . import (
    EntryPoint,
    Extractor,
    ExtractorMethod,
    GuardType,
    PageGuard,
    RuleValidationError,
    SiteProfile,
    UrlMatcher,
    ValidationErrorKind,
)
from .patterns import regex_error

_PATTERN_METHODS = frozenset({ExtractorMethod.URL_REGEX, ExtractorMethod.XPATH})


class _Collector:
    """Accumulates validation errors across the whole rule set."""

    def __init__(self) -> None:
        self.errors: list[RuleValidationError] = []

    def missing(self, site_id: str, message: str) -> None:
        self.errors.append(RuleValidationError(ValidationErrorKind.MISSING_FIELD, site_id, message))

    def regex(self, site_id: str, pattern: str) -> None:
        error = regex_error(pattern)
        if error is not None:
            self.errors.append(
                RuleValidationError(
                    ValidationErrorKind.INVALID_REGEX,
                    site_id,
                    f"Invalid regex {pattern!r} ({error})",
                )
            )


def _check_matcher(matcher: UrlMatcher, site_id: str, out: _Collector) -> None:
    if not matcher.pattern:
        out.missing(site_id, f"Matcher {matcher.id} missing pattern")
        return
    out.regex(site_id, matcher.pattern)
    for excluded in matcher.exclude:
        out.regex(site_id, excluded)


def _check_extractor(extractor: Extractor, site_id: str, out: _Collector) -> None:
    if not extractor.identifier_type:
        out.missing(site_id, f"Extractor {extractor.id} missing identifierType")
    if extractor.method in _PATTERN_METHODS and not extractor.pattern:
        out.missing(site_id, f"Extractor {extractor.id} requires pattern")
    if extractor.pattern:
        out.regex(site_id, extractor.pattern)
    if extractor.replace_with:
        out.regex(site_id, extractor.replace_with)
    if extractor.method is ExtractorMethod.SELECTOR and not extractor.selector:
        out.missing(site_id, f"Extractor {extractor.id} requires selector")


def _check_guard(guard: PageGuard, site_id: str, out: _Collector) -> None:
    if not guard.rule:
        out.missing(site_id, f"Guard {guard.id} missing rule")
        return
    if guard.type is GuardType.URL_REGEX:
        out.regex(site_id, guard.rule)


def _check_entry_point(entry: EntryPoint, site_id: str, out: _Collector) -> None:
    if not entry.required_identifier_type:
        out.missing(site_id, f"EntryPoint {entry.id} missing requiredIdentifierType")
    if not entry.url_template:
        out.missing(site_id, f"EntryPoint {entry.id} missing urlTemplate")


def validate(profiles: Sequence[SiteProfile]) -> list[RuleValidationError]:
    """Return every validation error in ``profiles`` (empty list when valid).

    Keywords are claimed by the first profile declaring them; a later
    profile with a different id declaring the same keyword is flagged.
    """
    out = _Collector()
    claimed: dict[str, str] = {}

    for profile in profiles:
        if not profile.keywords:
            out.missing(profile.id, "keywords cannot be empty")
        if not profile.ui_placement.anchor:
            out.missing(profile.id, "uiPlacement missing anchor")
        for keyword in profile.keywords:
            owner = claimed.get(keyword)
            if owner is not None and owner != profile.id:
                out.errors.append(
                    RuleValidationError(
                        ValidationErrorKind.DUPLICATE_KEYWORD,
                        profile.id,
                        f"Keyword {keyword} already used by {owner}",
                    )
                )
            else:
                claimed[keyword] = profile.id

        for matcher in profile.matchers:
            _check_matcher(matcher, profile.id, out)
        for extractor in profile.extractors:
            _check_extractor(extractor, profile.id, out)
        for guard in profile.guards:
            _check_guard(guard, profile.id, out)
        for entry in profile.entry_points:
            _check_entry_point(entry, profile.id, out)

    return out.errors
