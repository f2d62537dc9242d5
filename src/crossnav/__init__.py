# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""CrossNav: declarative site profiles for cross-site navigation links.

Given a page (URL + document snapshot) and a set of user-authored site
profiles, the engine decides which profile the page belongs to, extracts
typed identifiers from it, and builds links to equivalent pages on the other
configured sites:
- matchers / guards: is this page a detail page of a known site?
- extractors: which identifiers (catalog codes, ids) does it expose?
- entry points: how does every other site turn an identifier into a URL?
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class MatchScope(StrEnum):
    """URL part a matcher is tested against."""

    HOST = "host"
    HOSTNAME = "hostname"
    PATHNAME = "pathname"
    QUERY = "query"
    HASH = "hash"
    FULL = "full"


class GuardType(StrEnum):
    URL_REGEX = "url-regex"
    SELECTOR = "selector"
    TEXT_CONTENT = "text-content"


class ExtractorMethod(StrEnum):
    URL_REGEX = "url-regex"
    SELECTOR = "selector"
    XPATH = "xpath"


class UiPosition(StrEnum):
    BEFORE = "before"
    AFTER = "after"
    APPEND = "append"
    PREPEND = "prepend"
    FLOATING = "floating"


class ValidationErrorKind(StrEnum):
    DUPLICATE_KEYWORD = "duplicate-keyword"
    INVALID_REGEX = "invalid-regex"
    MISSING_FIELD = "missing-field"


@dataclass(frozen=True, slots=True)
class UrlMatcher:
    """Regex test for "is this page on this site"."""

    id: str
    pattern: str
    exclude: tuple[str, ...] = ()  # every exclude must miss for a hit
    match_scope: MatchScope = MatchScope.FULL
    spa_aware: bool = False  # consumed by the navigation observer, not the core


@dataclass(frozen=True, slots=True)
class PageGuard:
    """Secondary test for "is this a detail page"."""

    id: str
    type: GuardType
    rule: str
    priority: float = 0


@dataclass(frozen=True, slots=True)
class Extractor:
    """Derives one typed identifier value from the page."""

    id: str
    method: ExtractorMethod
    identifier_type: str
    selector: str = ""  # CSS selector, or the XPath expression for xpath
    attribute: str = ""
    pattern: str = ""
    replace_with: str = ""
    priority: float = 0


@dataclass(frozen=True, slots=True)
class EntryPoint:
    """A target site's recipe for turning an identifier into a URL."""

    id: str
    required_identifier_type: str
    url_template: str
    display_name: str
    pattern: str = ""
    replace_with: str = ""
    color: str = ""
    priority: float = 0


@dataclass(frozen=True, slots=True)
class UiPlacement:
    """Where the rendering collaborator attaches links. Opaque to the engine."""

    anchor: str
    position: UiPosition | None = None


@dataclass(frozen=True, slots=True)
class SiteProfile:
    """A site's rule bundle. Replaced wholesale, never mutated."""

    id: str
    name: str
    keywords: tuple[str, ...]
    ui_placement: UiPlacement
    matchers: tuple[UrlMatcher, ...] = ()
    guards: tuple[PageGuard, ...] = ()
    extractors: tuple[Extractor, ...] = ()
    entry_points: tuple[EntryPoint, ...] = ()
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class IdentifierValue:
    type: str
    value: str
    source_extractor_id: str


# identifier type -> value; first writer per type wins
IdentifierRegistry = dict[str, IdentifierValue]


@dataclass(frozen=True, slots=True)
class BuiltLink:
    """A synthesized link to an equivalent page on another site. Never persisted."""

    id: str  # "{current}->{target}:{entry_point}"
    target_site_id: str
    display_name: str
    url: str
    color: str = ""


@dataclass(frozen=True, slots=True)
class RuleValidationError:
    kind: ValidationErrorKind
    site_id: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind}] {self.site_id}: {self.message}"


@dataclass(frozen=True, slots=True)
class EngineResult:
    """Outcome of a successful evaluation: the winning profile and its links."""

    profile: SiteProfile
    identifiers: IdentifierRegistry
    links: list[BuiltLink] = field(default_factory=list)
    timestamp: float = 0.0

    @property
    def site_id(self) -> str:
        return self.profile.id
