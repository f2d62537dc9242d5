# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ExecutionContext — one (URL, document snapshot) pair per evaluation.

Leaf module: depends only on the document protocol.  Holds three caches
(selector → element, selector → trimmed text, key → memoized value) so every
component in one evaluation observes the same snapshot.  A context is
created per evaluation and discarded afterwards; caches are never shared.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import urljoin, urlsplit

from . import MatchScope
from .document import DocumentSnapshot

T = TypeVar("T")

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}

BODY_TEXT_KEY = "document:body-text"


@dataclass(frozen=True, slots=True)
class UrlParts:
    """URL decomposition by scope, computed once per context."""

    host: str  # hostname[:port], port omitted when default
    hostname: str
    pathname: str
    query: str  # "?a=1" or ""
    hash: str  # "#frag" or ""
    full: str


def parse_url_parts(url: str, base_url: str = "") -> UrlParts:
    """Resolve ``url`` against ``base_url`` and split it into scopes."""
    href = urljoin(base_url, url) if base_url else url
    parsed = urlsplit(href)
    hostname = (parsed.hostname or "").lower()
    try:
        port = parsed.port
    except ValueError:
        port = None
    host = hostname
    if port is not None and _DEFAULT_PORTS.get(parsed.scheme.lower()) != port:
        host = f"{hostname}:{port}"
    pathname = parsed.path
    if not pathname and parsed.netloc:
        pathname = "/"
    return UrlParts(
        host=host,
        hostname=hostname,
        pathname=pathname,
        query=f"?{parsed.query}" if parsed.query else "",
        hash=f"#{parsed.fragment}" if parsed.fragment else "",
        full=href,
    )


class ExecutionContext:
    """Cache-coherent view of one page for the duration of one evaluation."""

    def __init__(self, url: str, document: DocumentSnapshot) -> None:
        self.document = document
        self.parts = parse_url_parts(url, document.base_url)
        self._query_cache: dict[str, Any | None] = {}
        self._text_cache: dict[str, str | None] = {}
        self._memo_cache: dict[str, Any] = {}

    @property
    def href(self) -> str:
        return self.parts.full

    @property
    def host(self) -> str:
        return self.parts.host

    def url_part(self, scope: MatchScope) -> str:
        if scope is MatchScope.HOST:
            return self.parts.host
        if scope is MatchScope.HOSTNAME:
            return self.parts.hostname
        if scope is MatchScope.PATHNAME:
            return self.parts.pathname
        if scope is MatchScope.QUERY:
            return self.parts.query
        if scope is MatchScope.HASH:
            return self.parts.hash
        return self.parts.full

    def query_selector(self, selector: str) -> Any | None:
        """First element matching ``selector``; misses are cached too."""
        if selector in self._query_cache:
            return self._query_cache[selector]
        node = self.document.select_one(selector)
        self._query_cache[selector] = node
        return node

    def text_content(self, selector: str) -> str | None:
        """Trimmed text of the first element matching ``selector``, or None."""
        if selector in self._text_cache:
            return self._text_cache[selector]
        node = self.query_selector(selector)
        text = self.document.text_of(node) if node is not None else None
        self._text_cache[selector] = text
        return text

    def memoize(self, key: str, factory: Callable[[], T]) -> T:
        """Compute ``factory()`` at most once per key for this context."""
        if key in self._memo_cache:
            return self._memo_cache[key]
        value = factory()
        self._memo_cache[key] = value
        return value

    def body_text(self) -> str:
        return self.memoize(BODY_TEXT_KEY, self.document.body_text)
