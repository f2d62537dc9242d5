# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document snapshot — the read-only page view the engine evaluates against.

``DocumentSnapshot`` is the capability set the engine needs; ``LxmlDocument``
implements it over an lxml HTML tree.  Any other DOM (a live browser page
proxy, a test double) can be plugged in by implementing the protocol.

CSS selectors go through ``lxml.cssselect`` (requires ``cssselect``).  An
invalid selector behaves like a selector that matches nothing.
"""

from __future__ import annotations

import codecs
import logging
import math
import re
from typing import Protocol, runtime_checkable

import lxml.html
from lxml import etree
from lxml.cssselect import CSSSelector, SelectorError

logger = logging.getLogger("crossnav.document")

_EMPTY_DOCUMENT = b"<html><body></body></html>"

_META_CHARSET_RE = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?([\w.:-]+)""", re.IGNORECASE)


def decode_markup(data: bytes) -> str:
    """Decode raw page bytes using the BOM or the first ``<meta>`` charset."""
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8) :].decode("utf-8", errors="replace")
    match = _META_CHARSET_RE.search(data[:4096])
    encoding = match.group(1).decode("ascii") if match else "utf-8"
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        logger.warning("Unknown page charset %r; decoding as UTF-8", encoding)
        return data.decode("utf-8", errors="replace")


@runtime_checkable
class DocumentSnapshot(Protocol):
    """Pure reads against one snapshot of a page."""

    @property
    def base_url(self) -> str: ...

    def select_one(self, selector: str) -> object | None: ...

    def get_attribute(self, element: object, name: str) -> str | None: ...

    def text_of(self, element: object) -> str: ...

    def evaluate_string(self, expression: str) -> str: ...

    def body_text(self) -> str: ...


def _xpath_number_to_string(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value):
        return str(int(value))
    return repr(value)


def _xpath_to_string(result: object) -> str:
    """Coerce an XPath result to its string value (first node for node-sets)."""
    if isinstance(result, bool):
        return "true" if result else "false"
    if isinstance(result, float):
        return _xpath_number_to_string(result)
    if isinstance(result, list):
        if not result:
            return ""
        return _xpath_to_string(result[0])
    if isinstance(result, etree._Element):
        return result.text_content() if isinstance(result, lxml.html.HtmlElement) else "".join(result.itertext())
    # attribute values / text nodes are _ElementUnicodeResult (a str subclass)
    return str(result)


class LxmlDocument:
    """``DocumentSnapshot`` backed by an lxml HTML tree.

    Build with ``from_html()`` for raw markup, or wrap an existing root.
    """

    def __init__(self, root: lxml.html.HtmlElement, base_url: str = "") -> None:
        self._root = root
        self._base_url = base_url

    @classmethod
    def from_html(cls, html: str | bytes, base_url: str = "") -> LxmlDocument:
        """Parse markup leniently (broken HTML is repaired, never rejected).

        ``bytes`` are decoded with the charset the page declares (UTF-8 when
        it declares none) before parsing.
        """
        if isinstance(html, bytes):
            html = decode_markup(html)
        html = html.encode("utf-8")
        parser = lxml.html.HTMLParser(recover=True, encoding="utf-8")
        if not html.strip():
            html = _EMPTY_DOCUMENT
        try:
            root = lxml.html.document_fromstring(html, parser=parser, ensure_head_body=True, base_url=base_url or None)
        except etree.ParserError:
            # markup with no elements at all, e.g. only a comment
            root = lxml.html.document_fromstring(_EMPTY_DOCUMENT, parser=parser, base_url=base_url or None)
        return cls(root, base_url=base_url)

    @property
    def root(self) -> lxml.html.HtmlElement:
        return self._root

    @property
    def base_url(self) -> str:
        return self._base_url

    def select_one(self, selector: str) -> lxml.html.HtmlElement | None:
        try:
            matches = CSSSelector(selector)(self._root)
        except (SelectorError, etree.XPathError) as e:
            logger.warning("Invalid CSS selector %r: %s", selector, e)
            return None
        return matches[0] if matches else None

    def get_attribute(self, element: object, name: str) -> str | None:
        return element.get(name)  # type: ignore[attr-defined]

    def text_of(self, element: object) -> str:
        return element.text_content().strip()  # type: ignore[attr-defined]

    def evaluate_string(self, expression: str) -> str:
        """Evaluate an XPath expression and return its string value.

        Raises ``lxml.etree.XPathError`` for malformed expressions; callers
        treat that as an evaluation fault.
        """
        return _xpath_to_string(self._root.xpath(expression))

    def body_text(self) -> str:
        body = self._root.find("body")
        if body is None:
            return ""
        return body.text_content()
