# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Property-based fuzz tests using Hypothesis.

Verifies that evaluation-time code never raises on arbitrary input: the
pattern transform, URL template rendering, URL splitting, and a full engine
pass over the built-in rules.
"""

from __future__ import annotations

from dataclasses import replace

try:
    from hypothesis import HealthCheck, example, given, settings
    from hypothesis import strategies as st
except ImportError:
    import pytest

    pytest.skip("hypothesis not installed", allow_module_level=True)

import pytest

from crossnav.context import parse_url_parts
from crossnav.defaults import default_profiles
from crossnav.document import LxmlDocument
from crossnav.engine import evaluate
from crossnav.patterns import apply_pattern
from crossnav.serializer import profiles_from_json, profiles_to_json
from crossnav.template import render
from crossnav.validator import validate

# ---------------------------------------------------------------------------
# Module-level strategies
# ---------------------------------------------------------------------------

GENERAL_TEXT = st.text(min_size=0, max_size=500)

# no unbounded quantifiers: keeps generated patterns clear of catastrophic backtracking
SHORT_PATTERN = st.text(alphabet="abc()[]{}?|.^$\\-1dws", min_size=0, max_size=12)

TEMPLATE = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N"), whitelist_characters="{}:/?=&-_ "),
    min_size=0,
    max_size=200,
)

VALID_URL = st.from_regex(
    r"https?://[a-z0-9\-]+(\.[a-z]{2,6}){1,2}(:[0-9]{1,4})?(/[a-z0-9\-._~/?#=&]*)?",
    fullmatch=True,
)

IDENTIFIER_CONTEXT = st.dictionaries(
    st.text(alphabet="abcdefghij", min_size=1, max_size=5),
    st.one_of(st.none(), GENERAL_TEXT),
    max_size=5,
)

# ---------------------------------------------------------------------------
# Shared settings
# ---------------------------------------------------------------------------

_fuzz_settings = settings(
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)


@pytest.mark.fuzz
class TestFuzzPatterns:
    @_fuzz_settings
    @given(value=GENERAL_TEXT)
    def test_no_pattern_is_identity(self, value: str) -> None:
        assert apply_pattern(value) == value
        assert apply_pattern(value, "", "x") == value

    @_fuzz_settings
    @given(value=GENERAL_TEXT, pattern=SHORT_PATTERN, replacement=SHORT_PATTERN)
    @example("ABC-123", "(", "")
    @example("ABC-123", "-", "\\9")
    def test_never_raises(self, value: str, pattern: str, replacement: str) -> None:
        assert isinstance(apply_pattern(value, pattern, replacement or None), str)


@pytest.mark.fuzz
class TestFuzzTemplate:
    @_fuzz_settings
    @given(template=TEMPLATE, context=IDENTIFIER_CONTEXT)
    @example("{}", {})
    @example("{id:}", {"id": "x"})
    @example("{a::upper}", {"a": "x"})
    def test_render_never_raises(self, template: str, context: dict) -> None:
        assert isinstance(render(template, context), str)

    @_fuzz_settings
    @given(template=st.text(alphabet="abc/:?=&", max_size=100), context=IDENTIFIER_CONTEXT)
    def test_no_placeholders_unchanged(self, template: str, context: dict) -> None:
        assert render(template, context) == template


@pytest.mark.fuzz
class TestFuzzUrls:
    @_fuzz_settings
    @given(url=VALID_URL)
    def test_parts_consistent(self, url: str) -> None:
        parts = parse_url_parts(url)
        assert parts.full == url
        assert parts.hostname == parts.hostname.lower()
        assert parts.host.startswith(parts.hostname)
        assert parts.pathname.startswith("/")


@pytest.mark.fuzz
class TestFuzzEngine:
    @_fuzz_settings
    @given(url=VALID_URL, heading=GENERAL_TEXT)
    @example("https://javdb.com/v/abc", "ABC-123")
    @example("https://javdb.com/v/abc", "")
    def test_evaluate_never_raises(self, url: str, heading: str) -> None:
        document = LxmlDocument.from_html(f"<html><body><h2><strong>{heading}</strong></h2></body></html>", url)
        result = evaluate(default_profiles(), url, document)
        if result is not None:
            assert result.identifiers
            assert all(link.target_site_id != result.site_id for link in result.links)

    @_fuzz_settings
    @given(markup=GENERAL_TEXT)
    @example("<!-- only a comment -->")
    def test_document_parse_never_raises(self, markup: str) -> None:
        document = LxmlDocument.from_html(markup, "https://example.com/")
        assert isinstance(document.body_text(), str)


@pytest.mark.fuzz
class TestFuzzRuleSets:
    @settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow])
    @given(keywords=st.lists(st.lists(st.text(alphabet="abc", min_size=1, max_size=3), max_size=3), max_size=6))
    def test_validate_round_trip_never_raises(self, keywords: list[list[str]]) -> None:
        profiles = profiles_from_json(profiles_to_json(default_profiles()))
        mutated = [replace(p, id=f"p{i}", keywords=tuple(k)) for i, (p, k) in enumerate(zip(profiles, keywords))]
        errors = validate(mutated)
        assert all(error.site_id in {p.id for p in mutated} for error in errors)
