# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule regex helpers: case-insensitive compile and the shared pattern transform.

Rule patterns are user data.  ``compile_pattern`` never raises; a pattern
that fails to compile yields ``None`` and callers treat it as "never
matches".  Compiled patterns are cached process-wide (pure function of the
pattern text).
"""

from __future__ import annotations

import functools
import logging
import re

logger = logging.getLogger("crossnav.patterns")


@functools.lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile ``pattern`` case-insensitively, or return None if invalid."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning("Failed to compile rule regex %r: %s", pattern, e)
        return None


def regex_error(pattern: str) -> str | None:
    """Compile error message for ``pattern``, or None when it is valid."""
    try:
        re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        return str(e)
    return None


def pattern_search(pattern: str, value: str) -> bool:
    """True if ``pattern`` matches anywhere in ``value``; invalid patterns never match."""
    compiled = compile_pattern(pattern)
    return compiled is not None and compiled.search(value) is not None


_REPLACEMENT_TOKEN_RE = re.compile(r"\$(\$|&|`|'|\d{1,2}|<([^>]*)>)")


def _group_or_empty(match: re.Match[str], group: int | str) -> str:
    return match.group(group) or ""


def expand_replacement(template: str, match: re.Match[str]) -> str:
    """Expand a ``replaceWith`` template against ``match``.

    Templates use ``$`` tokens: ``$1``..``$99`` and ``$<name>`` for groups,
    ``$&`` for the whole match, ``` $` ``` / ``$'`` for the text before /
    after it, and ``$$`` for a literal ``$``.  A ``$n`` beyond the pattern's
    group count is kept literally, as is every ``$<name>`` when the pattern
    has no named groups.  Backslashes are literal.
    """
    group_count = match.re.groups

    def _token(token: re.Match[str]) -> str:
        code = token.group(1)
        if code == "$":
            return "$"
        if code == "&":
            return match.group(0)
        if code == "`":
            return match.string[: match.start()]
        if code == "'":
            return match.string[match.end() :]
        if code.startswith("<"):
            if not match.re.groupindex:
                return token.group(0)
            name = token.group(2)
            return _group_or_empty(match, name) if name in match.re.groupindex else ""
        if len(code) == 2 and 1 <= int(code) <= group_count:
            return _group_or_empty(match, int(code))
        if 1 <= int(code[0]) <= group_count:
            return _group_or_empty(match, int(code[0])) + code[1:]
        return token.group(0)

    return _REPLACEMENT_TOKEN_RE.sub(_token, template)


def apply_pattern(value: str, pattern: str | None = None, replace_with: str | None = None) -> str:
    """Shared extraction/rewrite transform.

    - no pattern: ``value`` unchanged
    - pattern + replacement: single (first-match) substitution, see
      ``expand_replacement`` for the template syntax
    - pattern only: first capture group, else the whole match, else ``value``

    Never discards data: an invalid or non-matching pattern falls back to
    ``value``.
    """
    if not pattern:
        return value
    compiled = compile_pattern(pattern)
    if compiled is None:
        return value
    if replace_with:
        return compiled.sub(lambda match: expand_replacement(replace_with, match), value, count=1)
    match = compiled.search(value)
    if match is None:
        return value
    if match.re.groups and match.group(1) is not None:
        return match.group(1)
    return match.group(0)
