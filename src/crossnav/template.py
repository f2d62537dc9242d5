# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""URL template renderer: ``{key}`` / ``{key:transform}`` tokens.

Unknown keys render as "" and unknown transforms pass the value through, so a
template always renders even for a partially configured profile.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from urllib.parse import quote

_TOKEN_RE = re.compile(r"\{([^}]+)\}")

# encodeURIComponent leaves A-Z a-z 0-9 - _ . ! ~ * ' ( ) unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"

TRANSFORMS: dict[str, Callable[[str], str]] = {
    "upper": str.upper,
    "lower": str.lower,
    "encodeURIComponent": lambda value: quote(value, safe=_URI_COMPONENT_SAFE),
}


def render(template: str, context: Mapping[str, str | None]) -> str:
    """Fill ``template`` from ``context``. Non-token text passes through verbatim."""

    def _substitute(match: re.Match[str]) -> str:
        key, _, transform = match.group(1).partition(":")
        value = context.get(key.strip()) or ""
        if not transform:
            return value
        # Only the segment up to a second ":" names the transform.
        handler = TRANSFORMS.get(transform.split(":", 1)[0].strip())
        return handler(value) if handler else value

    return _TOKEN_RE.sub(_substitute, template)
