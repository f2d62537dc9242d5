# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Built-in rule set, used when storage holds nothing (or garbage).

Kept in the persisted (camelCase JSON) shape so it doubles as a reference
example for rule authors.  ``default_profiles()`` decodes a fresh copy on
every call.
"""

from __future__ import annotations

from typing import Any

from . import SiteProfile
from .serializer import profile_from_dict

DEFAULT_RULES: list[dict[str, Any]] = [
    {
        "id": "missav",
        "name": "MissAV",
        "keywords": ["missav"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "search",
                "displayName": "MissAV",
                "requiredIdentifierType": "fanhao",
                "urlTemplate": "https://missav.ws/cn/search/{fanhao}",
                "color": "#fe628e",
            }
        ],
        "matchers": [{"id": "missav", "matchScope": "hostname", "pattern": "missav"}],
        "detailPageGuards": [{"id": "movie-title", "type": "selector", "rule": "h1.text-base"}],
        "identifierExtractors": [
            {
                "id": "title-prefix",
                "method": "selector",
                "priority": 1,
                "identifierType": "fanhao",
                "pattern": r"(\S+)\s.*",
                "selector": "h1.text-base",
            }
        ],
        "uiPlacement": {"anchor": "h1.text-base", "position": "after"},
    },
    {
        "id": "javdb",
        "name": "JavDB",
        "keywords": ["javdb"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "javdb-search-fanhao",
                "requiredIdentifierType": "fanhao",
                "urlTemplate": "https://javdb.com/search?q={fanhao:upper}",
                "displayName": "JavDB",
            }
        ],
        "matchers": [{"id": "javdb-default", "pattern": r"javdb\d*\.com", "matchScope": "hostname"}],
        "detailPageGuards": [{"id": "javdb-detail", "type": "url-regex", "rule": "/v/"}],
        "identifierExtractors": [
            {"id": "javdb-fanhao", "method": "selector", "selector": "h2 strong", "identifierType": "fanhao"}
        ],
        "uiPlacement": {"anchor": ".video-meta-panel", "position": "after"},
    },
    {
        "id": "fanza",
        "name": "Fanza",
        "keywords": ["dmm.co.jp"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "search",
                "displayName": "Fanza",
                "requiredIdentifierType": "fanhao",
                "urlTemplate": "https://www.dmm.co.jp/search/=/searchstr={id}",
                "pattern": "-",
                "replaceWith": "00",
                "color": "#ee2737",
            }
        ],
        "matchers": [],
        "detailPageGuards": [],
        "identifierExtractors": [],
        "uiPlacement": {"anchor": "body", "position": "append"},
    },
    {
        "id": "avbase",
        "name": "AVBase",
        "keywords": ["avbase"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "search",
                "displayName": "AVBase",
                "urlTemplate": "https://www.avbase.net/works?q={id}",
                "requiredIdentifierType": "fanhao",
                "color": "#3b71b0",
            }
        ],
        "matchers": [],
        "detailPageGuards": [],
        "identifierExtractors": [],
        "uiPlacement": {"anchor": "body", "position": "append"},
    },
    {
        "id": "subtitle-cat",
        "name": "subtitle-cat",
        "keywords": ["subtitlecat.com"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "search",
                "displayName": "SubtitleCat",
                "requiredIdentifierType": "fanhao",
                "urlTemplate": "https://www.subtitlecat.com/index.php?search={id}",
                "color": "#fdba29",
            }
        ],
        "matchers": [],
        "detailPageGuards": [],
        "identifierExtractors": [],
        "uiPlacement": {"anchor": "body", "position": "append"},
    },
    {
        "id": "javbus",
        "name": "JavBus",
        "keywords": ["javbus.com", "buscdn.cyou"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "detail",
                "displayName": "JavBus",
                "requiredIdentifierType": "fanhao",
                "urlTemplate": "https://www.javbus.com/{id}",
                "color": "#cc0000",
            }
        ],
        "matchers": [{"id": "any", "matchScope": "hostname", "pattern": ".*"}],
        "detailPageGuards": [{"id": "image", "type": "selector", "rule": "div.screencap"}],
        "identifierExtractors": [
            {"id": "url-suffix", "method": "url-regex", "identifierType": "fanhao", "pattern": ".+/(.+)"}
        ],
        "uiPlacement": {"anchor": "div.row.movie", "position": "after"},
    },
    {
        "id": "javlibrary",
        "name": "javlibrary",
        "keywords": ["z93j.com", "javlibrary.com"],
        "enabled": True,
        "entryPoints": [
            {
                "id": "search",
                "displayName": "Library",
                "color": "#f908bb",
                "urlTemplate": "https://www.javlibrary.com/cn/vl_searchbyid.php?keyword={id}",
                "requiredIdentifierType": "fanhao",
            }
        ],
        "matchers": [{"id": "detail", "matchScope": "query", "pattern": "v="}],
        "detailPageGuards": [{"id": "detail", "type": "selector", "rule": "#video_info"}],
        "identifierExtractors": [
            {"id": "info", "method": "selector", "identifierType": "fanhao", "selector": "#video_id td.text"}
        ],
        "uiPlacement": {"anchor": "#video_favorite_edit", "position": "after"},
    },
]


def default_profiles() -> list[SiteProfile]:
    """Fresh decoded copy of the built-in rule set."""
    return [profile_from_dict(data) for data in DEFAULT_RULES]
