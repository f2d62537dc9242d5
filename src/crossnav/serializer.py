# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule-set and result serialization.

Rule sets persist as a JSON array of profile objects with camelCase keys
(``identifierExtractors``, ``detailPageGuards``, ``urlTemplate`` ...).
Profile order is significant and preserved.  Missing optional fields take
their defaults; missing required strings decode as "" so the validator can
report them instead of the decoder failing on the first one.
"""

from __future__ import annotations

import json
import math
from typing import Any

from . import (
    BuiltLink,
    EngineResult,
    EntryPoint,
    Extractor,
    ExtractorMethod,
    GuardType,
    MatchScope,
    PageGuard,
    SiteProfile,
    UiPlacement,
    UiPosition,
    UrlMatcher,
)
from .errors import RuleDecodeError

# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _priority(data: dict[str, Any]) -> float:
    """Priority as given; whole numbers stay ints so they re-encode unchanged."""
    value = data.get("priority")
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise RuleDecodeError(f"priority must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise RuleDecodeError(f"priority must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise RuleDecodeError(f"priority must be finite, got {value!r}")
    return int(number) if number.is_integer() else number


def _objects(data: dict[str, Any], *keys: str) -> list[dict[str, Any]]:
    for key in keys:
        if key in data and data[key] is not None:
            items = data[key]
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise RuleDecodeError(f"{key} must be a list of objects")
            return items
    return []


def _enum(enum_cls: type, raw: Any, what: str, default: Any = None) -> Any:
    if raw is None and default is not None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise RuleDecodeError(f"Unknown {what} {raw!r} (expected one of: {allowed})") from None


def _matcher_from_dict(data: dict[str, Any]) -> UrlMatcher:
    exclude = data.get("exclude") or []
    if not isinstance(exclude, list):
        raise RuleDecodeError("exclude must be a list of patterns")
    return UrlMatcher(
        id=_str(data, "id"),
        pattern=_str(data, "pattern"),
        exclude=tuple(str(p) for p in exclude),
        match_scope=_enum(MatchScope, data.get("matchScope"), "match scope", MatchScope.FULL),
        spa_aware=bool(data.get("spaAware", False)),
    )


def _guard_from_dict(data: dict[str, Any]) -> PageGuard:
    return PageGuard(
        id=_str(data, "id"),
        type=_enum(GuardType, data.get("type"), "guard type"),
        rule=_str(data, "rule"),
        priority=_priority(data),
    )


def _extractor_from_dict(data: dict[str, Any]) -> Extractor:
    return Extractor(
        id=_str(data, "id"),
        method=_enum(ExtractorMethod, data.get("method"), "extractor method"),
        identifier_type=_str(data, "identifierType"),
        selector=_str(data, "selector"),
        attribute=_str(data, "attribute"),
        pattern=_str(data, "pattern"),
        replace_with=_str(data, "replaceWith"),
        priority=_priority(data),
    )


def _entry_point_from_dict(data: dict[str, Any]) -> EntryPoint:
    return EntryPoint(
        id=_str(data, "id"),
        required_identifier_type=_str(data, "requiredIdentifierType"),
        url_template=_str(data, "urlTemplate"),
        display_name=_str(data, "displayName"),
        pattern=_str(data, "pattern"),
        replace_with=_str(data, "replaceWith"),
        color=_str(data, "color"),
        priority=_priority(data),
    )


def _placement_from_dict(data: Any) -> UiPlacement:
    if data is None:
        return UiPlacement(anchor="")
    if not isinstance(data, dict):
        raise RuleDecodeError("uiPlacement must be an object")
    position = data.get("position")
    return UiPlacement(
        anchor=_str(data, "anchor"),
        position=_enum(UiPosition, position, "ui position") if position is not None else None,
    )


def profile_from_dict(data: dict[str, Any]) -> SiteProfile:
    """Decode one persisted profile object."""
    keywords = data.get("keywords") or []
    if not isinstance(keywords, list):
        raise RuleDecodeError(f"keywords of {data.get('id')!r} must be a list")
    return SiteProfile(
        id=_str(data, "id"),
        name=_str(data, "name"),
        keywords=tuple(str(k) for k in keywords),
        enabled=data.get("enabled") is not False,
        matchers=tuple(_matcher_from_dict(m) for m in _objects(data, "matchers")),
        guards=tuple(_guard_from_dict(g) for g in _objects(data, "detailPageGuards", "guards")),
        extractors=tuple(_extractor_from_dict(e) for e in _objects(data, "identifierExtractors", "extractors")),
        entry_points=tuple(_entry_point_from_dict(e) for e in _objects(data, "entryPoints")),
        ui_placement=_placement_from_dict(data.get("uiPlacement")),
    )


def profiles_from_json(text: str) -> list[SiteProfile]:
    """Decode a serialized rule set.

    Raises:
        RuleDecodeError: text is not JSON, not a list of objects, or names
            an unknown scope / guard type / extractor method.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RuleDecodeError(f"Rule set is not valid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise RuleDecodeError("Rule set must be a JSON array of profile objects")
    return [profile_from_dict(item) for item in data]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _optional(**fields: Any) -> dict[str, Any]:
    """Drop empty/default-valued optional fields."""
    return {k: v for k, v in fields.items() if v not in ("", None, 0, ())}


def profile_to_dict(profile: SiteProfile) -> dict[str, Any]:
    placement: dict[str, Any] = {"anchor": profile.ui_placement.anchor}
    if profile.ui_placement.position is not None:
        placement["position"] = profile.ui_placement.position.value
    return {
        "id": profile.id,
        "name": profile.name,
        "keywords": list(profile.keywords),
        "enabled": profile.enabled,
        "matchers": [
            {
                "id": m.id,
                "pattern": m.pattern,
                "matchScope": m.match_scope.value,
                **({"exclude": list(m.exclude)} if m.exclude else {}),
                **({"spaAware": True} if m.spa_aware else {}),
            }
            for m in profile.matchers
        ],
        "detailPageGuards": [
            {"id": g.id, "type": g.type.value, "rule": g.rule, **_optional(priority=g.priority)}
            for g in profile.guards
        ],
        "identifierExtractors": [
            {
                "id": e.id,
                "method": e.method.value,
                "identifierType": e.identifier_type,
                **_optional(
                    selector=e.selector,
                    attribute=e.attribute,
                    pattern=e.pattern,
                    replaceWith=e.replace_with,
                    priority=e.priority,
                ),
            }
            for e in profile.extractors
        ],
        "entryPoints": [
            {
                "id": ep.id,
                "displayName": ep.display_name,
                "requiredIdentifierType": ep.required_identifier_type,
                "urlTemplate": ep.url_template,
                **_optional(
                    pattern=ep.pattern,
                    replaceWith=ep.replace_with,
                    color=ep.color,
                    priority=ep.priority,
                ),
            }
            for ep in profile.entry_points
        ],
        "uiPlacement": placement,
    }


def profiles_to_json(profiles: list[SiteProfile], indent: int | None = None) -> str:
    """Serialize a rule set (UTF-8 text, non-ASCII preserved)."""
    return json.dumps([profile_to_dict(p) for p in profiles], ensure_ascii=False, indent=indent)


def _link_to_dict(link: BuiltLink) -> dict[str, Any]:
    return {
        "id": link.id,
        "targetSiteId": link.target_site_id,
        "displayName": link.display_name,
        "url": link.url,
        **({"color": link.color} if link.color else {}),
    }


def result_to_json(result: EngineResult, indent: int = 2) -> str:
    """Serialize an engine result for CLI output."""
    data = {
        "siteId": result.profile.id,
        "siteName": result.profile.name,
        "identifiers": {
            t: {"value": v.value, "sourceExtractorId": v.source_extractor_id} for t, v in result.identifiers.items()
        },
        "links": [_link_to_dict(link) for link in result.links],
        "uiPlacement": profile_to_dict(result.profile)["uiPlacement"],
        "timestamp": result.timestamp,
    }
    return json.dumps(data, ensure_ascii=False, indent=indent)
