# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Link builder — turns an identifier registry into links to the other sites.

For every other enabled profile, entry points are tried in ascending
priority; the first one whose required identifier is present produces the
single link for that target.  Templates see every identifier by type plus
``id``, bound to the entry point's transformed value.
"""

from __future__ import annotations

from collections.abc import Sequence

from . import BuiltLink, EntryPoint, IdentifierRegistry, SiteProfile
from .patterns import apply_pattern
from .template import render


def registry_context(registry: IdentifierRegistry) -> dict[str, str]:
    return {identifier.type: identifier.value for identifier in registry.values()}


def _sorted_entry_points(profile: SiteProfile) -> list[EntryPoint]:
    return sorted(profile.entry_points, key=lambda e: e.priority)


def build_link(
    current: SiteProfile,
    target: SiteProfile,
    registry: IdentifierRegistry,
) -> BuiltLink | None:
    """Link from ``current`` to ``target``, or None if no entry point resolves."""
    base_context = registry_context(registry)
    for entry in _sorted_entry_points(target):
        identifier = registry.get(entry.required_identifier_type)
        if identifier is None or not identifier.value:
            continue
        converted = apply_pattern(identifier.value, entry.pattern, entry.replace_with)
        url = render(entry.url_template, {**base_context, "id": converted})
        return BuiltLink(
            id=f"{current.id}->{target.id}:{entry.id}",
            target_site_id=target.id,
            display_name=entry.display_name,
            url=url,
            color=entry.color,
        )
    return None


def build_links(
    current: SiteProfile,
    profiles: Sequence[SiteProfile],
    registry: IdentifierRegistry,
) -> list[BuiltLink]:
    """At most one link per other enabled profile, in profile order."""
    links: list[BuiltLink] = []
    for target in profiles:
        if target.id == current.id or not target.enabled:
            continue
        link = build_link(current, target, registry)
        if link is not None:
            links.append(link)
    return links
