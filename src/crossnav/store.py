# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule store — the only path by which a rule set is accepted or persisted.

- ``load()`` feeds ``RuleEngine`` (cached after the first read)
- ``save()`` / ``import_rules()`` run the validator and refuse the whole
  rule set on any error; nothing is partially applied
- ``export()`` round-trips with ``import_rules()``
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from . import SiteProfile
from .defaults import default_profiles
from .errors import RuleDecodeError, RuleValidationFailed
from .repository import RULES_KEY, RuleRepositoryProtocol
from .serializer import profiles_from_json, profiles_to_json
from .validator import validate

logger = logging.getLogger("crossnav.store")


class RuleStore:
    def __init__(self, repository: RuleRepositoryProtocol, *, key: str = RULES_KEY) -> None:
        self._repository = repository
        self._key = key
        self._profiles: list[SiteProfile] | None = None

    async def load(self) -> list[SiteProfile]:
        """Current rule set; built-in defaults when storage is empty or unreadable."""
        if self._profiles is not None:
            return list(self._profiles)
        raw = await self._repository.read(self._key)
        if not raw:
            self._profiles = default_profiles()
        else:
            try:
                self._profiles = profiles_from_json(raw)
            except RuleDecodeError as e:
                logger.warning("Failed to decode stored rules; using defaults: %s", e)
                self._profiles = default_profiles()
        return list(self._profiles)

    async def save(self, profiles: Sequence[SiteProfile]) -> None:
        """Validate and persist ``profiles``.

        Raises:
            RuleValidationFailed: with every validation error; nothing is written.
        """
        profiles = list(profiles)
        errors = validate(profiles)
        if errors:
            raise RuleValidationFailed(errors)
        await self._repository.write(self._key, profiles_to_json(profiles))
        self._profiles = profiles
        logger.info("Saved %d site rules", len(profiles))

    async def export(self) -> str:
        """Pretty-printed JSON of the current rule set."""
        return profiles_to_json(await self.load(), indent=2)

    async def import_rules(self, text: str) -> list[SiteProfile]:
        """Decode ``text`` and save it through the validation gate.

        Raises:
            RuleDecodeError: ``text`` is not a serialized profile list.
            RuleValidationFailed: the decoded rule set is invalid.
        """
        profiles = profiles_from_json(text)
        await self.save(profiles)
        return profiles

    def invalidate(self) -> None:
        """Forget the in-memory copy; the next ``load()`` re-reads storage."""
        self._profiles = None
