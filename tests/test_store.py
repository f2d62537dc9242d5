# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for store.py — load/save/import/export through the validation gate."""

from __future__ import annotations

import pytest

from crossnav import ValidationErrorKind
from crossnav.errors import RuleDecodeError, RuleValidationFailed
from crossnav.repository import RULES_KEY, InMemoryRuleRepository, RuleRepositoryProtocol
from crossnav.serializer import profiles_to_json
from crossnav.store import RuleStore
from tests._rule_helpers import make_profile, matcher


def _valid_profile(id: str, keyword: str | None = None):
    return make_profile(id, keywords=(keyword or id,), matchers=(matcher(id),))


class TestRepository:
    def test_in_memory_satisfies_protocol(self, repository):
        assert isinstance(repository, RuleRepositoryProtocol)

    async def test_read_missing_key(self, repository):
        assert await repository.read("nope") is None


class TestLoad:
    async def test_empty_storage_yields_defaults(self, store, defaults):
        assert await store.load() == defaults

    async def test_stored_rules_loaded(self):
        stored = [_valid_profile("alpha")]
        store = RuleStore(InMemoryRuleRepository({RULES_KEY: profiles_to_json(stored)}))
        assert await store.load() == stored

    @pytest.mark.parametrize("payload", ["{not json", '{"id": "x"}', '[{"id": "x", "matchers": [{"matchScope": "port"}]}]'])
    async def test_corrupt_storage_falls_back_to_defaults(self, payload, defaults):
        store = RuleStore(InMemoryRuleRepository({RULES_KEY: payload}))
        assert await store.load() == defaults

    async def test_cached_after_first_read(self, repository, store):
        await store.load()
        repository.items[RULES_KEY] = profiles_to_json([_valid_profile("alpha")])
        assert [p.id for p in await store.load()][0] == "missav"

    async def test_returns_copy(self, store):
        first = await store.load()
        first.clear()
        assert await store.load()

    async def test_invalidate_rereads(self, repository, store):
        await store.load()
        repository.items[RULES_KEY] = profiles_to_json([_valid_profile("alpha")])
        store.invalidate()
        assert [p.id for p in await store.load()] == ["alpha"]

    async def test_custom_key(self, repository):
        await repository.write("other", profiles_to_json([_valid_profile("alpha")]))
        store = RuleStore(repository, key="other")
        assert [p.id for p in await store.load()] == ["alpha"]


class TestSave:
    async def test_valid_rules_persisted(self, repository, store):
        profiles = [_valid_profile("alpha"), _valid_profile("beta")]
        await store.save(profiles)
        assert repository.write_count == 1
        assert await store.load() == profiles
        store.invalidate()
        assert await store.load() == profiles

    async def test_invalid_rules_rejected_with_all_errors(self, repository, store):
        profiles = [
            _valid_profile("alpha", "shared"),
            _valid_profile("beta", "shared"),
            make_profile("gamma", matchers=(matcher("("),)),
        ]
        with pytest.raises(RuleValidationFailed) as exc_info:
            await store.save(profiles)
        kinds = sorted(e.kind for e in exc_info.value.errors)
        assert kinds == sorted([ValidationErrorKind.DUPLICATE_KEYWORD, ValidationErrorKind.INVALID_REGEX])
        assert repository.write_count == 0
        assert RULES_KEY not in repository.items

    async def test_rejected_save_keeps_previous_rules(self, store):
        good = [_valid_profile("alpha")]
        await store.save(good)
        with pytest.raises(RuleValidationFailed):
            await store.save([make_profile("beta", keywords=())])
        assert await store.load() == good


class TestImportExport:
    async def test_export_import_round_trip(self, store, defaults):
        text = await store.export()
        other = RuleStore(InMemoryRuleRepository())
        imported = await other.import_rules(text)
        assert imported == defaults
        assert await other.load() == defaults

    async def test_export_is_pretty(self, store):
        assert (await store.export()).startswith("[\n  {")

    async def test_import_malformed_json(self, repository, store):
        with pytest.raises(RuleDecodeError):
            await store.import_rules("[{")
        assert repository.write_count == 0

    async def test_import_invalid_rules(self, repository, store):
        text = profiles_to_json([make_profile("alpha", keywords=())])
        with pytest.raises(RuleValidationFailed):
            await store.import_rules(text)
        assert repository.write_count == 0
