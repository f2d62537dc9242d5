# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule storage abstraction — protocol-based raw payload store.

Defines ``RuleRepositoryProtocol`` (read/write the serialized rule set under
a key) and ``InMemoryRuleRepository`` for tests and ephemeral use.
Decoding, validation and defaults live one layer up in ``store.py``; a
repository only moves text.

Pattern: runtime-checkable Protocol + concrete implementations
(``repository_sqlite.SqliteRuleRepository`` for persistence).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

RULES_KEY = "crossnav:site-rules"


@runtime_checkable
class RuleRepositoryProtocol(Protocol):
    """Interface for rule persistence — in-memory or SQLite."""

    async def read(self, key: str) -> str | None: ...

    async def write(self, key: str, payload: str) -> None: ...

    async def close(self) -> None: ...


class InMemoryRuleRepository:
    """Dict-backed repository. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})
        self._writes = 0

    async def read(self, key: str) -> str | None:
        return self._items.get(key)

    async def write(self, key: str, payload: str) -> None:
        self._items[key] = payload
        self._writes += 1

    async def close(self) -> None:
        """No-op for in-memory repository."""

    # ── Convenience accessors (not part of Protocol) ──────────────

    @property
    def write_count(self) -> int:
        """Number of successful writes (testing/debugging)."""
        return self._writes

    @property
    def items(self) -> dict[str, str]:
        return self._items
