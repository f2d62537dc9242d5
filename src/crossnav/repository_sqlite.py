# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""SQLite-backed rule repository.

Uses ``aiosqlite`` with a single long-lived connection.  WAL journal mode
keeps reads non-blocking while the editor saves.  Schema versioned via
``PRAGMA user_version``.

One row per storage key; the payload is the serialized rule set exactly as
written (decoding happens in ``store.py``).
"""

from __future__ import annotations

import time
from contextlib import suppress
from pathlib import Path

import aiosqlite

from .errors import StorageError

_SCHEMA_VERSION = 1

_CREATE_RULE_SETS = """
CREATE TABLE IF NOT EXISTS rule_sets (
    key        TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    updated_at REAL NOT NULL
)
"""


class SqliteRuleRepository:
    """SQLite repository implementing ``RuleRepositoryProtocol``.

    Use the ``create()`` async classmethod factory — never instantiate directly.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    @classmethod
    async def create(cls, db_path: str | Path) -> SqliteRuleRepository:
        """Open (or create) a SQLite database and initialise the schema.

        Resolves ``~`` and creates parent directories automatically.

        Raises:
            StorageError: If the existing database has a newer schema version.
        """
        path = Path(db_path).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)

        db = await aiosqlite.connect(str(path))
        try:
            await db.execute("PRAGMA journal_mode = WAL")

            cursor = await db.execute("PRAGMA user_version")
            row = await cursor.fetchone()
            current_version = row[0] if row else 0

            if current_version > _SCHEMA_VERSION:
                raise StorageError(
                    f"Database schema version {current_version} is newer than supported version {_SCHEMA_VERSION}"
                )

            if current_version < _SCHEMA_VERSION:
                await db.execute(_CREATE_RULE_SETS)
                await db.execute(f"PRAGMA user_version = {_SCHEMA_VERSION}")
                await db.commit()
        except BaseException:
            await db.close()
            raise

        return cls(db)

    async def read(self, key: str) -> str | None:
        """Stored payload for ``key``, or ``None`` if never written."""
        cursor = await self._db.execute("SELECT payload FROM rule_sets WHERE key = ?", (key,))
        row = await cursor.fetchone()
        return None if row is None else row[0]

    async def write(self, key: str, payload: str) -> None:
        """Store or replace the payload for ``key``."""
        await self._db.execute(
            "INSERT OR REPLACE INTO rule_sets (key, payload, updated_at) VALUES (?, ?, ?)",
            (key, payload, time.time()),
        )
        await self._db.commit()

    async def close(self) -> None:
        """Close the database connection. Idempotent."""
        with suppress(Exception):
            await self._db.close()
