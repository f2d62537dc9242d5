# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""CrossNav exception hierarchy.

All CrossNav-specific errors inherit from CrossNavError. Evaluation-time
faults (bad regex, failing XPath, missing selector target) are never raised;
only the rule-set mutation boundary and storage backends raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from . import RuleValidationError


class CrossNavError(Exception):
    """Base exception for all CrossNav errors."""


class RuleValidationFailed(CrossNavError):
    """A rule set was rejected by the validator at save/import time.

    Carries the complete error list so an editor can show every problem.
    """

    def __init__(self, errors: list[RuleValidationError]) -> None:
        self.errors = list(errors)
        summary = ", ".join(e.message for e in self.errors)
        super().__init__(f"Rule validation failed ({len(self.errors)} errors): {summary}")


class RuleDecodeError(CrossNavError):
    """Rule text is not a well-formed serialized profile list."""


class StorageError(CrossNavError):
    """Rule storage backend failure."""
