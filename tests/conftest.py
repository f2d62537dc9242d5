# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import crossnav  # noqa: F401
except ImportError:
    raise ImportError("crossnav is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from crossnav.defaults import default_profiles
from crossnav.patterns import compile_pattern
from crossnav.repository import InMemoryRuleRepository
from crossnav.store import RuleStore


@pytest.fixture(autouse=True)
def _reset_pattern_cache():
    """Compiled-pattern cache is process-wide; keep tests independent."""
    compile_pattern.cache_clear()
    yield
    compile_pattern.cache_clear()


@pytest.fixture
def repository() -> InMemoryRuleRepository:
    return InMemoryRuleRepository()


@pytest.fixture
def store(repository) -> RuleStore:
    return RuleStore(repository)


@pytest.fixture
def defaults():
    """Fresh copy of the built-in rule set."""
    return default_profiles()
