from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.cache_builder import CacheBuilder


@pytest.fixture
def cache_builder(tmp_path: Path) -> CacheBuilder:
    """Provide a reusable local repository builder rooted at the pytest tmp_path."""
    return CacheBuilder(tmp_path)
