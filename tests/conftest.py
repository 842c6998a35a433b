"""Pytest configuration for klaw-functional tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from klaw_functional import _config

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def fresh_config() -> Generator[None]:
    """Start from the environment defaults and forget any init() afterwards."""
    _config.reset()
    yield
    _config.reset()
