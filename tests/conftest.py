"""
Shared pytest fixtures for spine-timer tests.

This module provides:
- Time zones used across the DST scenarios
- Settings cache isolation for env-driven configuration
- Logging isolation (root handlers and structlog defaults)
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
import structlog

from spine_timer.core.clock import FixedClock
from spine_timer.core.settings import get_settings

# =============================================================================
# Time zones
# =============================================================================


@pytest.fixture
def berlin() -> ZoneInfo:
    """Europe/Berlin: CET/CEST, springs forward at 02:00, falls back at 03:00."""
    return ZoneInfo("Europe/Berlin")


@pytest.fixture
def epoch_clock() -> FixedClock:
    """Clock frozen at 2020-01-01T00:00:00Z."""
    return FixedClock(datetime(2020, 1, 1, tzinfo=UTC))


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo configure_logging() so handlers never outlive a captured stream."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
