"""Shared test fixtures for Lowest Price tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from helpers import TODAY_HOURLY, TOMORROW_HOURLY, TZ, make_nordpool_hour


@pytest.fixture
def now() -> datetime:
    """Return a fixed 'now' for deterministic testing."""
    return datetime(2026, 2, 6, 14, 30, 0, tzinfo=TZ)


@pytest.fixture
def today_prices() -> list[dict]:
    """Return 96 quarter-hour slots of today's price data."""
    return [
        slot for h, p in enumerate(TODAY_HOURLY) for slot in make_nordpool_hour(h, p)
    ]


@pytest.fixture
def tomorrow_prices() -> list[dict]:
    """Return 96 quarter-hour slots of tomorrow's price data."""
    return [
        slot
        for h, p in enumerate(TOMORROW_HOURLY)
        for slot in make_nordpool_hour(h, p, day_offset=1)
    ]
