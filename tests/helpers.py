"""Shared test helpers for Lowest Price tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

# Timezone for testing (CET)
TZ = timezone(timedelta(hours=1), name="CET")

# Prices simulate a typical Nordic winter day:
# cheap at night, expensive in morning/evening, moderate midday.
TODAY_HOURLY = [
    0.10, 0.08, 0.05, 0.03, 0.04, 0.06,  # 00-05: cheap night
    0.15, 0.35, 0.50, 0.45, 0.30, 0.25,  # 06-11: morning ramp
    0.20, 0.18, 0.15, 0.12, 0.14, 0.40,  # 12-17: midday + evening ramp
    0.55, 0.60, 0.50, 0.35, 0.20, 0.12,  # 18-23: evening peak + decline
]
TOMORROW_HOURLY = [
    0.08, 0.06, 0.04, 0.02, 0.03, 0.05,  # 00-05
    0.12, 0.30, 0.45, 0.40, 0.28, 0.22,  # 06-11
    0.18, 0.16, 0.13, 0.10, 0.12, 0.35,  # 12-17
    0.50, 0.55, 0.45, 0.30, 0.18, 0.10,  # 18-23
]


def make_nordpool_slot(
    hour: int, price: float, day_offset: int = 0, minute: int = 0, minutes: int = 15
) -> dict:
    """Create a Nordpool-style price slot for testing.

    Args:
        hour: Hour of the day (0-23).
        price: Price value.
        day_offset: 0 for today, 1 for tomorrow.
        minute: Minute within the hour the slot starts at.
        minutes: Slot length.

    Returns:
        Dict matching Nordpool raw_today/raw_tomorrow format.
    """
    base = datetime(2026, 2, 6, tzinfo=TZ) + timedelta(days=day_offset)
    start = base.replace(hour=hour, minute=minute)
    end = start + timedelta(minutes=minutes)
    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "value": price,
    }


def make_nordpool_hour(hour: int, price: float, day_offset: int = 0) -> list[dict]:
    """Create 4 quarter-hour slots sharing one price for a full hour."""
    return [
        make_nordpool_slot(hour, price, day_offset, minute=q * 15) for q in range(4)
    ]


def make_hourly_slots(prices: list[float], day_offset: int = 0) -> list[dict]:
    """Create one-hour slots starting at midnight, one per price."""
    return [
        make_nordpool_slot(h, p, day_offset, minutes=60) for h, p in enumerate(prices)
    ]


def make_config_entry(entry_id="test_entry_id"):
    """Create a mock ConfigEntry for testing."""
    entry = MagicMock()
    entry.entry_id = entry_id
    entry.data = {"name": "Test"}
    return entry
