"""Tests for setting up and unloading the Lowest Price integration."""

from __future__ import annotations

import pytest

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lowest_price.const import (
    CONF_NAME,
    CONF_NORDPOOL_SENSOR,
    CONF_NORDPOOL_TYPE,
    DOMAIN,
    NORDPOOL_TYPE_HACS,
)

from helpers import TODAY_HOURLY, make_hourly_slots

NORDPOOL_ENTITY = "sensor.nordpool_kwh_se4_sek"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable loading of custom integrations for all tests in this module."""
    yield


@pytest.fixture
def config_entry(hass: HomeAssistant) -> MockConfigEntry:
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="Water Heater",
        data={
            CONF_NORDPOOL_SENSOR: NORDPOOL_ENTITY,
            CONF_NORDPOOL_TYPE: NORDPOOL_TYPE_HACS,
            CONF_NAME: "Water Heater",
        },
        options={},
    )
    entry.add_to_hass(hass)
    return entry


async def test_setup_and_unload(hass: HomeAssistant, config_entry: MockConfigEntry):
    """All platforms are set up and torn down with the entry."""
    hass.states.async_set(
        NORDPOOL_ENTITY, "0.5", {"raw_today": make_hourly_slots(TODAY_HOURLY)}
    )

    assert await hass.config_entries.async_setup(config_entry.entry_id)
    await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.LOADED
    assert config_entry.entry_id in hass.data[DOMAIN]

    entries = er.async_entries_for_config_entry(
        er.async_get(hass), config_entry.entry_id
    )
    assert sorted(e.unique_id for e in entries) == sorted(
        f"{config_entry.entry_id}_{key}"
        for key in (
            "status",
            "schedule",
            "on_hours_in_window",
            "active",
            "no_schedule",
            "force_on",
            "force_off",
        )
    )

    assert await hass.config_entries.async_unload(config_entry.entry_id)
    await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.NOT_LOADED
    assert DOMAIN not in hass.data


async def test_setup_retries_without_sensor(
    hass: HomeAssistant, config_entry: MockConfigEntry
):
    """A missing Nord Pool sensor defers setup until it appears."""
    await hass.config_entries.async_setup(config_entry.entry_id)
    await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.SETUP_RETRY
