"""Tests for the Lowest Price sensor entities."""

from __future__ import annotations

from unittest.mock import MagicMock

from helpers import make_config_entry

from homeassistant.components.sensor import SensorDeviceClass
from homeassistant.const import UnitOfTime
from homeassistant.helpers.entity import EntityCategory

from custom_components.lowest_price.coordinator import LowestPriceData
from custom_components.lowest_price.sensor import (
    LowestPriceSensor,
    OnHoursInWindowSensor,
    ScheduleSensor,
)


# --- Main status sensor ---


def test_status_sensor_unique_id():
    """Test main sensor has correct unique ID."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = LowestPriceSensor(coordinator, make_config_entry("abc"))
    assert sensor.unique_id == "abc_status"


def test_status_sensor_native_value_active():
    """Test sensor returns 'active' when coordinator says active."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(current_state="active")
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.native_value == "active"


def test_status_sensor_native_value_forced():
    """Test sensor reports the forced state verbatim."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(current_state="forced_off")
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.native_value == "forced_off"


def test_status_sensor_native_value_no_data():
    """Test sensor returns 'standby' when coordinator has no data."""
    coordinator = MagicMock()
    coordinator.data = None
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.native_value == "standby"


def test_status_sensor_icon_active():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(current_state="active")
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.icon == "mdi:power-plug"


def test_status_sensor_icon_standby():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(current_state="standby")
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.icon == "mdi:power-plug-off"


def test_status_sensor_icon_forced():
    """Test icons for the two override states."""
    coordinator = MagicMock()
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    coordinator.data = LowestPriceData(current_state="forced_on")
    assert sensor.icon == "mdi:hand-back-right"
    coordinator.data = LowestPriceData(current_state="forced_off")
    assert sensor.icon == "mdi:hand-back-right-off"


def test_status_sensor_icon_no_schedule():
    """Test the no-schedule icon wins over the planned state."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(current_state="active", no_schedule=True)
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.icon == "mdi:calendar-alert"


def test_status_sensor_icon_no_data():
    coordinator = MagicMock()
    coordinator.data = None
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.icon == "mdi:power-plug-off"


def test_status_sensor_attributes():
    """Test user-facing attributes exclude the full schedule."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(
        schedule=[{"time": "2026-02-06T10:00:00+01:00", "status": "active"}],
        current_state="active",
        current_price=0.1,
        window_state="inside",
        next_change="2026-02-06T11:00:00+01:00",
        on_slots=12,
    )
    sensor = LowestPriceSensor(coordinator, make_config_entry())

    assert sensor.extra_state_attributes == {
        "current_price": 0.1,
        "window_state": "inside",
        "next_change": "2026-02-06T11:00:00+01:00",
        "on_slots": 12,
        "no_schedule": False,
    }


def test_status_sensor_attributes_no_data():
    """Test that attributes return empty dict when no data."""
    coordinator = MagicMock()
    coordinator.data = None
    sensor = LowestPriceSensor(coordinator, make_config_entry())
    assert sensor.extra_state_attributes == {}


def test_status_sensor_device_info():
    """Test all entities of an entry share one device."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = LowestPriceSensor(coordinator, make_config_entry("abc"))
    assert sensor.device_info["identifiers"] == {("lowest_price", "abc")}
    assert sensor.device_info["name"] == "Test"


# --- Schedule diagnostic sensor ---


def test_schedule_sensor_entity_category():
    """Test schedule sensor is diagnostic."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = ScheduleSensor(coordinator, make_config_entry())
    assert sensor.entity_category == EntityCategory.DIAGNOSTIC


def test_schedule_sensor_unique_id():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = ScheduleSensor(coordinator, make_config_entry("abc"))
    assert sensor.unique_id == "abc_schedule"


def test_schedule_sensor_native_value():
    """Test schedule sensor returns the count of on slots."""
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(on_slots=7)
    sensor = ScheduleSensor(coordinator, make_config_entry())
    assert sensor.native_value == 7


def test_schedule_sensor_attributes():
    """Test schedule sensor exposes the schedule and its switch points."""
    schedule = [
        {"time": "2026-02-06T10:00:00+01:00", "price": 0.1, "status": "active"},
        {"time": "2026-02-06T11:00:00+01:00", "price": 0.5, "status": "standby"},
    ]
    switch_points = [
        {"time": "2026-02-06T10:00:00+01:00", "value": True},
        {"time": "2026-02-06T11:00:00+01:00", "value": False},
    ]
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(schedule=schedule, switch_points=switch_points)
    sensor = ScheduleSensor(coordinator, make_config_entry())
    assert sensor.extra_state_attributes == {
        "schedule": schedule,
        "switch_points": switch_points,
    }


def test_schedule_sensor_no_data():
    """Test schedule sensor returns None/empty when no data."""
    coordinator = MagicMock()
    coordinator.data = None
    sensor = ScheduleSensor(coordinator, make_config_entry())
    assert sensor.native_value is None
    assert sensor.extra_state_attributes == {}


# --- On hours in window diagnostic sensor ---


def test_on_hours_sensor_unit_and_class():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = OnHoursInWindowSensor(coordinator, make_config_entry())
    assert sensor.device_class == SensorDeviceClass.DURATION
    assert sensor.native_unit_of_measurement == UnitOfTime.HOURS
    assert sensor.entity_category == EntityCategory.DIAGNOSTIC


def test_on_hours_sensor_unique_id():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData()
    sensor = OnHoursInWindowSensor(coordinator, make_config_entry("abc"))
    assert sensor.unique_id == "abc_on_hours_in_window"


def test_on_hours_sensor_native_value():
    coordinator = MagicMock()
    coordinator.data = LowestPriceData(on_hours_in_window=2.5)
    sensor = OnHoursInWindowSensor(coordinator, make_config_entry())
    assert sensor.native_value == 2.5


def test_on_hours_sensor_no_data():
    coordinator = MagicMock()
    coordinator.data = None
    sensor = OnHoursInWindowSensor(coordinator, make_config_entry())
    assert sensor.native_value is None
