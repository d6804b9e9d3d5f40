"""Sensor platform for the Lowest Price integration."""

from __future__ import annotations

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CONF_NAME,
    DOMAIN,
    ON_STATES,
    STATE_FORCED_OFF,
    STATE_FORCED_ON,
    STATE_STANDBY,
)
from .coordinator import LowestPriceCoordinator, LowestPriceData

_ICONS = {
    STATE_FORCED_ON: "mdi:hand-back-right",
    STATE_FORCED_OFF: "mdi:hand-back-right-off",
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Lowest Price sensors from a config entry."""
    coordinator: LowestPriceCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        LowestPriceSensor(coordinator, entry),
        ScheduleSensor(coordinator, entry),
        OnHoursInWindowSensor(coordinator, entry),
    ])


class LowestPriceSensor(CoordinatorEntity[LowestPriceCoordinator], SensorEntity):
    """Main sensor entity for the planned state."""

    _attr_has_entity_name = True
    _attr_translation_key = "status"

    def __init__(
        self, coordinator: LowestPriceCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_status"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_NAME],
            manufacturer="Lowest Price",
            model="Price Planner",
            entry_type="service",
        )

    @property
    def native_value(self) -> str:
        """Return active, standby, forced_on or forced_off."""
        if self.coordinator.data is None:
            return STATE_STANDBY
        return self.coordinator.data.current_state

    @property
    def icon(self) -> str:
        """Return icon based on state."""
        data = self.coordinator.data
        if data is None:
            return "mdi:power-plug-off"
        if data.no_schedule:
            return "mdi:calendar-alert"
        if data.current_state in _ICONS:
            return _ICONS[data.current_state]
        if data.current_state in ON_STATES:
            return "mdi:power-plug"
        return "mdi:power-plug-off"

    @property
    def extra_state_attributes(self) -> dict:
        """Return user-facing attributes."""
        if self.coordinator.data is None:
            return {}
        data: LowestPriceData = self.coordinator.data
        return {
            "current_price": data.current_price,
            "window_state": data.window_state,
            "next_change": data.next_change,
            "on_slots": data.on_slots,
            "no_schedule": data.no_schedule,
        }


# --- Diagnostic sensors ---


class _DiagnosticBase(CoordinatorEntity[LowestPriceCoordinator], SensorEntity):
    """Base class for Lowest Price diagnostic sensors."""

    _attr_has_entity_name = True
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self, coordinator: LowestPriceCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the diagnostic sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_{self._attr_translation_key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_NAME],
            manufacturer="Lowest Price",
            model="Price Planner",
            entry_type="service",
        )


class ScheduleSensor(_DiagnosticBase):
    """Diagnostic sensor exposing the full schedule."""

    _attr_translation_key = "schedule"
    _attr_icon = "mdi:calendar-clock"

    @property
    def native_value(self) -> int | None:
        """Return number of on slots in the schedule."""
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.on_slots

    @property
    def extra_state_attributes(self) -> dict:
        """Return the schedule and its switch points."""
        if self.coordinator.data is None:
            return {}
        return {
            "schedule": self.coordinator.data.schedule,
            "switch_points": self.coordinator.data.switch_points,
        }


class OnHoursInWindowSensor(_DiagnosticBase):
    """Diagnostic sensor showing planned on-hours in the current window run."""

    _attr_translation_key = "on_hours_in_window"
    _attr_device_class = SensorDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.HOURS

    @property
    def native_value(self) -> float | None:
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.on_hours_in_window
