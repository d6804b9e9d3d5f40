"""Binary sensor platform for the Lowest Price integration."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_NAME, DOMAIN, ON_STATES
from .coordinator import LowestPriceCoordinator


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Lowest Price binary sensors from a config entry."""
    coordinator: LowestPriceCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        ActiveBinarySensor(coordinator, entry),
        NoScheduleBinarySensor(coordinator, entry),
    ])


class _LowestPriceBinarySensor(
    CoordinatorEntity[LowestPriceCoordinator], BinarySensorEntity
):
    """Base class for Lowest Price binary sensors."""

    _attr_has_entity_name = True

    def __init__(
        self, coordinator: LowestPriceCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_{self._attr_translation_key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_NAME],
            manufacturer="Lowest Price",
            model="Price Planner",
            entry_type="service",
        )


class ActiveBinarySensor(_LowestPriceBinarySensor):
    """On while the planned (or forced) state is on."""

    _attr_translation_key = "active"
    _attr_device_class = BinarySensorDeviceClass.POWER

    @property
    def is_on(self) -> bool:
        """Return True if the output is currently on."""
        if self.coordinator.data is None:
            return False
        return self.coordinator.data.current_state in ON_STATES


class NoScheduleBinarySensor(_LowestPriceBinarySensor):
    """Binary sensor indicating that no prices were available to plan with."""

    _attr_translation_key = "no_schedule"
    _attr_entity_category = EntityCategory.DIAGNOSTIC
    _attr_device_class = BinarySensorDeviceClass.PROBLEM

    @property
    def is_on(self) -> bool:
        """Return True if there is no schedule."""
        if self.coordinator.data is None:
            return False
        return self.coordinator.data.no_schedule
