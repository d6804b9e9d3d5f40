"""Switch platform for the Lowest Price integration.

The two switches are views of one override mode on the coordinator, so at
most one of them is on. Turning the active one off returns to the plan.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from homeassistant.components.switch import SwitchEntity, SwitchEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.restore_state import RestoreEntity
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_NAME, DOMAIN, OVERRIDE_AUTO, OVERRIDE_OFF, OVERRIDE_ON
from .coordinator import LowestPriceCoordinator

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class OverrideSwitchEntityDescription(SwitchEntityDescription):
    """Describes an override switch and the mode it selects."""

    mode: str


OVERRIDE_SWITCHES: tuple[OverrideSwitchEntityDescription, ...] = (
    OverrideSwitchEntityDescription(
        key="force_on",
        translation_key="force_on",
        icon="mdi:hand-back-right",
        mode=OVERRIDE_ON,
    ),
    OverrideSwitchEntityDescription(
        key="force_off",
        translation_key="force_off",
        icon="mdi:hand-back-right-off",
        mode=OVERRIDE_OFF,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Lowest Price override switches from a config entry."""
    coordinator: LowestPriceCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        OverrideSwitch(coordinator, entry, description)
        for description in OVERRIDE_SWITCHES
    )


class OverrideSwitch(
    CoordinatorEntity[LowestPriceCoordinator], SwitchEntity, RestoreEntity
):
    """Holds the output in one state regardless of the plan while on."""

    entity_description: OverrideSwitchEntityDescription
    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: LowestPriceCoordinator,
        entry: ConfigEntry,
        description: OverrideSwitchEntityDescription,
    ) -> None:
        """Initialize the switch."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_NAME],
            manufacturer="Lowest Price",
            model="Price Planner",
            entry_type="service",
        )

    @property
    def is_on(self) -> bool:
        """Return True if the coordinator is in this switch's mode."""
        return self.coordinator.override == self.entity_description.mode

    @property
    def extra_state_attributes(self) -> dict:
        """Return the state the plan would give without the override."""
        if self.coordinator.data is None:
            return {}
        return {"planned_state": self.coordinator.data.planned_state}

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Select this override, replacing the other one."""
        await self.coordinator.async_set_override(self.entity_description.mode)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Return to the plan if this override is the active one."""
        if self.is_on:
            await self.coordinator.async_set_override(OVERRIDE_AUTO)

    async def async_added_to_hass(self) -> None:
        """Restore the override mode on startup."""
        await super().async_added_to_hass()
        last_state = await self.async_get_last_state()
        if last_state is not None and last_state.state == "on":
            _LOGGER.info("Restoring override %s", self.entity_description.mode)
            await self.coordinator.async_set_override(self.entity_description.mode)
