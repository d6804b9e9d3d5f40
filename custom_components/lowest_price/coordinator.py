"""DataUpdateCoordinator for the Lowest Price integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .const import (
    CONF_CONTIGUOUS,
    CONF_FROM_HOUR,
    CONF_HOURS_ON,
    CONF_INCOMPLETE_WINDOW_VALUE,
    CONF_MAX_PRICE,
    CONF_NORDPOOL_SENSOR,
    CONF_NORDPOOL_TYPE,
    CONF_OUTSIDE_WINDOW_VALUE,
    CONF_TO_HOUR,
    DEFAULT_CONTIGUOUS,
    DEFAULT_FROM_HOUR,
    DEFAULT_HOURS_ON,
    DEFAULT_INCOMPLETE_WINDOW_VALUE,
    DEFAULT_OUTSIDE_WINDOW_VALUE,
    DEFAULT_TO_HOUR,
    DOMAIN,
    NORDPOOL_TYPE_HACS,
    OVERRIDE_AUTO,
    OVERRIDE_OFF,
    OVERRIDE_ON,
    STATE_ACTIVE,
    STATE_FORCED_OFF,
    STATE_FORCED_ON,
    STATE_STANDBY,
    UPDATE_INTERVAL_MINUTES,
)
from . import scheduler
from .nordpool_adapter import async_get_samples

_LOGGER = logging.getLogger(__name__)


def _as_int(value: Any) -> Any:
    """Convert whole-number floats from number selectors to int."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_plan_config(options: Mapping[str, Any]) -> scheduler.PlanConfig:
    """Build a validated PlanConfig from config entry options.

    Raises:
        scheduler.InvalidConfigError: An option is out of range.
    """
    max_price = options.get(CONF_MAX_PRICE)
    return scheduler.PlanConfig(
        window=scheduler.Window(
            from_hour=_as_int(options.get(CONF_FROM_HOUR, DEFAULT_FROM_HOUR)),
            to_hour=_as_int(options.get(CONF_TO_HOUR, DEFAULT_TO_HOUR)),
        ),
        hours_on=_as_int(options.get(CONF_HOURS_ON, DEFAULT_HOURS_ON)),
        contiguous=bool(options.get(CONF_CONTIGUOUS, DEFAULT_CONTIGUOUS)),
        max_price=float(max_price) if max_price is not None else None,
        outside_window_value=bool(
            options.get(CONF_OUTSIDE_WINDOW_VALUE, DEFAULT_OUTSIDE_WINDOW_VALUE)
        ),
        incomplete_window_value=bool(
            options.get(CONF_INCOMPLETE_WINDOW_VALUE, DEFAULT_INCOMPLETE_WINDOW_VALUE)
        ),
    )


@dataclass
class LowestPriceData:
    """Data returned by the Lowest Price coordinator."""

    schedule: list[dict] = field(default_factory=list)
    switch_points: list[dict] = field(default_factory=list)
    current_state: str = STATE_STANDBY
    planned_state: str = STATE_STANDBY
    current_price: float | None = None
    window_state: str | None = None
    next_change: str | None = None
    on_slots: int = 0
    on_hours_in_window: float = 0.0
    no_schedule: bool = False


class LowestPriceCoordinator(DataUpdateCoordinator[LowestPriceData]):
    """Coordinator that replans the Lowest Price schedule."""

    config_entry: ConfigEntry

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            config_entry=entry,
            update_interval=timedelta(minutes=UPDATE_INTERVAL_MINUTES),
        )
        self._nordpool_entity = entry.data[CONF_NORDPOOL_SENSOR]
        self._nordpool_type = entry.data.get(CONF_NORDPOOL_TYPE, NORDPOOL_TYPE_HACS)
        self._unsub_nordpool: callback | None = None
        self._override: str = OVERRIDE_AUTO

    @property
    def override(self) -> str:
        """Return the override mode: auto, on or off."""
        return self._override

    async def async_set_override(self, mode: str) -> None:
        """Switch the override mode and publish the resulting state at once.

        The schedule is not replanned. Going back to auto writes the planned
        state of the current slot straight back to the entities.
        """
        if mode == self._override:
            return
        _LOGGER.info("Override changed from %s to %s", self._override, mode)
        self._override = mode
        if self.data is None:
            return
        planned = self._planned_state_now(self.data)
        self.async_set_updated_data(
            replace(
                self.data,
                planned_state=planned,
                current_state=self._apply_override(planned),
            )
        )

    def _planned_state_now(self, data: LowestPriceData) -> str:
        if data.no_schedule:
            return data.planned_state
        slot = scheduler.find_current_slot(data.schedule, dt_util.now())
        return slot["status"] if slot else STATE_STANDBY

    async def _async_setup(self) -> None:
        """Set up the coordinator (called once on first refresh)."""
        self._unsub_nordpool = async_track_state_change_event(
            self.hass, [self._nordpool_entity], self._on_nordpool_update
        )

    @callback
    def _on_nordpool_update(self, event: Event) -> None:
        """Replan when the Nord Pool sensor changes."""
        _LOGGER.debug("Nord Pool sensor updated, requesting refresh")
        self.hass.async_create_task(self.async_request_refresh())

    def _apply_override(self, planned_state: str) -> str:
        if self._override == OVERRIDE_ON:
            return STATE_FORCED_ON
        if self._override == OVERRIDE_OFF:
            return STATE_FORCED_OFF
        return planned_state

    async def _async_update_data(self) -> LowestPriceData:
        """Fetch prices from the Nord Pool sensor and plan the schedule."""
        now = dt_util.now()

        if self.hass.states.get(self._nordpool_entity) is None:
            raise UpdateFailed(
                f"Nord Pool sensor {self._nordpool_entity} not available"
            )

        try:
            config = build_plan_config(self.config_entry.options)
        except scheduler.InvalidConfigError as err:
            raise UpdateFailed(f"Invalid Lowest Price options: {err}") from err

        samples = await async_get_samples(
            self.hass, self._nordpool_entity, self._nordpool_type
        )

        if not samples:
            _LOGGER.error(
                "No price data available from Nord Pool sensor %s, no schedule",
                self._nordpool_entity,
            )
            planned = (
                STATE_ACTIVE if config.incomplete_window_value else STATE_STANDBY
            )
            return LowestPriceData(
                current_state=self._apply_override(planned),
                planned_state=planned,
                no_schedule=True,
            )

        try:
            schedule = scheduler.build_schedule(samples, config)
        except scheduler.PlanningError as err:
            raise UpdateFailed(f"Could not plan schedule: {err}") from err

        current_slot = scheduler.find_current_slot(schedule, now)
        if current_slot:
            planned_state = current_slot["status"]
            current_price = current_slot["price"]
            window_state = current_slot["window"]
        else:
            planned_state = STATE_STANDBY
            current_price = None
            window_state = None

        on_slots = sum(1 for s in schedule if s["status"] == STATE_ACTIVE)
        _LOGGER.debug(
            "Schedule for %s: %d of %d slots on, current slot %s",
            self._nordpool_entity, on_slots, len(schedule),
            current_slot["time"] if current_slot else None,
        )

        return LowestPriceData(
            schedule=schedule,
            switch_points=scheduler.find_switch_points(schedule),
            current_state=self._apply_override(planned_state),
            planned_state=planned_state,
            current_price=current_price,
            window_state=window_state,
            next_change=scheduler.find_next_change(schedule, current_slot, now),
            on_slots=on_slots,
            on_hours_in_window=scheduler.on_hours_in_current_run(schedule, now),
            no_schedule=False,
        )

    async def async_shutdown(self) -> None:
        """Clean up listeners."""
        if self._unsub_nordpool:
            self._unsub_nordpool()
            self._unsub_nordpool = None
        await super().async_shutdown()
