"""Config flow for the Lowest Price integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlowWithReload,
)
from homeassistant.core import callback
from homeassistant.helpers.selector import (
    BooleanSelector,
    NumberSelector,
    NumberSelectorConfig,
    NumberSelectorMode,
    SelectOptionDict,
    SelectSelector,
    SelectSelectorConfig,
    TextSelector,
)
from homeassistant.util import slugify

from .const import (
    CONF_CONTIGUOUS,
    CONF_FROM_HOUR,
    CONF_HOURS_ON,
    CONF_INCOMPLETE_WINDOW_VALUE,
    CONF_MAX_PRICE,
    CONF_NAME,
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
    NORDPOOL_TYPE_UNKNOWN,
)
from .coordinator import build_plan_config
from .nordpool_adapter import detect_nordpool_type, find_all_nordpool_sensors
from .scheduler import InvalidConfigError

_LOGGER = logging.getLogger(__name__)

OPTION_KEYS = (
    CONF_FROM_HOUR,
    CONF_TO_HOUR,
    CONF_HOURS_ON,
    CONF_CONTIGUOUS,
    CONF_MAX_PRICE,
    CONF_OUTSIDE_WINDOW_VALUE,
    CONF_INCOMPLETE_WINDOW_VALUE,
)


def _optional_number(key: str, defaults: dict[str, Any]) -> vol.Optional:
    """Create vol.Optional with suggested value pre-fill (allows clearing)."""
    val = defaults.get(key)
    if val is not None:
        return vol.Optional(key, description={"suggested_value": val})
    return vol.Optional(key)


def _hour_selector() -> NumberSelector:
    return NumberSelector(
        NumberSelectorConfig(min=0, max=23, step=1, mode=NumberSelectorMode.BOX)
    )


def _options_schema(defaults: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for tunable options."""
    if defaults is None:
        defaults = {}
    return vol.Schema(
        {
            # Daily window
            vol.Required(
                CONF_FROM_HOUR,
                default=defaults.get(CONF_FROM_HOUR, DEFAULT_FROM_HOUR),
            ): _hour_selector(),
            vol.Required(
                CONF_TO_HOUR,
                default=defaults.get(CONF_TO_HOUR, DEFAULT_TO_HOUR),
            ): _hour_selector(),
            # On-duration and selection
            vol.Required(
                CONF_HOURS_ON,
                default=defaults.get(CONF_HOURS_ON, DEFAULT_HOURS_ON),
            ): NumberSelector(
                NumberSelectorConfig(
                    min=1, max=24, step=1, mode=NumberSelectorMode.BOX,
                    unit_of_measurement="hours",
                )
            ),
            vol.Required(
                CONF_CONTIGUOUS,
                default=defaults.get(CONF_CONTIGUOUS, DEFAULT_CONTIGUOUS),
            ): BooleanSelector(),
            # Optional price cap (empty = disabled)
            _optional_number(CONF_MAX_PRICE, defaults): NumberSelector(
                NumberSelectorConfig(
                    min=-10, max=100, step=0.01, mode=NumberSelectorMode.BOX,
                    unit_of_measurement="/kWh",
                )
            ),
            # Fallback output values
            vol.Required(
                CONF_OUTSIDE_WINDOW_VALUE,
                default=defaults.get(
                    CONF_OUTSIDE_WINDOW_VALUE, DEFAULT_OUTSIDE_WINDOW_VALUE
                ),
            ): BooleanSelector(),
            vol.Required(
                CONF_INCOMPLETE_WINDOW_VALUE,
                default=defaults.get(
                    CONF_INCOMPLETE_WINDOW_VALUE, DEFAULT_INCOMPLETE_WINDOW_VALUE
                ),
            ): BooleanSelector(),
        }
    )


def _extract_options(user_input: dict[str, Any]) -> dict[str, Any]:
    """Pick the option fields out of a form submission."""
    return {key: user_input.get(key) for key in OPTION_KEYS if key in user_input}


def _validate_options(options: dict[str, Any]) -> dict[str, str]:
    """Return form errors for an option set the planner would reject."""
    try:
        build_plan_config(options)
    except InvalidConfigError as err:
        _LOGGER.debug("Rejected options %s: %s", options, err)
        return {"base": "invalid_config"}
    return {}


def _sensor_selector(sensor_options: list[SelectOptionDict]) -> SelectSelector:
    return SelectSelector(
        SelectSelectorConfig(options=sensor_options, mode="dropdown")
    )


class LowestPriceConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Lowest Price."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> LowestPriceOptionsFlow:
        """Get the options flow for this handler."""
        return LowestPriceOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        all_sensors = find_all_nordpool_sensors(self.hass)

        if user_input is not None:
            nordpool_entity = user_input.get(CONF_NORDPOOL_SENSOR)
            nordpool_type = NORDPOOL_TYPE_UNKNOWN
            if nordpool_entity:
                nordpool_type = detect_nordpool_type(self.hass, nordpool_entity)
            if nordpool_type == NORDPOOL_TYPE_UNKNOWN:
                errors["base"] = "nordpool_not_found"

            options = _extract_options(user_input)
            if not errors:
                errors = _validate_options(options)

            if not errors:
                name = user_input[CONF_NAME]
                await self.async_set_unique_id(f"{nordpool_entity}_{slugify(name)}")
                self._abort_if_unique_id_configured()

                # Split data (immutable) and options (mutable)
                return self.async_create_entry(
                    title=name,
                    data={
                        CONF_NORDPOOL_SENSOR: nordpool_entity,
                        CONF_NORDPOOL_TYPE: nordpool_type,
                        CONF_NAME: name,
                    },
                    options=options,
                )

        if not all_sensors:
            errors["base"] = "nordpool_not_found"

        sensor_options = [
            SelectOptionDict(value=entity_id, label=label)
            for entity_id, _, label in all_sensors
        ]

        # Pre-select if only one sensor exists
        sensor_default: str | vol.Undefined = vol.UNDEFINED
        if len(all_sensors) == 1:
            sensor_default = all_sensors[0][0]

        schema = vol.Schema(
            {
                vol.Required(
                    CONF_NORDPOOL_SENSOR, default=sensor_default
                ): _sensor_selector(sensor_options),
                vol.Required(CONF_NAME): TextSelector(),
            }
        ).extend(_options_schema(user_input).schema)

        return self.async_show_form(
            step_id="user",
            data_schema=schema,
            errors=errors,
        )


class LowestPriceOptionsFlow(OptionsFlowWithReload):
    """Handle options flow for Lowest Price."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        errors: dict[str, str] = {}

        if user_input is not None:
            # The price sensor lives in entry data, not options
            new_sensor = user_input.pop(CONF_NORDPOOL_SENSOR, None)
            current_sensor = self.config_entry.data.get(CONF_NORDPOOL_SENSOR)
            options = _extract_options(user_input)
            errors = _validate_options(options)

            new_type = None
            if new_sensor and new_sensor != current_sensor:
                new_type = detect_nordpool_type(self.hass, new_sensor)
                if new_type == NORDPOOL_TYPE_UNKNOWN:
                    _LOGGER.warning(
                        "Selected Nord Pool sensor %s could not be validated",
                        new_sensor,
                    )
                    errors[CONF_NORDPOOL_SENSOR] = "nordpool_not_found"

            if not errors:
                if new_type is not None:
                    self.hass.config_entries.async_update_entry(
                        self.config_entry,
                        data={
                            **self.config_entry.data,
                            CONF_NORDPOOL_SENSOR: new_sensor,
                            CONF_NORDPOOL_TYPE: new_type,
                        },
                    )
                return self.async_create_entry(data=options)

        all_sensors = find_all_nordpool_sensors(self.hass)
        current_sensor = self.config_entry.data.get(CONF_NORDPOOL_SENSOR, "")

        sensor_options = [
            SelectOptionDict(value=entity_id, label=label)
            for entity_id, _, label in all_sensors
        ]
        # Keep the current sensor selectable even if it is no longer detected
        if current_sensor and not any(s[0] == current_sensor for s in all_sensors):
            sensor_options.append(
                SelectOptionDict(value=current_sensor, label=current_sensor)
            )

        schema = vol.Schema(
            {
                vol.Required(
                    CONF_NORDPOOL_SENSOR, default=current_sensor
                ): _sensor_selector(sensor_options),
            }
        ).extend(_options_schema(dict(self.config_entry.options)).schema)

        return self.async_show_form(
            step_id="init",
            data_schema=schema,
            errors=errors,
        )
