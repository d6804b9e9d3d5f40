"""Adapter turning HACS Nordpool or native HA Nordpool prices into samples."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from homeassistant.util import dt as dt_util

from .const import NORDPOOL_TYPE_HACS, NORDPOOL_TYPE_NATIVE, NORDPOOL_TYPE_UNKNOWN
from .scheduler import Sample

_LOGGER = logging.getLogger(__name__)


def detect_nordpool_type(hass: HomeAssistant, entity_id: str) -> str:
    """Detect whether an entity is a HACS Nordpool or native HA Nordpool sensor.

    Returns:
        "hacs", "native", or "unknown".
    """
    state = hass.states.get(entity_id)
    if state is not None and state.attributes.get("raw_today") is not None:
        return NORDPOOL_TYPE_HACS

    entity_entry = er.async_get(hass).async_get(entity_id)
    if entity_entry is not None and entity_entry.platform == "nordpool":
        return NORDPOOL_TYPE_NATIVE

    return NORDPOOL_TYPE_UNKNOWN


def find_all_nordpool_sensors(hass: HomeAssistant) -> list[tuple[str, str, str]]:
    """List every sensor that can supply prices.

    Returns:
        List of (entity_id, nordpool_type, label) tuples, HACS sensors first.
    """
    found: list[tuple[str, str, str]] = []
    seen: set[str] = set()

    for state in hass.states.async_all("sensor"):
        if state.attributes.get("raw_today") is not None:
            label = state.attributes.get("friendly_name") or state.entity_id
            found.append((state.entity_id, NORDPOOL_TYPE_HACS, label))
            seen.add(state.entity_id)

    registry = er.async_get(hass)
    for config_entry in hass.config_entries.async_entries("nordpool"):
        for entity_entry in er.async_entries_for_config_entry(
            registry, config_entry.entry_id
        ):
            if entity_entry.domain != "sensor" or entity_entry.entity_id in seen:
                continue
            # One selectable sensor per price area
            if not (entity_entry.unique_id or "").endswith("current_price"):
                continue
            state = hass.states.get(entity_entry.entity_id)
            label = (
                state.attributes.get("friendly_name") if state is not None else None
            ) or entity_entry.entity_id
            found.append((entity_entry.entity_id, NORDPOOL_TYPE_NATIVE, label))
            seen.add(entity_entry.entity_id)

    _LOGGER.debug("Found %d Nordpool price sensors", len(found))
    return found


async def async_get_samples(
    hass: HomeAssistant,
    entity_id: str,
    nordpool_type: str,
) -> list[Sample]:
    """Fetch today's and tomorrow's prices as one ordered sample list.

    Args:
        hass: Home Assistant instance.
        entity_id: The Nordpool sensor entity ID.
        nordpool_type: "hacs" or "native".
    """
    if nordpool_type == NORDPOOL_TYPE_HACS:
        slots = _get_hacs_slots(hass, entity_id)
    elif nordpool_type == NORDPOOL_TYPE_NATIVE:
        slots = await _async_get_native_slots(hass, entity_id)
    else:
        _LOGGER.error("Unknown nordpool_type: %s", nordpool_type)
        return []
    return slots_to_samples(slots)


def slots_to_samples(slots: list[dict]) -> list[Sample]:
    """Convert [{start, value}] slots into local-time samples sorted by start.

    Start may be a datetime (hass.states) or an ISO string (WebSocket API).
    Slots without a price are skipped; so are later duplicates of a start time.
    Duplicates are matched on the UTC instant, so the repeated hour of a DST
    fall-back keeps both of its slots.
    """
    samples: dict[datetime, Sample] = {}
    for slot in slots:
        try:
            start = slot["start"]
            if not isinstance(start, datetime):
                start = datetime.fromisoformat(start)
            value = slot.get("value")
            if value is None:
                continue
            local = dt_util.as_local(start)
            samples.setdefault(
                dt_util.as_utc(start), Sample(start=local, price=float(value))
            )
        except (ValueError, TypeError, KeyError) as exc:
            _LOGGER.warning("Skipping malformed price slot %s: %s", slot, exc)
    return [samples[instant] for instant in sorted(samples)]


def _get_hacs_slots(hass: HomeAssistant, entity_id: str) -> list[dict]:
    """Read prices from HACS Nordpool sensor attributes."""
    state = hass.states.get(entity_id)
    if state is None:
        return []
    raw_today = state.attributes.get("raw_today") or []
    raw_tomorrow = state.attributes.get("raw_tomorrow") or []
    return list(raw_today) + list(raw_tomorrow)


async def _async_get_native_slots(hass: HomeAssistant, entity_id: str) -> list[dict]:
    """Fetch prices from native HA Nordpool via service call."""
    entity_entry = er.async_get(hass).async_get(entity_id)
    if entity_entry is None or entity_entry.config_entry_id is None:
        _LOGGER.error(
            "Cannot find config entry for native Nordpool entity %s", entity_id
        )
        return []

    today = dt_util.now().date()
    slots: list[dict] = []
    for target_date in (today, today + timedelta(days=1)):
        slots.extend(
            await _async_fetch_native_date(hass, entity_entry.config_entry_id, target_date)
        )
    return slots


async def _async_fetch_native_date(
    hass: HomeAssistant, config_entry_id: str, target_date: date
) -> list[dict]:
    """Call nordpool.get_prices_for_date and convert to slot format."""
    try:
        response = await hass.services.async_call(
            "nordpool",
            "get_prices_for_date",
            {
                "config_entry": config_entry_id,
                "date": str(target_date),
            },
            blocking=True,
            return_response=True,
        )
    except Exception:
        _LOGGER.debug(
            "Failed to fetch native Nordpool prices for %s (may not be published yet)",
            target_date,
        )
        return []

    return _convert_native_response(response)


def _convert_native_response(response: dict | list | None) -> list[dict]:
    """Convert a native Nordpool service response to [{start, value}] slots.

    The response is grouped by area ({"SE4": [{"start", "end", "price"}, ...]})
    or is a plain list. The first area is used and prices are converted from
    Currency/MWh to Currency/kWh.
    """
    entries: list = []
    if isinstance(response, dict):
        entries = next(
            (prices for prices in response.values() if isinstance(prices, list)), []
        )
    elif isinstance(response, list):
        entries = response

    slots: list[dict] = []
    for entry in entries:
        try:
            start = entry.get("start")
            price_mwh = entry.get("price")
            if start is None or price_mwh is None:
                continue
            slots.append({"start": start, "value": float(price_mwh) / 1000.0})
        except (AttributeError, ValueError, TypeError) as exc:
            _LOGGER.warning("Error converting native Nordpool entry: %s", exc)
    return slots
