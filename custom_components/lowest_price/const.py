"""Constants for the Lowest Price integration."""

DOMAIN = "lowest_price"

# Config entry data keys (immutable after creation)
CONF_NORDPOOL_SENSOR = "nordpool_sensor"
CONF_NORDPOOL_TYPE = "nordpool_type"
CONF_NAME = "name"

# Nordpool sensor types
NORDPOOL_TYPE_HACS = "hacs"
NORDPOOL_TYPE_NATIVE = "native"
NORDPOOL_TYPE_UNKNOWN = "unknown"

# Options keys (changeable via options flow)
CONF_FROM_HOUR = "from_hour"
CONF_TO_HOUR = "to_hour"
CONF_HOURS_ON = "hours_on"
CONF_CONTIGUOUS = "contiguous"
CONF_MAX_PRICE = "max_price"
CONF_OUTSIDE_WINDOW_VALUE = "outside_window_value"
CONF_INCOMPLETE_WINDOW_VALUE = "incomplete_window_value"

# Defaults
DEFAULT_FROM_HOUR = 0
DEFAULT_TO_HOUR = 0  # Same as from = full day
DEFAULT_HOURS_ON = 3
DEFAULT_CONTIGUOUS = False
DEFAULT_MAX_PRICE = None  # None = disabled (field left empty)
DEFAULT_OUTSIDE_WINDOW_VALUE = False
DEFAULT_INCOMPLETE_WINDOW_VALUE = False

# Update interval in minutes
UPDATE_INTERVAL_MINUTES = 15

# Sensor states
STATE_ACTIVE = "active"
STATE_STANDBY = "standby"
STATE_FORCED_ON = "forced_on"
STATE_FORCED_OFF = "forced_off"

ON_STATES = (STATE_ACTIVE, STATE_FORCED_ON)

# Override modes
OVERRIDE_AUTO = "auto"
OVERRIDE_ON = "on"
OVERRIDE_OFF = "off"
