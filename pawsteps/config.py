"""Configuration for PawSteps.

Settings arrive as a plain mapping (from the host app's settings store)
and are validated with a voluptuous schema before being frozen into
:class:`PawStepsConfig`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from .const import (
    CONF_AUTO_RESUME_DAILY,
    CONF_DEFAULT_STEP_LENGTH,
    CONF_MAX_RECENT_ESTIMATIONS,
    CONF_PERMISSION_TIMEOUT,
    CONF_QUERY_TIMEOUT,
    CONF_WALK_HISTORY_LIMIT,
    DEFAULT_STEP_LENGTH_M,
    MAX_RECENT_ESTIMATIONS,
    PERMISSION_TIMEOUT,
    QUERY_TIMEOUT,
    TREND_WINDOW,
    WALK_HISTORY_LIMIT,
)
from .exceptions import ConfigurationError

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_PERMISSION_TIMEOUT, default=PERMISSION_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.1, max=120)
        ),
        vol.Optional(CONF_QUERY_TIMEOUT, default=QUERY_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.1, max=120)
        ),
        vol.Optional(
            CONF_MAX_RECENT_ESTIMATIONS, default=MAX_RECENT_ESTIMATIONS
        ): vol.All(vol.Coerce(int), vol.Range(min=TREND_WINDOW, max=1000)),
        vol.Optional(CONF_AUTO_RESUME_DAILY, default=True): vol.Boolean(),
        vol.Optional(CONF_WALK_HISTORY_LIMIT, default=WALK_HISTORY_LIMIT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=10000)
        ),
        vol.Optional(CONF_DEFAULT_STEP_LENGTH, default=DEFAULT_STEP_LENGTH_M): vol.All(
            vol.Coerce(float), vol.Range(min=0.1, max=2.0)
        ),
    }
)


@dataclass(frozen=True, slots=True)
class PawStepsConfig:
    """Validated library settings."""

    permission_timeout: float = PERMISSION_TIMEOUT
    query_timeout: float = QUERY_TIMEOUT
    max_recent_estimations: int = MAX_RECENT_ESTIMATIONS
    auto_resume_daily: bool = True
    walk_history_limit: int = WALK_HISTORY_LIMIT
    default_step_length_m: float = DEFAULT_STEP_LENGTH_M

    def as_dict(self) -> dict[str, Any]:
        return {
            CONF_PERMISSION_TIMEOUT: self.permission_timeout,
            CONF_QUERY_TIMEOUT: self.query_timeout,
            CONF_MAX_RECENT_ESTIMATIONS: self.max_recent_estimations,
            CONF_AUTO_RESUME_DAILY: self.auto_resume_daily,
            CONF_WALK_HISTORY_LIMIT: self.walk_history_limit,
            CONF_DEFAULT_STEP_LENGTH: self.default_step_length_m,
        }


def load_config(data: Mapping[str, Any] | None = None) -> PawStepsConfig:
    """Validate ``data`` and return the frozen configuration.

    Raises:
        ConfigurationError: A setting is unknown, of the wrong type or out
            of range.
    """
    raw = dict(data or {})
    try:
        validated = CONFIG_SCHEMA(raw)
    except vol.Invalid as err:
        setting = str(err.path[0]) if err.path else "config"
        raise ConfigurationError(setting, raw.get(setting), err.msg) from err

    config = PawStepsConfig(**validated)
    _LOGGER.debug("Loaded configuration: %s", config.as_dict())
    return config
