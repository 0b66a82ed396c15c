# File: flow_helpers.py
"""Helpers for the ParenTime config and options flows.

Schema building and input validation shared by both flows. Number selectors
return floats; `normalize_options_input` coerces them back to ints.
"""

from __future__ import annotations

from typing import Any, Optional

import voluptuous as vol
from homeassistant.helpers import selector

from . import const
from .utils.dt_utils import dt_parse_time

_INT_OPTIONS = (
    const.CONF_UPCOMING_HORIZON_MONTHS,
    const.CONF_ACTIVATION_HORIZON_MONTHS,
    const.CONF_DASHBOARD_MAX_NOW,
    const.CONF_DASHBOARD_MAX_UPCOMING,
    const.CONF_UPDATE_INTERVAL,
)


def _number_selector(minimum: int, maximum: int | None = None):
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            mode=selector.NumberSelectorMode.BOX,
            min=minimum,
            max=maximum,
            step=1,
        )
    )


def build_options_schema(default: Optional[dict] = None) -> vol.Schema:
    """Build schema for the general options form."""
    default = {**const.DEFAULT_OPTIONS, **(default or {})}

    return vol.Schema(
        {
            vol.Optional(
                const.CONF_NOTIFY_SERVICE,
                description={
                    "suggested_value": default.get(const.CONF_NOTIFY_SERVICE)
                },
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=False)),
            vol.Required(
                const.CONF_ENABLE_PERSISTENT_NOTIFICATIONS,
                default=default.get(
                    const.CONF_ENABLE_PERSISTENT_NOTIFICATIONS,
                    const.DEFAULT_ENABLE_PERSISTENT_NOTIFICATIONS,
                ),
            ): selector.BooleanSelector(),
            vol.Required(
                const.CONF_NOTIFICATION_TIME,
                default=default[const.CONF_NOTIFICATION_TIME],
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=False)),
            vol.Required(
                const.CONF_UPCOMING_HORIZON_MONTHS,
                default=default[const.CONF_UPCOMING_HORIZON_MONTHS],
            ): _number_selector(1, 240),
            vol.Required(
                const.CONF_ACTIVATION_HORIZON_MONTHS,
                default=default[const.CONF_ACTIVATION_HORIZON_MONTHS],
            ): _number_selector(1, 240),
            vol.Required(
                const.CONF_DASHBOARD_MAX_NOW,
                default=default[const.CONF_DASHBOARD_MAX_NOW],
            ): _number_selector(0, 20),
            vol.Required(
                const.CONF_DASHBOARD_MAX_UPCOMING,
                default=default[const.CONF_DASHBOARD_MAX_UPCOMING],
            ): _number_selector(0, 20),
            vol.Required(
                const.CONF_CANCEL_ON_COMPLETE,
                default=default[const.CONF_CANCEL_ON_COMPLETE],
            ): selector.BooleanSelector(),
            vol.Optional(
                const.CONF_CATALOG_PATH,
                description={"suggested_value": default.get(const.CONF_CATALOG_PATH)},
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=False)),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=default[const.CONF_UPDATE_INTERVAL],
            ): _number_selector(1),
        }
    )


def validate_options_input(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the options form.

    Returns:
        Dict of field -> translation key; empty when valid.
    """
    errors: dict[str, str] = {}
    if dt_parse_time(user_input.get(const.CONF_NOTIFICATION_TIME)) is None:
        errors[const.CONF_NOTIFICATION_TIME] = const.TRANS_KEY_INVALID_NOTIFICATION_TIME
    return errors


def normalize_options_input(user_input: dict[str, Any]) -> dict[str, Any]:
    """Return options ready to store: ints for counts, trimmed strings."""
    options = dict(user_input)
    for key in _INT_OPTIONS:
        if key in options:
            options[key] = int(options[key])
    for key in (const.CONF_NOTIFY_SERVICE, const.CONF_CATALOG_PATH):
        options[key] = str(options.get(key) or "").strip()
    options[const.CONF_NOTIFICATION_TIME] = str(
        options[const.CONF_NOTIFICATION_TIME]
    ).strip()
    return options
