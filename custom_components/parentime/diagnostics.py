"""Diagnostics support for ParenTime integration.

Returns the raw storage document alongside the effective options and the
latest coordinator overview.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import ParenTimeDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: ParenTimeDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    return {
        "options": coordinator.options,
        "catalog_templates": len(coordinator.catalog),
        "authorization_status": (
            coordinator.notification_manager.authorization_status()
        ),
        "overview": coordinator.data,
        "storage": coordinator.store.data,
    }
