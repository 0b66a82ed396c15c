# File: pt_helpers.py
"""ParenTime helper functions and shared logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError

from . import const

if TYPE_CHECKING:
    from .coordinator import ParenTimeDataCoordinator  # Used for type checking only


# -------- Signals --------
def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'parentime_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_CHILD_DELETED)
        'parentime_abc123_child_deleted'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# -------- Get Coordinator --------
def get_first_parentime_entry(hass: HomeAssistant) -> Optional[str]:
    """Retrieve the first ParenTime config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def get_coordinator(hass: HomeAssistant) -> ParenTimeDataCoordinator:
    """Return the coordinator of the first loaded entry.

    Raises:
        HomeAssistantError: If no ParenTime entry is loaded.
    """
    entry_id = get_first_parentime_entry(hass)
    if not entry_id:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


# -------- Errors --------
def not_found_error(entity_type: str, item_id: str) -> HomeAssistantError:
    """Build the translated not-found error for an entity type and id."""
    return HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_NOT_FOUND,
        translation_placeholders={"entity_type": entity_type, "name": item_id},
    )
