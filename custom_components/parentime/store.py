# File: store.py
"""Handles persistent data storage for the ParenTime integration.

Uses Home Assistant's Storage helper to save and load children, scheduled
reminders, suggestion state and pending notifications, so state is preserved
across restarts. Every write persists the whole document.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from . import const
from .utils.dt_utils import dt_now_utc

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class ParenTimeStore:
    """Handles persistent storage operations for ParenTime data.

    Thin wrapper around Home Assistant's Store API. Buckets are dicts keyed by
    internal id (children, reminders, notifications) or child id
    (suggestion_states).
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_UPDATED: None,
            },
            const.DATA_CHILDREN: {},
            const.DATA_REMINDERS: {},
            const.DATA_SUGGESTION_STATES: {},
            const.DATA_NOTIFICATIONS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Missing
        buckets in an existing document are filled in.
        """
        const.LOGGER.debug("DEBUG: ParenTimeStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = ParenTimeStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in ParenTimeStore.get_default_structure().items():
            self._data.setdefault(key, default)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "children": len(self._data[const.DATA_CHILDREN]),
                "reminders": len(self._data[const.DATA_REMINDERS]),
                "notifications": len(self._data[const.DATA_NOTIFICATIONS]),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    @property
    def children(self) -> dict[str, Any]:
        """Return the children bucket."""
        return self._data.setdefault(const.DATA_CHILDREN, {})

    @property
    def reminders(self) -> dict[str, Any]:
        """Return the reminders bucket."""
        return self._data.setdefault(const.DATA_REMINDERS, {})

    @property
    def suggestion_states(self) -> dict[str, Any]:
        """Return the per-child suggestion state bucket."""
        return self._data.setdefault(const.DATA_SUGGESTION_STATES, {})

    @property
    def notifications(self) -> dict[str, Any]:
        """Return the pending notifications bucket."""
        return self._data.setdefault(const.DATA_NOTIFICATIONS, {})

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the in-memory document."""
        return copy.deepcopy(self._data)

    def restore(self, snapshot: dict[str, Any]) -> None:
        """Replace the in-memory document with an earlier snapshot.

        Used to roll back a mutation whose write failed, so memory keeps
        matching what is on disk.
        """
        self._data = snapshot

    async def async_save(self) -> None:
        """Save the current data structure to storage.

        Raises:
            HomeAssistantError: When the write fails (file system error or
                non-serializable data). The failure is logged and reported once;
                nothing is retried.
        """
        self._data.setdefault(const.DATA_META, {})[const.DATA_META_LAST_UPDATED] = (
            dt_now_utc().isoformat()
        )
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_STORAGE,
                translation_placeholders={"error": str(err)},
            ) from err
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data: %s", err
            )
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_STORAGE,
                translation_placeholders={"error": str(err)},
            ) from err

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = ParenTimeStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
