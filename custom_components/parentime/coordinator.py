# File: coordinator.py
"""Coordinator for the ParenTime integration.

Owns the store, the template catalog and the managers for one config entry.
Managers perform every mutation and call `_persist()`; the periodic refresh
builds a per-child overview consumed by diagnostics and listeners. The
overview is also refreshed whenever a manager reports a committed change.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import ChildManager, NotificationManager, ReminderManager
from .pt_helpers import get_event_signal
from .store import ParenTimeStore
from .template_catalog import TemplateCatalog, async_load_catalog
from .utils.dt_utils import dt_today_local


class ParenTimeDataCoordinator(DataUpdateCoordinator):
    """Coordinator for ParenTime integration.

    Manages data primarily using internal_id for children and reminders.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: ParenTimeStore,
    ):
        """Initialize the ParenTimeDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.config_entry = config_entry
        self.store = store
        self.catalog = TemplateCatalog()

        # Notification manager first: the reminder manager depends on it
        self.notification_manager = NotificationManager(hass, self)
        self.child_manager = ChildManager(hass, self)
        self.reminder_manager = ReminderManager(hass, self)

    @property
    def options(self) -> dict[str, Any]:
        """Return entry options merged over the defaults."""
        return {**const.DEFAULT_OPTIONS, **self.config_entry.options}

    # -------------------------------------------------------------------------------------
    # Periodic + First Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update: rebuild the per-child overview."""
        try:
            return self._build_overview()
        except (KeyError, ValueError, HomeAssistantError) as err:
            raise UpdateFailed(f"Error updating ParenTime data: {err}") from err

    async def async_config_entry_first_refresh(self) -> None:
        """Load the catalog and set up managers before the first refresh."""
        self.catalog = await async_load_catalog(
            self.hass, self.options.get(const.CONF_CATALOG_PATH) or None
        )

        await self.notification_manager.async_setup()
        await self.child_manager.async_setup()
        await self.reminder_manager.async_setup()
        self._listen_for_changes()

        await super().async_config_entry_first_refresh()

    def _listen_for_changes(self) -> None:
        for suffix in const.SIGNAL_SUFFIXES_DATA_CHANGED:
            self.config_entry.async_on_unload(
                async_dispatcher_connect(
                    self.hass,
                    get_event_signal(self.config_entry.entry_id, suffix),
                    self._async_on_data_changed,
                )
            )

    async def _async_on_data_changed(self, payload: dict[str, Any]) -> None:
        """Refresh the overview after a child or reminder change."""
        await self.async_request_refresh()

    def _build_overview(self) -> dict[str, Any]:
        today = dt_today_local()
        horizon = self.options[const.CONF_UPCOMING_HORIZON_MONTHS]
        overview: dict[str, Any] = {}
        for child in self.child_manager.list_children():
            reminders = self.reminder_manager.list_for_child(child.internal_id)
            overview[child.internal_id] = {
                "name": child.full_name,
                "age_months": child.age_in_months(today),
                "upcoming": len(
                    self.reminder_manager.upcoming(
                        child.internal_id, horizon, reference_date=today
                    )
                ),
                "overdue": len(
                    self.reminder_manager.overdue(
                        child.internal_id, reference_date=today
                    )
                ),
                "active_reminders": sum(
                    1 for r in reminders if r.is_activated and not r.is_completed
                ),
            }
        return overview

    # -------------------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------------------

    async def _persist(self) -> None:
        """Save to persistent storage.

        Raises:
            HomeAssistantError: When the write fails.
        """
        await self.store.async_save()
