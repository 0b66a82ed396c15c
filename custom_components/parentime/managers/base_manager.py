"""Base manager class for ParenTime managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_send

from .. import const
from ..pt_helpers import get_event_signal

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import ParenTimeDataCoordinator
    from ..store import ParenTimeStore


class BaseManager(ABC):
    """Base class for the child, reminder and notification managers.

    Managers own every mutation of the shared store. A mutation stages its
    changes in memory, then writes the whole document once through
    `_async_persist_or_restore`. When that write fails the staged changes are
    rolled back and the HomeAssistantError reaches the caller unchanged.

    After a successful mutation a manager emits an instance-scoped signal
    (CHILD_*, REMINDER_*). The coordinator is the subscriber: it refreshes its
    per-child overview when one arrives.
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: ParenTimeDataCoordinator
    ) -> None:
        """Initialize manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration instance
        """
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @property
    def store(self) -> ParenTimeStore:
        """Return the coordinator's store."""
        return self.coordinator.store

    async def _async_persist_or_restore(self, snapshot: dict[str, Any]) -> None:
        """Write the store, restoring `snapshot` in memory if the write fails.

        Raises:
            HomeAssistantError: When the write fails.
        """
        try:
            await self.coordinator._persist()
        except HomeAssistantError:
            self.store.restore(snapshot)
            raise

    def emit(self, suffix: str, **payload: Any) -> None:
        """Announce a committed change for this config entry.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_CHILD_DELETED)
            **payload: Event data dict passed to listeners
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "Emitting event '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        # Pass payload as single dict argument (dispatcher only supports *args)
        async_dispatcher_send(self.hass, signal, payload)

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager. Called once before the first refresh."""
