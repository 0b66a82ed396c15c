"""Child manager for ParenTime integration.

Child repository: list, add, update and delete children. Deleting a child
also removes its reminders and pending alerts in the same write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..models import Child
from ..pt_helpers import not_found_error
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import ParenTimeDataCoordinator


class ChildManager(BaseManager):
    """Manages Child CRUD operations with event signaling."""

    def __init__(
        self, hass: HomeAssistant, coordinator: ParenTimeDataCoordinator
    ) -> None:
        """Initialize child manager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the child manager."""
        const.LOGGER.debug(
            "ChildManager async_setup complete: %s children", len(self.store.children)
        )

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def list_children(self) -> list[Child]:
        """Return all children, ordered by first name.

        Records that cannot be parsed are skipped with a warning.
        """
        children: list[Child] = []
        for child_id, child_info in self.store.children.items():
            try:
                children.append(Child.from_dict(child_info))
            except (KeyError, ValueError) as err:
                const.LOGGER.warning(
                    "WARNING: Skipping unreadable child record %s: %s", child_id, err
                )
        return sorted(children, key=lambda child: (child.first_name, child.last_name))

    def get_child(self, child_id: str) -> Child:
        """Return a child by id.

        Raises:
            HomeAssistantError: If the child does not exist
        """
        child_info = self.store.children.get(child_id)
        if child_info is None:
            raise not_found_error(const.LABEL_CHILD, child_id)
        return Child.from_dict(child_info)

    # -------------------------------------------------------------------------
    # CRUD OPERATIONS
    # -------------------------------------------------------------------------

    async def async_add_child(self, user_input: dict[str, Any]) -> str:
        """Create a child from service input.

        Returns:
            The internal_id of the created child

        Raises:
            EntityValidationError: If the input is invalid
            HomeAssistantError: If a child with the same id already exists
        """
        child_data = db.build_child(user_input)
        child_id = child_data[const.DATA_CHILD_INTERNAL_ID]

        if child_id in self.store.children:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_ALREADY_EXISTS,
                translation_placeholders={
                    "entity_type": const.LABEL_CHILD,
                    "name": child_id,
                },
            )

        snapshot = self.store.snapshot()
        self.store.children[child_id] = child_data
        await self._async_persist_or_restore(snapshot)

        const.LOGGER.info(
            "INFO: Created child '%s' (ID: %s)",
            child_data[const.DATA_CHILD_FIRST_NAME],
            child_id,
        )
        self.emit(const.SIGNAL_SUFFIX_CHILD_CREATED, child_id=child_id)
        return child_id

    async def async_update_child(self, child_id: str, updates: dict[str, Any]) -> Child:
        """Update an existing child with new values.

        Raises:
            EntityValidationError: If the updated fields are invalid
            HomeAssistantError: If the child does not exist
        """
        existing = self.store.children.get(child_id)
        if existing is None:
            raise not_found_error(const.LABEL_CHILD, child_id)

        child_data = db.build_child(updates, existing=existing)
        snapshot = self.store.snapshot()
        self.store.children[child_id] = child_data
        await self._async_persist_or_restore(snapshot)

        const.LOGGER.info("INFO: Updated child %s", child_id)
        self.emit(const.SIGNAL_SUFFIX_CHILD_UPDATED, child_id=child_id)
        return Child.from_dict(child_data)

    async def async_delete_child(self, child_id: str) -> None:
        """Delete a child with its reminders, alerts and suggestion state.

        Everything is removed in one write under the child's lock; the
        alerts' timers are stopped once that write succeeded.

        Raises:
            HomeAssistantError: If the child does not exist, or the write
                fails (nothing is removed)
        """
        if child_id not in self.store.children:
            raise not_found_error(const.LABEL_CHILD, child_id)

        reminders = self.coordinator.reminder_manager
        async with reminders.lock_for(child_id):
            # A concurrent delete may have won the lock
            if child_id not in self.store.children:
                raise not_found_error(const.LABEL_CHILD, child_id)

            snapshot = self.store.snapshot()
            alert_ids = reminders.remove_child_reminders(child_id)
            child_data = self.store.children.pop(child_id)
            self.store.suggestion_states.pop(child_id, None)
            await self._async_persist_or_restore(snapshot)

            for alert_id in alert_ids:
                await self.coordinator.notification_manager.async_dismiss(alert_id)
        reminders.release_lock(child_id)

        const.LOGGER.info(
            "INFO: Deleted child '%s' (ID: %s) with %s active reminders",
            child_data.get(const.DATA_CHILD_FIRST_NAME),
            child_id,
            len(alert_ids),
        )
        self.emit(const.SIGNAL_SUFFIX_CHILD_DELETED, child_id=child_id)
