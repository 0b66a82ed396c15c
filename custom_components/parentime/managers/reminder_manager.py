"""Reminder manager for ParenTime integration.

Orchestrates the reminder lifecycle against the store and the notification
authority:
- Reminder repository (list, save/upsert, delete, activation and completion flags)
- Lifecycle: activate (permission check, then schedule), deactivate, complete
- Promotion of catalog occurrences into reminders and template activation
- Suggestion state (ignored templates per child)
- Read models: upcoming, overdue, suggestions, dashboard

Every read-modify-write runs under a per-child asyncio.Lock, so at most one
mutation per child is in flight. A reminder change and its alert change are
written together; a failed write rolls both back in memory and raises
HomeAssistantError once. Nothing is retried.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..engines import (
    DashboardBuckets,
    DashboardEngine,
    OccurrenceEngine,
    ReminderEngine,
)
from ..engines.reminder_engine import InvalidTransitionError
from ..models import ReminderItem, ScheduledReminder, SuggestionItem
from ..pt_helpers import not_found_error
from ..utils.dt_utils import (
    dt_at_local_time,
    dt_now_utc,
    dt_parse_time,
    dt_today_local,
)
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from datetime import date

    from homeassistant.core import HomeAssistant

    from ..coordinator import ParenTimeDataCoordinator
    from ..models import Child, Occurrence, Suggestion


class ReminderManager(BaseManager):
    """Manages scheduled reminders and their lifecycle."""

    def __init__(
        self, hass: HomeAssistant, coordinator: ParenTimeDataCoordinator
    ) -> None:
        """Initialize reminder manager."""
        super().__init__(hass, coordinator)
        self._locks: dict[str, asyncio.Lock] = {}

    async def async_setup(self) -> None:
        """Set up the reminder manager."""
        const.LOGGER.debug(
            "ReminderManager async_setup complete: %s reminders",
            len(self.store.reminders),
        )

    def lock_for(self, child_id: str) -> asyncio.Lock:
        """Return the lock serializing mutations of a child's data."""
        return self._locks.setdefault(child_id, asyncio.Lock())

    def release_lock(self, child_id: str) -> None:
        """Forget the lock of a deleted child."""
        self._locks.pop(child_id, None)

    @property
    def _notifier(self):
        return self.coordinator.notification_manager

    @property
    def _children(self):
        return self.coordinator.child_manager

    async def _async_commit(
        self,
        snapshot: dict[str, Any],
        alert_change: Coroutine[Any, Any, bool] | None = None,
    ) -> None:
        """Write staged reminder changes, together with an alert change if any.

        `alert_change` is an async_schedule or async_cancel call; when it
        returns True it has already written the whole store. On failure the
        snapshot is restored and the error propagates.
        """
        try:
            if alert_change is None or not await alert_change:
                await self.coordinator._persist()
        except HomeAssistantError:
            self.store.restore(snapshot)
            raise

    def remove_child_reminders(self, child_id: str) -> list[str]:
        """Drop a child's reminders and pending alerts from memory.

        Nothing is written; the caller holds lock_for(child_id), persists, and
        then dismisses the returned alert ids.
        """
        alert_ids: list[str] = []
        for reminder in self.list_for_child(child_id):
            if reminder.is_activated:
                alert_id = ReminderEngine.notification_key(reminder)
                self._notifier.discard_pending(alert_id)
                alert_ids.append(alert_id)
        # Unreadable records of the child go too
        for reminder_id, info in list(self.store.reminders.items()):
            if info.get(const.DATA_REMINDER_CHILD_ID) == child_id:
                del self.store.reminders[reminder_id]
        const.LOGGER.debug(
            "ReminderManager: Dropping reminders of deleted child %s (%s alerts)",
            child_id,
            len(alert_ids),
        )
        return alert_ids

    # -------------------------------------------------------------------------
    # REPOSITORY
    # -------------------------------------------------------------------------

    def _load(self, reminder_info: dict[str, Any]) -> ScheduledReminder | None:
        try:
            return ScheduledReminder.from_dict(reminder_info)
        except (KeyError, ValueError) as err:
            const.LOGGER.warning(
                "WARNING: Skipping unreadable reminder record %s: %s",
                reminder_info.get(const.DATA_REMINDER_ID),
                err,
            )
            return None

    def list_all(self) -> list[ScheduledReminder]:
        """Return every reminder, ordered by due date then title."""
        reminders = [
            reminder
            for info in self.store.reminders.values()
            if (reminder := self._load(info)) is not None
        ]
        return sorted(reminders, key=lambda r: (r.due_date, r.title))

    def list_for_child(self, child_id: str) -> list[ScheduledReminder]:
        """Return a child's reminders, ordered by due date then title."""
        return [r for r in self.list_all() if r.child_id == child_id]

    def get_reminder(self, reminder_id: str) -> ScheduledReminder:
        """Return a reminder by id.

        Raises:
            HomeAssistantError: If the reminder does not exist
        """
        info = self.store.reminders.get(reminder_id)
        reminder = self._load(info) if info is not None else None
        if reminder is None:
            raise not_found_error(const.LABEL_REMINDER, reminder_id)
        return reminder

    async def async_save(self, reminder: ScheduledReminder) -> None:
        """Insert or replace a reminder by id."""
        snapshot = self.store.snapshot()
        self.store.reminders[reminder.id] = reminder.as_dict()
        await self._async_persist_or_restore(snapshot)

    async def async_delete(self, reminder_id: str) -> None:
        """Delete a reminder record.

        Raises:
            HomeAssistantError: If the reminder does not exist
        """
        if reminder_id not in self.store.reminders:
            raise not_found_error(const.LABEL_REMINDER, reminder_id)
        snapshot = self.store.snapshot()
        del self.store.reminders[reminder_id]
        await self._async_persist_or_restore(snapshot)

    async def async_set_activated(self, reminder_id: str, activated: bool) -> bool:
        """Set the activation flag. Missing ids are a no-op (returns False)."""
        if reminder_id not in self.store.reminders:
            const.LOGGER.debug("DEBUG: set_activated: no reminder %s", reminder_id)
            return False
        snapshot = self.store.snapshot()
        self.store.reminders[reminder_id][const.DATA_REMINDER_IS_ACTIVATED] = activated
        await self._async_persist_or_restore(snapshot)
        return True

    async def async_set_completed(self, reminder_id: str, completed_at) -> bool:
        """Mark completed at a timestamp. Missing ids are a no-op (returns False)."""
        if reminder_id not in self.store.reminders:
            const.LOGGER.debug("DEBUG: set_completed: no reminder %s", reminder_id)
            return False
        snapshot = self.store.snapshot()
        info = self.store.reminders[reminder_id]
        info[const.DATA_REMINDER_IS_COMPLETED] = True
        info[const.DATA_REMINDER_COMPLETED_AT] = completed_at.isoformat()
        await self._async_persist_or_restore(snapshot)
        return True

    # -------------------------------------------------------------------------
    # CREATION
    # -------------------------------------------------------------------------

    def _find_for_occurrence(
        self, child_id: str, template_id: str, due_date: date
    ) -> ScheduledReminder | None:
        for reminder in self.list_for_child(child_id):
            if (
                reminder.template_id == template_id
                and reminder.due_date == due_date
                and not reminder.is_completed
            ):
                return reminder
        return None

    async def async_create_from_occurrence(
        self, child_id: str, occurrence: Occurrence
    ) -> ScheduledReminder:
        """Promote an occurrence into an inactive reminder.

        An uncompleted reminder for the same occurrence is reused.
        """
        self._children.get_child(child_id)
        async with self.lock_for(child_id):
            return await self._async_promote(child_id, occurrence)

    async def _async_promote(
        self, child_id: str, occurrence: Occurrence
    ) -> ScheduledReminder:
        existing = self._find_for_occurrence(
            child_id, occurrence.template_id, occurrence.due_date
        )
        if existing is not None:
            return existing
        reminder = ScheduledReminder.from_occurrence(occurrence, child_id)
        await self.async_save(reminder)
        const.LOGGER.info(
            "INFO: Created reminder '%s' for child %s due %s",
            reminder.title,
            child_id,
            reminder.due_date.isoformat(),
        )
        return reminder

    async def async_create_custom(
        self, child_id: str, user_input: dict[str, Any]
    ) -> ScheduledReminder:
        """Create a user-defined reminder (no template), starting inactive.

        Raises:
            EntityValidationError: If the input is invalid
            HomeAssistantError: If the child does not exist
        """
        self._children.get_child(child_id)
        reminder = ScheduledReminder.from_dict(db.build_reminder(user_input, child_id))
        async with self.lock_for(child_id):
            await self.async_save(reminder)
        const.LOGGER.info(
            "INFO: Created custom reminder '%s' for child %s", reminder.title, child_id
        )
        return reminder

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    async def _async_ensure_authorized(self) -> bool:
        """Two-step permission protocol: check status, request if undetermined."""
        status = self._notifier.authorization_status()
        if status == const.AUTH_STATUS_UNDETERMINED:
            return await self._notifier.async_request_authorization()
        return status in (const.AUTH_STATUS_AUTHORIZED, const.AUTH_STATUS_PROVISIONAL)

    def _notification_time(self, reminder: ScheduledReminder):
        """Template time-of-day for catalog reminders, else the configured default."""
        template = (
            self.coordinator.catalog.get(reminder.template_id)
            if reminder.template_id
            else None
        )
        if template is not None:
            raw = template.default_notification_time
        else:
            raw = self.coordinator.options[const.CONF_NOTIFICATION_TIME]
        return dt_parse_time(raw) or dt_parse_time(const.DEFAULT_NOTIFICATION_TIME)

    async def _async_activate_locked(self, reminder: ScheduledReminder) -> str:
        state = ReminderEngine.state_of(reminder)
        if state == const.REMINDER_STATE_ACTIVE:
            return const.ACTIVATION_RESULT_ALREADY_ACTIVE
        if not ReminderEngine.can_transition(state, const.REMINDER_STATE_ACTIVE):
            raise InvalidTransitionError(
                reminder.id, state, const.REMINDER_STATE_ACTIVE
            )

        if not await self._async_ensure_authorized():
            const.LOGGER.warning(
                "WARNING: Reminder %s stays inactive: notification permission denied",
                reminder.id,
            )
            return const.ACTIVATION_RESULT_PERMISSION_DENIED

        child: Child = self._children.get_child(reminder.child_id)
        snapshot = self.store.snapshot()
        self.store.reminders[reminder.id] = ReminderEngine.activate(reminder).as_dict()
        await self._async_commit(
            snapshot,
            self._notifier.async_schedule(
                ReminderEngine.notification_key(reminder),
                const.NOTIFICATION_TITLE_FMT.format(title=reminder.title),
                const.NOTIFICATION_BODY_FMT.format(
                    first_name=child.first_name, category=reminder.category
                ),
                dt_at_local_time(reminder.due_date, self._notification_time(reminder)),
            ),
        )
        const.LOGGER.info("INFO: Activated reminder %s", reminder.id)
        return const.ACTIVATION_RESULT_ACTIVATED

    async def async_activate(self, reminder_id: str) -> str:
        """Activate a reminder.

        Returns:
            ACTIVATION_RESULT_ACTIVATED, ACTIVATION_RESULT_ALREADY_ACTIVE, or
            ACTIVATION_RESULT_PERMISSION_DENIED (reminder left inactive).

        Raises:
            HomeAssistantError: If the reminder does not exist, or the write
                fails (the reminder stays inactive with no alert)
            InvalidTransitionError: If the reminder is completed
        """
        child_id = self.get_reminder(reminder_id).child_id
        async with self.lock_for(child_id):
            result = await self._async_activate_locked(self.get_reminder(reminder_id))
        if result == const.ACTIVATION_RESULT_ACTIVATED:
            self.emit(const.SIGNAL_SUFFIX_REMINDER_ACTIVATED, reminder_id=reminder_id)
        return result

    async def async_deactivate(self, reminder_id: str) -> None:
        """Deactivate a reminder and cancel its alert. Idempotent.

        A completed reminder keeps its state; only its pending alert is
        cancelled.

        Raises:
            HomeAssistantError: If the reminder does not exist
        """
        child_id = self.get_reminder(reminder_id).child_id
        async with self.lock_for(child_id):
            reminder = self.get_reminder(reminder_id)
            alert_id = ReminderEngine.notification_key(reminder)
            if reminder.is_completed:
                await self._notifier.async_cancel(alert_id)
                const.LOGGER.info(
                    "INFO: Cancelled the alert of completed reminder %s", reminder_id
                )
                return

            updated = ReminderEngine.deactivate(reminder)
            if updated is reminder:
                await self._notifier.async_cancel(alert_id)
                return
            snapshot = self.store.snapshot()
            self.store.reminders[reminder_id] = updated.as_dict()
            await self._async_commit(snapshot, self._notifier.async_cancel(alert_id))
        const.LOGGER.info("INFO: Deactivated reminder %s", reminder_id)
        self.emit(const.SIGNAL_SUFFIX_REMINDER_DEACTIVATED, reminder_id=reminder_id)

    async def async_complete(self, reminder_id: str) -> ScheduledReminder:
        """Mark a reminder completed (terminal).

        The pending alert is only cancelled when the cancel-on-complete option
        is enabled.

        Raises:
            HomeAssistantError: If the reminder does not exist
            InvalidTransitionError: If the reminder is already completed
        """
        child_id = self.get_reminder(reminder_id).child_id
        async with self.lock_for(child_id):
            reminder = self.get_reminder(reminder_id)
            updated = ReminderEngine.complete(reminder, dt_now_utc())
            cancel = None
            if reminder.is_activated and self.coordinator.options.get(
                const.CONF_CANCEL_ON_COMPLETE
            ):
                cancel = self._notifier.async_cancel(
                    ReminderEngine.notification_key(reminder)
                )
            snapshot = self.store.snapshot()
            self.store.reminders[reminder_id] = updated.as_dict()
            await self._async_commit(snapshot, cancel)
        const.LOGGER.info("INFO: Completed reminder %s", reminder_id)
        self.emit(const.SIGNAL_SUFFIX_REMINDER_COMPLETED, reminder_id=reminder_id)
        return updated

    async def async_delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder on user request, cancelling its alert."""
        reminder = self.get_reminder(reminder_id)
        async with self.lock_for(reminder.child_id):
            snapshot = self.store.snapshot()
            del self.store.reminders[reminder_id]
            await self._async_commit(
                snapshot,
                self._notifier.async_cancel(ReminderEngine.notification_key(reminder)),
            )
        const.LOGGER.info("INFO: Deleted reminder %s", reminder_id)
        self.emit(const.SIGNAL_SUFFIX_REMINDER_DELETED, reminder_id=reminder_id)

    async def async_activate_template(
        self, child_id: str, template_id: str
    ) -> tuple[ScheduledReminder, str]:
        """Commit the next occurrence of a catalog template and activate it.

        The occurrence is searched within the activation horizon. An existing
        uncompleted reminder for that occurrence is reused.

        Raises:
            HomeAssistantError: If the child or template does not exist, or the
                template has no occurrence within the horizon
        """
        child = self._children.get_child(child_id)
        template = self.coordinator.catalog.get(template_id)
        if template is None:
            raise not_found_error(const.LABEL_TEMPLATE, template_id)

        occurrences = OccurrenceEngine.generate(
            [template],
            child,
            dt_today_local(),
            self.coordinator.options[const.CONF_ACTIVATION_HORIZON_MONTHS],
        )
        if not occurrences:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NO_OCCURRENCE,
                translation_placeholders={"template": template_id},
            )
        next_occurrence = min(occurrences, key=lambda occ: occ.due_date)

        async with self.lock_for(child_id):
            reminder = await self._async_promote(child_id, next_occurrence)
            result = await self._async_activate_locked(reminder)
            reminder = self.get_reminder(reminder.id)
        if result == const.ACTIVATION_RESULT_ACTIVATED:
            self.emit(const.SIGNAL_SUFFIX_REMINDER_ACTIVATED, reminder_id=reminder.id)
        return reminder, result

    # -------------------------------------------------------------------------
    # SUGGESTION STATE
    # -------------------------------------------------------------------------

    def ignored_template_ids(self, child_id: str) -> list[str]:
        """Return the template ids a child's suggestions are hidden for."""
        state = self.store.suggestion_states.get(child_id, {})
        return list(state.get(const.DATA_SUGGESTION_IGNORED, []))

    async def async_ignore_suggestion(self, child_id: str, template_id: str) -> None:
        """Hide a template's suggestion for a child."""
        self._children.get_child(child_id)
        async with self.lock_for(child_id):
            snapshot = self.store.snapshot()
            state = self.store.suggestion_states.setdefault(
                child_id, {const.DATA_SUGGESTION_IGNORED: []}
            )
            ignored = state.setdefault(const.DATA_SUGGESTION_IGNORED, [])
            if template_id not in ignored:
                ignored.append(template_id)
                await self._async_persist_or_restore(snapshot)
        const.LOGGER.info(
            "INFO: Ignored suggestion '%s' for child %s", template_id, child_id
        )

    # -------------------------------------------------------------------------
    # READ MODELS
    # -------------------------------------------------------------------------

    def upcoming(
        self,
        child_id: str,
        max_months_in_future: int | None = None,
        *,
        include_overdue: bool = False,
        only_activated: bool = False,
        reference_date: date | None = None,
    ) -> list[Occurrence]:
        """Next occurrence per series/template for a child."""
        child = self._children.get_child(child_id)
        occurrences = OccurrenceEngine.next_occurrence_per_template_or_series(
            self.coordinator.catalog,
            child,
            reference_date or dt_today_local(),
            max_months_in_future,
            include_overdue=include_overdue,
        )
        if only_activated:
            occurrences = OccurrenceEngine.filter_activated(
                occurrences, self.list_for_child(child_id)
            )
        return occurrences

    def overdue(
        self, child_id: str, reference_date: date | None = None
    ) -> list[Occurrence]:
        """Past-due required occurrences for a child."""
        child = self._children.get_child(child_id)
        return OccurrenceEngine.overdue_occurrences(
            self.coordinator.catalog, child, reference_date or dt_today_local()
        )

    def suggestions(
        self, child_id: str, reference_date: date | None = None
    ) -> list[Suggestion]:
        """Applicable templates not ignored and not already committed."""
        child = self._children.get_child(child_id)
        committed = {
            reminder.template_id
            for reminder in self.list_for_child(child_id)
            if reminder.template_id and not reminder.is_completed
        }
        return [
            suggestion
            for suggestion in OccurrenceEngine.suggestions(
                self.coordinator.catalog,
                child,
                reference_date or dt_today_local(),
                self.ignored_template_ids(child_id),
            )
            if suggestion.template_id not in committed
        ]

    def dashboard(
        self, child_id: str, reference_date: date | None = None
    ) -> DashboardBuckets:
        """Prioritize a child's suggestions and open reminders."""
        reference_date = reference_date or dt_today_local()
        items = [
            SuggestionItem(suggestion)
            for suggestion in self.suggestions(child_id, reference_date)
        ]
        items.extend(
            ReminderItem(reminder)
            for reminder in self.list_for_child(child_id)
            if not reminder.is_completed
        )
        options = self.coordinator.options
        return DashboardEngine.prioritize(
            items,
            reference_date,
            max_now=options[const.CONF_DASHBOARD_MAX_NOW],
            max_upcoming=options[const.CONF_DASHBOARD_MAX_UPCOMING],
        )
