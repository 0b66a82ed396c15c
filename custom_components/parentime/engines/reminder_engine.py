"""Reminder Engine - pure lifecycle state machine for scheduled reminders.

States:
- inactive: created (from an occurrence or user input), no alert scheduled
- active: alert scheduled under the reminder's notification id
- completed: terminal

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Transitions return new ScheduledReminder values; persistence, authorization and
alert scheduling belong in ReminderManager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_days_between, dt_months_between
from ..utils.id_utils import notification_id

if TYPE_CHECKING:
    from datetime import date, datetime

    from ..models import ScheduledReminder


class InvalidTransitionError(Exception):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, reminder_id: str, from_state: str, to_state: str) -> None:
        """Initialize InvalidTransitionError."""
        self.reminder_id = reminder_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Reminder {reminder_id}: cannot go from {from_state} to {to_state}"
        )


class ReminderEngine:
    """Pure logic engine for the reminder lifecycle."""

    VALID_TRANSITIONS: dict[str, list[str]] = {
        const.REMINDER_STATE_INACTIVE: [
            const.REMINDER_STATE_ACTIVE,
            const.REMINDER_STATE_COMPLETED,
        ],
        const.REMINDER_STATE_ACTIVE: [
            const.REMINDER_STATE_INACTIVE,
            const.REMINDER_STATE_COMPLETED,
        ],
        # Terminal
        const.REMINDER_STATE_COMPLETED: [],
    }

    # =========================================================================
    # STATE QUERIES
    # =========================================================================

    @staticmethod
    def state_of(reminder: ScheduledReminder) -> str:
        """Return the lifecycle state of a reminder."""
        if reminder.is_completed:
            return const.REMINDER_STATE_COMPLETED
        if reminder.is_activated:
            return const.REMINDER_STATE_ACTIVE
        return const.REMINDER_STATE_INACTIVE

    @staticmethod
    def can_transition(from_state: str, to_state: str) -> bool:
        """Check if a state transition is valid."""
        return to_state in ReminderEngine.VALID_TRANSITIONS.get(from_state, [])

    @staticmethod
    def notification_key(reminder: ScheduledReminder) -> str:
        """Return the alert id for a reminder.

        User-created reminders have no template; their own id stands in.
        """
        return notification_id(
            reminder.child_id, reminder.template_id or reminder.id, reminder.due_date
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    @staticmethod
    def _require(reminder: ScheduledReminder, to_state: str) -> None:
        from_state = ReminderEngine.state_of(reminder)
        if not ReminderEngine.can_transition(from_state, to_state):
            raise InvalidTransitionError(reminder.id, from_state, to_state)

    @staticmethod
    def activate(reminder: ScheduledReminder) -> ScheduledReminder:
        """Inactive -> active."""
        ReminderEngine._require(reminder, const.REMINDER_STATE_ACTIVE)
        return reminder.evolve(is_activated=True)

    @staticmethod
    def deactivate(reminder: ScheduledReminder) -> ScheduledReminder:
        """Active -> inactive. Already inactive is returned unchanged."""
        if ReminderEngine.state_of(reminder) == const.REMINDER_STATE_INACTIVE:
            return reminder
        ReminderEngine._require(reminder, const.REMINDER_STATE_INACTIVE)
        return reminder.evolve(is_activated=False)

    @staticmethod
    def complete(
        reminder: ScheduledReminder, completed_at: datetime
    ) -> ScheduledReminder:
        """Inactive or active -> completed (terminal)."""
        ReminderEngine._require(reminder, const.REMINDER_STATE_COMPLETED)
        return reminder.evolve(is_completed=True, completed_at=completed_at)

    # =========================================================================
    # OVERDUE PRESENTATION
    # =========================================================================

    @staticmethod
    def is_overdue(reminder: ScheduledReminder, reference_date: date) -> bool:
        """Due before reference_date and not completed."""
        return not reminder.is_completed and reminder.due_date < reference_date

    @staticmethod
    def late_since_text(
        reminder: ScheduledReminder, reference_date: date
    ) -> str | None:
        """Describe how late a reminder is, or None when it is not overdue.

        Whole months when at least one has elapsed, else whole days, else a
        generic marker.
        """
        if not ReminderEngine.is_overdue(reminder, reference_date):
            return None
        months = dt_months_between(reminder.due_date, reference_date)
        if months >= 1:
            return const.DISPLAY_LATE_MONTHS_FMT.format(count=months)
        days = dt_days_between(reminder.due_date, reference_date)
        if days >= 1:
            return const.DISPLAY_LATE_DAYS_FMT.format(count=days)
        return const.DISPLAY_OVERDUE
