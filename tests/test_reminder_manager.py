"""Tests for ReminderManager lifecycle and read models.

Activation runs through the real NotificationManager so the permission
step and the alert scheduling are exercised end to end.
"""

# pylint: disable=protected-access  # Accessing _timers for testing
# pylint: disable=redefined-outer-name  # Pytest fixtures redefine names

from datetime import date, datetime
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.parentime import const
from custom_components.parentime.engines import ReminderEngine
from custom_components.parentime.engines.reminder_engine import InvalidTransitionError
from custom_components.parentime.models import ReminderItem, SuggestionItem
from custom_components.parentime.utils.dt_utils import (
    dt_add_months,
    dt_at_local_time,
    dt_parse_time,
    dt_today_local,
)
from tests.helpers import CHILD_ID

REFERENCE_DATE = date(2026, 6, 1)
FAR_DUE_DATE = "2099-01-05"


async def _custom_reminder(coordinator, due_date: str = FAR_DUE_DATE):
    return await coordinator.reminder_manager.async_create_custom(
        CHILD_ID,
        {
            const.DATA_REMINDER_TITLE: "Dentist",
            const.DATA_REMINDER_DUE_DATE: due_date,
            const.DATA_REMINDER_CATEGORY: const.CATEGORY_APPOINTMENTS,
        },
    )


async def _baby(coordinator, months_old: int) -> str:
    """Add a child born months_old months before today."""
    birth_date = dt_add_months(dt_today_local(), -months_old)
    return await coordinator.child_manager.async_add_child(
        {
            const.DATA_CHILD_FIRST_NAME: "Lucas",
            const.DATA_CHILD_BIRTH_DATE: birth_date.isoformat(),
        }
    )


# ============================================================================
# Repository
# ============================================================================


class TestRepository:
    """Creation, lookup and deletion of reminders."""

    async def test_create_custom_starts_inactive(self, coordinator) -> None:
        """A custom reminder has no template and is neither active nor done."""
        reminder = await _custom_reminder(coordinator)

        assert reminder.template_id is None
        assert not reminder.is_activated
        assert not reminder.is_completed
        assert coordinator.reminder_manager.get_reminder(reminder.id) == reminder

    async def test_create_custom_for_unknown_child_raises(self, coordinator) -> None:
        """Reminders need an existing child."""
        with pytest.raises(HomeAssistantError):
            await coordinator.reminder_manager.async_create_custom(
                "nobody",
                {
                    const.DATA_REMINDER_TITLE: "Dentist",
                    const.DATA_REMINDER_DUE_DATE: FAR_DUE_DATE,
                },
            )

    async def test_list_all_sorted_by_due_date(self, coordinator) -> None:
        """Reminders come back ordered by due date."""
        later = await _custom_reminder(coordinator, "2099-06-01")
        sooner = await _custom_reminder(coordinator, "2099-02-01")

        listed = coordinator.reminder_manager.list_all()

        assert [reminder.id for reminder in listed] == [sooner.id, later.id]

    async def test_set_flags_on_missing_reminder_return_false(
        self, coordinator
    ) -> None:
        """Flag setters report a missing id instead of raising."""
        manager = coordinator.reminder_manager

        assert await manager.async_set_activated("missing", True) is False
        assert await manager.async_set_completed("missing", None) is False

    async def test_delete_missing_reminder_raises(self, coordinator) -> None:
        """Deleting an unknown id raises not found."""
        with pytest.raises(HomeAssistantError) as err:
            await coordinator.reminder_manager.async_delete_reminder("missing")

        assert err.value.translation_key == const.TRANS_KEY_ERROR_NOT_FOUND


# ============================================================================
# Lifecycle
# ============================================================================


class TestActivation:
    """Activation, deactivation, completion and deletion."""

    async def test_activate_schedules_alert(self, coordinator) -> None:
        """First activation asks for permission then schedules the alert."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager

        result = await manager.async_activate(reminder.id)

        assert result == const.ACTIVATION_RESULT_ACTIVATED
        assert manager.get_reminder(reminder.id).is_activated
        alert_id = ReminderEngine.notification_key(reminder)
        assert alert_id == f"reminder_{CHILD_ID}_{reminder.id}_2099-01-05"
        pending = coordinator.store.notifications[alert_id]
        expected = dt_at_local_time(
            date(2099, 1, 5), dt_parse_time(const.DEFAULT_NOTIFICATION_TIME)
        )
        assert datetime.fromisoformat(pending[const.DATA_NOTIFICATION_FIRE_AT]) == (
            expected
        )
        assert (
            coordinator.notification_manager.authorization_status()
            == const.AUTH_STATUS_PROVISIONAL
        )

    async def test_activate_twice_is_already_active(self, coordinator) -> None:
        """A second activation is a no-op."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        result = await manager.async_activate(reminder.id)

        assert result == const.ACTIVATION_RESULT_ALREADY_ACTIVE
        assert len(coordinator.store.notifications) == 1

    async def test_activate_denied_leaves_reminder_inactive(
        self, coordinator
    ) -> None:
        """Without permission nothing is scheduled."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager

        with patch.object(
            coordinator.notification_manager,
            "authorization_status",
            return_value=const.AUTH_STATUS_DENIED,
        ):
            result = await manager.async_activate(reminder.id)

        assert result == const.ACTIVATION_RESULT_PERMISSION_DENIED
        assert not manager.get_reminder(reminder.id).is_activated
        assert coordinator.store.notifications == {}

    async def test_activate_completed_raises(self, coordinator) -> None:
        """Completed reminders cannot be activated again."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_complete(reminder.id)

        with pytest.raises(InvalidTransitionError):
            await manager.async_activate(reminder.id)

    async def test_deactivate_cancels_alert(self, coordinator) -> None:
        """Deactivation cancels the alert and clears the flag."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        await manager.async_deactivate(reminder.id)
        await manager.async_deactivate(reminder.id)

        assert not manager.get_reminder(reminder.id).is_activated
        assert coordinator.store.notifications == {}
        assert coordinator.notification_manager._timers == {}

    async def test_complete_keeps_alert_by_default(self, coordinator) -> None:
        """Completion leaves a pending alert alone unless configured."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        completed = await manager.async_complete(reminder.id)

        assert completed.is_completed
        assert completed.completed_at is not None
        assert ReminderEngine.notification_key(reminder) in (
            coordinator.store.notifications
        )

    async def test_complete_twice_raises(self, coordinator) -> None:
        """Completion is terminal."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_complete(reminder.id)

        with pytest.raises(InvalidTransitionError):
            await manager.async_complete(reminder.id)

    async def test_delete_cancels_alert(self, coordinator) -> None:
        """Deleting an active reminder cancels its alert."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        await manager.async_delete_reminder(reminder.id)

        assert coordinator.store.reminders == {}
        assert coordinator.store.notifications == {}


class TestCancelOnComplete:
    """Completion with the cancel option enabled."""

    @pytest.fixture
    def mock_config_entry(self) -> MockConfigEntry:
        """Entry with cancel-on-complete enabled."""
        return MockConfigEntry(
            domain=const.DOMAIN,
            title="ParenTime",
            data={},
            options={**const.DEFAULT_OPTIONS, const.CONF_CANCEL_ON_COMPLETE: True},
            entry_id="test_entry_id",
        )

    async def test_complete_cancels_alert(self, coordinator) -> None:
        """The pending alert is cancelled on completion."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        await manager.async_complete(reminder.id)

        assert coordinator.store.notifications == {}


class TestDeactivateCompleted:
    """A reminder completed while active can still have its alert cancelled."""

    async def test_deactivate_completed_cancels_alert(self, coordinator) -> None:
        """The alert goes; the reminder stays completed."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)
        await manager.async_complete(reminder.id)

        await manager.async_deactivate(reminder.id)

        assert manager.get_reminder(reminder.id).is_completed
        assert coordinator.store.notifications == {}
        assert coordinator.notification_manager._timers == {}


# ============================================================================
# Storage failures
# ============================================================================


class TestStorageFailure:
    """A failed write raises storage_error once and changes nothing."""

    @pytest.fixture
    def provisional(self, coordinator):
        """Skip the consent write so each lifecycle call writes once."""
        with patch.object(
            coordinator.notification_manager,
            "authorization_status",
            return_value=const.AUTH_STATUS_PROVISIONAL,
        ):
            yield

    @staticmethod
    def _failing_save(coordinator):
        return patch.object(
            coordinator.store._store, "async_save", side_effect=OSError("disk full")
        )

    async def test_activate_write_fails(self, coordinator, provisional) -> None:
        """The reminder stays inactive with no alert, and a retry activates it."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager

        with (
            self._failing_save(coordinator) as mock_save,
            pytest.raises(HomeAssistantError) as err,
        ):
            await manager.async_activate(reminder.id)

        assert err.value.translation_key == const.TRANS_KEY_ERROR_STORAGE
        assert mock_save.await_count == 1
        assert not manager.get_reminder(reminder.id).is_activated
        assert coordinator.store.notifications == {}
        assert coordinator.notification_manager._timers == {}

        assert await manager.async_activate(reminder.id) == (
            const.ACTIVATION_RESULT_ACTIVATED
        )

    async def test_deactivate_write_fails(self, coordinator, provisional) -> None:
        """The reminder stays active and its alert stays armed."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)
        alert_id = ReminderEngine.notification_key(reminder)

        with (
            self._failing_save(coordinator) as mock_save,
            pytest.raises(HomeAssistantError),
        ):
            await manager.async_deactivate(reminder.id)

        assert mock_save.await_count == 1
        assert manager.get_reminder(reminder.id).is_activated
        assert alert_id in coordinator.store.notifications
        assert alert_id in coordinator.notification_manager._timers

    async def test_complete_write_fails(self, coordinator, provisional) -> None:
        """The reminder is not completed and can be completed later."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)

        with (
            self._failing_save(coordinator) as mock_save,
            pytest.raises(HomeAssistantError),
        ):
            await manager.async_complete(reminder.id)

        assert mock_save.await_count == 1
        assert not manager.get_reminder(reminder.id).is_completed
        assert (await manager.async_complete(reminder.id)).is_completed

    async def test_delete_reminder_write_fails(
        self, coordinator, provisional
    ) -> None:
        """The reminder and its armed alert are kept."""
        reminder = await _custom_reminder(coordinator)
        manager = coordinator.reminder_manager
        await manager.async_activate(reminder.id)
        alert_id = ReminderEngine.notification_key(reminder)

        with (
            self._failing_save(coordinator) as mock_save,
            pytest.raises(HomeAssistantError),
        ):
            await manager.async_delete_reminder(reminder.id)

        assert mock_save.await_count == 1
        assert manager.get_reminder(reminder.id).is_activated
        assert alert_id in coordinator.store.notifications
        assert alert_id in coordinator.notification_manager._timers

    async def test_ignore_suggestion_write_fails(self, coordinator) -> None:
        """The template is not hidden when the write fails."""
        with (
            self._failing_save(coordinator),
            pytest.raises(HomeAssistantError),
        ):
            await coordinator.reminder_manager.async_ignore_suggestion(
                CHILD_ID, "dtp_series"
            )

        assert coordinator.reminder_manager.ignored_template_ids(CHILD_ID) == []


# ============================================================================
# Template activation
# ============================================================================


class TestActivateTemplate:
    """Commit and activate the next occurrence of a catalog template."""

    async def test_activate_next_dose(self, coordinator) -> None:
        """The next dtp dose of a one-month-old is two months after birth."""
        child_id = await _baby(coordinator, 1)
        child = coordinator.child_manager.get_child(child_id)

        reminder, result = await coordinator.reminder_manager.async_activate_template(
            child_id, "dtp_series"
        )

        assert result == const.ACTIVATION_RESULT_ACTIVATED
        assert reminder.template_id == "dtp_series"
        assert reminder.due_date == dt_add_months(child.birth_date, 2)
        assert reminder.is_activated
        assert ReminderEngine.notification_key(reminder) in (
            coordinator.store.notifications
        )

    async def test_activate_again_reuses_reminder(self, coordinator) -> None:
        """The same occurrence is not duplicated."""
        child_id = await _baby(coordinator, 1)
        manager = coordinator.reminder_manager
        first, _ = await manager.async_activate_template(child_id, "dtp_series")

        second, result = await manager.async_activate_template(child_id, "dtp_series")

        assert second.id == first.id
        assert result == const.ACTIVATION_RESULT_ALREADY_ACTIVE
        assert len(manager.list_for_child(child_id)) == 1

    async def test_no_occurrence_within_horizon(self, coordinator) -> None:
        """A template due years ahead raises no_occurrence."""
        child_id = await _baby(coordinator, 1)

        with pytest.raises(HomeAssistantError) as err:
            await coordinator.reminder_manager.async_activate_template(
                child_id, "hpv_series"
            )

        assert err.value.translation_key == const.TRANS_KEY_ERROR_NO_OCCURRENCE

    async def test_unknown_template(self, coordinator) -> None:
        """Unknown template ids raise not found."""
        with pytest.raises(HomeAssistantError) as err:
            await coordinator.reminder_manager.async_activate_template(
                CHILD_ID, "unknown_template"
            )

        assert err.value.translation_key == const.TRANS_KEY_ERROR_NOT_FOUND


# ============================================================================
# Read models
# ============================================================================


class TestReadModels:
    """Upcoming, overdue, suggestions and dashboard for Emma (born 2026-01-01)."""

    async def test_upcoming_next_dtp_dose(self, coordinator) -> None:
        """At five months, the next dtp dose is the 11-month one."""
        occurrences = coordinator.reminder_manager.upcoming(
            CHILD_ID, 12, reference_date=REFERENCE_DATE
        )

        dtp = [occ for occ in occurrences if occ.series_id == "dtp"]
        assert [occ.due_date for occ in dtp] == [date(2026, 12, 1)]

    async def test_upcoming_only_activated(self, coordinator) -> None:
        """Without activated reminders nothing is returned."""
        occurrences = coordinator.reminder_manager.upcoming(
            CHILD_ID, 12, only_activated=True, reference_date=REFERENCE_DATE
        )

        assert occurrences == []

    async def test_overdue_dtp_doses(self, coordinator) -> None:
        """The 2 and 4 month doses are overdue on 2026-06-01."""
        occurrences = coordinator.reminder_manager.overdue(
            CHILD_ID, reference_date=REFERENCE_DATE
        )

        dtp = [occ.due_date for occ in occurrences if occ.template_id == "dtp_series"]
        assert dtp == [date(2026, 3, 1), date(2026, 5, 1)]

    async def test_ignored_suggestion_is_hidden(self, coordinator) -> None:
        """Ignoring a template hides its suggestion for the child."""
        manager = coordinator.reminder_manager
        before = {s.template_id for s in manager.suggestions(CHILD_ID, REFERENCE_DATE)}
        assert "dtp_series" in before

        await manager.async_ignore_suggestion(CHILD_ID, "dtp_series")
        await manager.async_ignore_suggestion(CHILD_ID, "dtp_series")

        after = {s.template_id for s in manager.suggestions(CHILD_ID, REFERENCE_DATE)}
        assert "dtp_series" not in after
        assert manager.ignored_template_ids(CHILD_ID) == ["dtp_series"]

    async def test_committed_template_is_not_suggested(self, coordinator) -> None:
        """A template with an open reminder is no longer suggested."""
        manager = coordinator.reminder_manager
        occurrence = next(
            occ
            for occ in manager.overdue(CHILD_ID, reference_date=REFERENCE_DATE)
            if occ.template_id == "dtp_series"
        )

        await manager.async_create_from_occurrence(CHILD_ID, occurrence)

        suggested = {
            s.template_id for s in manager.suggestions(CHILD_ID, REFERENCE_DATE)
        }
        assert occurrence.template_id not in suggested

    async def test_dashboard_buckets(
        self, hass: HomeAssistant, coordinator
    ) -> None:
        """Suggestions and open reminders are split into now and upcoming."""
        manager = coordinator.reminder_manager
        await _custom_reminder(coordinator, "2026-06-03")

        buckets = manager.dashboard(CHILD_ID, REFERENCE_DATE)

        assert len(buckets.now) <= const.DEFAULT_DASHBOARD_MAX_NOW
        assert len(buckets.upcoming) <= const.DEFAULT_DASHBOARD_MAX_UPCOMING
        assert any(isinstance(item, ReminderItem) for item in buckets.now)
        assert all(
            isinstance(item, (ReminderItem, SuggestionItem))
            for item in [*buckets.now, *buckets.upcoming]
        )
