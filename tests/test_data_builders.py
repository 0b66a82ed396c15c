"""Tests for data_builders - validation and record building."""

from __future__ import annotations

from datetime import date

import pytest
from freezegun import freeze_time

from custom_components.parentime import const
from custom_components.parentime import data_builders as db

TODAY = date(2026, 6, 1)


class TestChildValidation:
    """validate_child_data / build_child."""

    def test_valid_child(self) -> None:
        """A named child born in the past has no errors."""
        data = {"first_name": "Emma", "birth_date": "2026-01-01"}
        assert db.validate_child_data(data, today=TODAY) == {}

    @pytest.mark.parametrize(
        ("data", "field", "key"),
        [
            (
                {"first_name": "  ", "birth_date": "2026-01-01"},
                const.FIELD_FIRST_NAME,
                const.TRANS_KEY_INVALID_FIRST_NAME,
            ),
            (
                {"first_name": "Emma", "birth_date": "someday"},
                const.FIELD_BIRTH_DATE,
                const.TRANS_KEY_INVALID_BIRTH_DATE,
            ),
            (
                {"first_name": "Emma", "birth_date": "2026-06-02"},
                const.FIELD_BIRTH_DATE,
                const.TRANS_KEY_BIRTH_DATE_IN_FUTURE,
            ),
        ],
    )
    def test_invalid_child(self, data: dict, field: str, key: str) -> None:
        """Each rule reports its own field and translation key."""
        assert db.validate_child_data(data, today=TODAY) == {field: key}

    def test_update_checks_only_provided_fields(self) -> None:
        """A partial update without a birth date is valid."""
        assert db.validate_child_data({"last_name": "M"}, is_update=True) == {}

    @freeze_time("2026-06-01 12:00:00", tz_offset=0)
    def test_future_check_defaults_to_local_today(self) -> None:
        """Without an explicit reference, today comes from the clock."""
        tomorrow = {"first_name": "Emma", "birth_date": "2026-06-02"}
        today = {"first_name": "Emma", "birth_date": "2026-06-01"}

        assert db.validate_child_data(tomorrow) == {
            const.FIELD_BIRTH_DATE: const.TRANS_KEY_BIRTH_DATE_IN_FUTURE
        }
        assert db.validate_child_data(today) == {}

    def test_build_child_generates_id_and_normalizes(self) -> None:
        """Names are trimmed and the birth date stored as ISO."""
        child = db.build_child(
            {"first_name": " Emma ", "birth_date": "01/02/2026"}, today=TODAY
        )
        assert child["internal_id"]
        assert child["first_name"] == "Emma"
        assert child["last_name"] == ""
        assert child["birth_date"] == "2026-02-01"

    def test_build_child_update_keeps_id(self) -> None:
        """Updates merge into the existing record."""
        existing = {
            "internal_id": "c1",
            "first_name": "Emma",
            "last_name": "Martin",
            "birth_date": "2026-01-01",
        }
        updated = db.build_child({"first_name": "Emmy"}, existing=existing)
        assert updated["internal_id"] == "c1"
        assert updated["first_name"] == "Emmy"
        assert updated["birth_date"] == "2026-01-01"

    def test_build_child_raises_on_first_error(self) -> None:
        """Invalid input raises EntityValidationError."""
        with pytest.raises(db.EntityValidationError) as err:
            db.build_child({"first_name": "", "birth_date": "2026-01-01"})
        assert err.value.field == const.FIELD_FIRST_NAME
        assert err.value.translation_key == const.TRANS_KEY_INVALID_FIRST_NAME


class TestReminderBuilder:
    """validate_reminder_data / build_reminder."""

    def test_build_custom_reminder_defaults(self) -> None:
        """No template, inactive, custom category and info priority."""
        reminder = db.build_reminder(
            {"title": " Allergist ", "due_date": "2026-09-01"}, "c1"
        )
        assert reminder["template_id"] is None
        assert reminder["title"] == "Allergist"
        assert reminder["category"] == const.CATEGORY_CUSTOM
        assert reminder["priority"] == const.PRIORITY_INFO
        assert reminder["is_activated"] is False
        assert reminder["completed_at"] is None

    @pytest.mark.parametrize(
        ("data", "key"),
        [
            ({"title": "", "due_date": "2026-09-01"}, const.TRANS_KEY_INVALID_TITLE),
            ({"title": "X", "due_date": "later"}, const.TRANS_KEY_INVALID_DUE_DATE),
            (
                {"title": "X", "due_date": "2026-09-01", "category": "surgery"},
                const.TRANS_KEY_INVALID_CATEGORY,
            ),
            (
                {"title": "X", "due_date": "2026-09-01", "priority": "urgent"},
                const.TRANS_KEY_INVALID_PRIORITY,
            ),
        ],
    )
    def test_invalid_reminder(self, data: dict, key: str) -> None:
        """Invalid input raises with the matching translation key."""
        with pytest.raises(db.EntityValidationError) as err:
            db.build_reminder(data, "c1")
        assert err.value.translation_key == key
