"""Tests for OccurrenceEngine - pure logic, no HA fixtures needed.

Reference scenario: child born 2026-01-01, today 2026-06-01, DTP doses at
2, 4 and 11 months (due 2026-03-01, 2026-05-01 and 2026-12-01).
"""

from __future__ import annotations

from datetime import date

from custom_components.parentime import const
from custom_components.parentime.engines import (
    OccurrenceEngine,
    canonical_sort_key,
    priority_rank,
)
from custom_components.parentime.models import Conditions
from tests.helpers import make_reminder, make_template

TODAY = date(2026, 6, 1)

# =============================================================================
# TEST: GENERATION
# =============================================================================


class TestGenerate:
    """Expanding schedules into dated occurrences."""

    def test_due_dates_for_targets(self, dtp_template, child) -> None:
        """Targets map to birth date plus N months."""
        assert OccurrenceEngine.due_dates(dtp_template, child.birth_date) == [
            date(2026, 3, 1),
            date(2026, 5, 1),
            date(2026, 12, 1),
        ]

    def test_range_uses_floor_midpoint(self, child) -> None:
        """Range 16-19 months is due at month 17."""
        template = make_template("ror_2", month_range=(16, 19))
        assert OccurrenceEngine.due_dates(template, child.birth_date) == [
            date(2027, 6, 1)
        ]

    def test_template_without_schedule_yields_nothing(self, child) -> None:
        """Year-based templates never produce occurrences."""
        template = make_template("dentist_yearly", conditions=Conditions(min_age=3))
        assert OccurrenceEngine.generate([template], child, TODAY) == []

    def test_future_only_drops_past_occurrences(self, dtp_template, child) -> None:
        """Only the 11-month dose is still ahead."""
        occurrences = OccurrenceEngine.generate([dtp_template], child, TODAY)
        assert [occ.due_date for occ in occurrences] == [date(2026, 12, 1)]
        assert occurrences[0].id == "dtp_series_2026-12-01"

    def test_horizon_is_inclusive(self, dtp_template, child) -> None:
        """Six months ahead reaches exactly 2026-12-01; three does not."""
        assert OccurrenceEngine.generate([dtp_template], child, TODAY, 3) == []
        within = OccurrenceEngine.generate([dtp_template], child, TODAY, 6)
        assert [occ.due_date for occ in within] == [date(2026, 12, 1)]

    def test_duplicate_occurrences_are_collapsed(self, child) -> None:
        """The same template and day appear once."""
        template = make_template("dup", months=(8, 8))
        assert len(OccurrenceEngine.generate([template], child, TODAY)) == 1

    def test_canonical_order(self, child) -> None:
        """Priority rank first, then due date, then title."""
        templates = [
            make_template("b_info", months=(7,), priority=const.PRIORITY_INFO),
            make_template("a_req_late", months=(9,)),
            make_template("c_req_early", months=(7,)),
            make_template(
                "d_rec", months=(6,), priority=const.PRIORITY_RECOMMENDED
            ),
        ]
        occurrences = OccurrenceEngine.generate(templates, child, TODAY)
        assert [occ.template_id for occ in occurrences] == [
            "c_req_early",
            "a_req_late",
            "d_rec",
            "b_info",
        ]
        assert occurrences == sorted(occurrences, key=canonical_sort_key)

    def test_unknown_priority_ranks_last(self) -> None:
        """Anything outside the known priorities sorts after info."""
        assert priority_rank("bogus") > priority_rank(const.PRIORITY_INFO)


# =============================================================================
# TEST: SERIES RESOLUTION
# =============================================================================


class TestNextOccurrencePerSeries:
    """One actionable occurrence per series or lone template."""

    def test_series_returns_next_dose(self, dtp_template, child) -> None:
        """The 11-month dose is next on 2026-06-01."""
        result = OccurrenceEngine.next_occurrence_per_template_or_series(
            [dtp_template], child, TODAY
        )
        assert [occ.due_date for occ in result] == [date(2026, 12, 1)]

    def test_templates_sharing_a_series_collapse(self, child) -> None:
        """ROR dose 1 at 12 months hides dose 2 at 16-18 months."""
        templates = [
            make_template("ror_1", months=(12,), series_id="ror"),
            make_template("ror_2", month_range=(16, 18), series_id="ror"),
        ]
        result = OccurrenceEngine.next_occurrence_per_template_or_series(
            templates, child, TODAY
        )
        assert [(occ.template_id, occ.due_date) for occ in result] == [
            ("ror_1", date(2027, 1, 1))
        ]

    def test_fully_past_series_needs_include_overdue(
        self, dtp_template, child
    ) -> None:
        """After the last dose, only include_overdue returns the latest one."""
        later = date(2027, 6, 1)
        assert (
            OccurrenceEngine.next_occurrence_per_template_or_series(
                [dtp_template], child, later
            )
            == []
        )
        result = OccurrenceEngine.next_occurrence_per_template_or_series(
            [dtp_template], child, later, include_overdue=True
        )
        assert [occ.due_date for occ in result] == [date(2026, 12, 1)]

    def test_lone_templates_are_grouped_by_id(self, dtp_template, child) -> None:
        """Templates without a series each contribute their next occurrence."""
        checkup = make_template(
            "checkup_infant", months=(9, 24), priority=const.PRIORITY_RECOMMENDED
        )
        result = OccurrenceEngine.next_occurrence_per_template_or_series(
            [dtp_template, checkup], child, TODAY
        )
        assert [(occ.template_id, occ.due_date) for occ in result] == [
            ("dtp_series", date(2026, 12, 1)),
            ("checkup_infant", date(2026, 10, 1)),
        ]


# =============================================================================
# TEST: OVERDUE
# =============================================================================


class TestOverdue:
    """Past-due required occurrences."""

    def test_missed_doses_are_overdue(self, dtp_template, child) -> None:
        """Doses at 2 and 4 months are overdue on 2026-06-01."""
        overdue = OccurrenceEngine.overdue_occurrences([dtp_template], child, TODAY)
        assert [occ.due_date for occ in overdue] == [
            date(2026, 3, 1),
            date(2026, 5, 1),
        ]

    def test_only_required_templates_are_overdue(self, child) -> None:
        """Recommended and info templates never become overdue."""
        templates = [
            make_template("rec", months=(1,), priority=const.PRIORITY_RECOMMENDED),
            make_template("info", months=(1,), priority=const.PRIORITY_INFO),
        ]
        assert OccurrenceEngine.overdue_occurrences(templates, child, TODAY) == []

    def test_due_today_is_not_overdue(self, dtp_template, child) -> None:
        """Strictly before the reference date."""
        overdue = OccurrenceEngine.overdue_occurrences(
            [dtp_template], child, date(2026, 3, 1)
        )
        assert overdue == []


# =============================================================================
# TEST: SUGGESTIONS AND ACTIVATION FILTER
# =============================================================================


class TestSuggestions:
    """Suggestions and the activated-only filter."""

    def test_suggestions_are_sorted_by_priority_then_title(self, child) -> None:
        """Required before info; ties by title."""
        templates = [
            make_template(
                "vitamin_d", title="Vitamin D", priority=const.PRIORITY_INFO
            ),
            make_template("b_req", title="B", months=(5,)),
            make_template("a_req", title="A", months=(4,)),
        ]
        suggestions = OccurrenceEngine.suggestions(templates, child, TODAY)
        assert [s.template_id for s in suggestions] == ["a_req", "b_req", "vitamin_d"]
        assert suggestions[0].id == "child-emma_a_req"

    def test_ignored_templates_are_left_out(self, child) -> None:
        """Ignored template ids never surface."""
        templates = [make_template("vitamin_d"), make_template("eye_exam")]
        suggestions = OccurrenceEngine.suggestions(
            templates, child, TODAY, ["vitamin_d"]
        )
        assert [s.template_id for s in suggestions] == ["eye_exam"]

    def test_not_applicable_templates_are_left_out(self, child) -> None:
        """A template outside its window is not suggested."""
        template = make_template("ror_1", months=(12,))
        assert OccurrenceEngine.suggestions([template], child, TODAY) == []

    def test_filter_activated(self, dtp_template, child) -> None:
        """Only templates with an active, uncompleted reminder survive."""
        checkup = make_template("checkup_infant", months=(9,))
        occurrences = OccurrenceEngine.generate([dtp_template, checkup], child, TODAY)
        reminders = [
            make_reminder("r1", template_id="dtp_series", is_activated=True),
            make_reminder("r2", template_id="checkup_infant", is_activated=False),
        ]
        filtered = OccurrenceEngine.filter_activated(occurrences, reminders)
        assert [occ.template_id for occ in filtered] == ["dtp_series"]
