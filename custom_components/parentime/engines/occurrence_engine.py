"""Occurrence Engine - expands templates into dated occurrences.

This engine provides stateless, pure Python functions for:
- Occurrence generation from month-based schedules (with horizon filtering)
- Next-occurrence selection per series or template
- Overdue detection for required templates
- Suggestion building and activation filtering

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in ReminderManager.

Canonical order for every returned occurrence list is
(priority rank, due date, title), except overdue lists which sort by
(due date, title).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .. import const
from ..models import Occurrence, Suggestion
from ..utils.dt_utils import dt_add_months
from ..utils.id_utils import suggestion_id
from .eligibility_engine import EligibilityEngine

if TYPE_CHECKING:
    from datetime import date

    from ..models import Child, ReminderTemplate, ScheduledReminder


def priority_rank(priority: str) -> int:
    """Return the sort rank of a priority; unknown values rank last."""
    return const.PRIORITY_RANK.get(priority, const.PRIORITY_RANK_UNKNOWN)


def canonical_sort_key(occurrence: Occurrence) -> tuple[int, date, str]:
    """Sort key shared by every occurrence consumer."""
    return (priority_rank(occurrence.priority), occurrence.due_date, occurrence.title)


def overdue_sort_key(occurrence: Occurrence) -> tuple[date, str]:
    """Oldest first, then title."""
    return (occurrence.due_date, occurrence.title)


class OccurrenceEngine:
    """Pure logic engine for occurrence generation and selection.

    All methods are static - no instance state.
    """

    # =========================================================================
    # DUE DATES
    # =========================================================================

    @staticmethod
    def due_dates(template: ReminderTemplate, birth_date: date) -> list[date]:
        """Return every due date a template's schedule yields for a birth date.

        Targets map to birth + N months; a range maps to its midpoint,
        floor((min + max) / 2) months. Templates without a schedule yield none.
        """
        schedule = template.schedule
        if schedule is None:
            return []

        dates: list[date] = []
        if schedule.due_age_months:
            dates.extend(
                dt_add_months(birth_date, months) for months in schedule.due_age_months
            )
        if schedule.due_age_months_range is not None:
            range_min, range_max = schedule.due_age_months_range
            dates.append(dt_add_months(birth_date, (range_min + range_max) // 2))
        return dates

    # =========================================================================
    # GENERATION
    # =========================================================================

    @staticmethod
    def generate(
        templates: Iterable[ReminderTemplate],
        child: Child,
        reference_date: date,
        max_months_in_future: int | None = None,
        *,
        future_only: bool = True,
    ) -> list[Occurrence]:
        """Expand scheduled templates into dated occurrences.

        Args:
            templates: Catalog templates; templates without a schedule are skipped
            child: Child whose birth date anchors the schedule
            reference_date: Local calendar date used for filtering
            max_months_in_future: Optional upper bound, reference + N months (inclusive)
            future_only: Drop occurrences due before reference_date

        Returns:
            Deduplicated occurrences in canonical order.
        """
        upper_bound = (
            dt_add_months(reference_date, max_months_in_future)
            if max_months_in_future is not None
            else None
        )

        seen: dict[str, Occurrence] = {}
        for template in templates:
            for due_date in OccurrenceEngine.due_dates(template, child.birth_date):
                if future_only and due_date < reference_date:
                    continue
                if upper_bound is not None and due_date > upper_bound:
                    continue
                occurrence = Occurrence.from_template(template, due_date)
                seen.setdefault(occurrence.id, occurrence)

        return sorted(seen.values(), key=canonical_sort_key)

    # =========================================================================
    # SERIES RESOLUTION
    # =========================================================================

    @staticmethod
    def next_occurrence_per_template_or_series(
        templates: Iterable[ReminderTemplate],
        child: Child,
        reference_date: date,
        max_months_in_future: int | None = None,
        *,
        include_overdue: bool = False,
    ) -> list[Occurrence]:
        """Select one actionable occurrence per series (or per lone template).

        Within a group the first occurrence due on or after reference_date wins.
        When every occurrence is past, the latest past one is returned if
        include_overdue is set; otherwise the group contributes nothing.
        """
        occurrences = OccurrenceEngine.generate(
            templates,
            child,
            reference_date,
            max_months_in_future,
            future_only=False,
        )

        groups: dict[str, list[Occurrence]] = {}
        for occurrence in occurrences:
            groups.setdefault(occurrence.group_key, []).append(occurrence)

        selected: list[Occurrence] = []
        for group in groups.values():
            group.sort(key=overdue_sort_key)
            upcoming = next(
                (occ for occ in group if occ.due_date >= reference_date), None
            )
            if upcoming is not None:
                selected.append(upcoming)
            elif include_overdue:
                selected.append(group[-1])

        return sorted(selected, key=canonical_sort_key)

    # =========================================================================
    # OVERDUE DETECTION
    # =========================================================================

    @staticmethod
    def overdue_occurrences(
        templates: Iterable[ReminderTemplate], child: Child, reference_date: date
    ) -> list[Occurrence]:
        """Return past-due occurrences of required, scheduled templates.

        Sorted oldest first, then by title.
        """
        required = [
            template
            for template in templates
            if template.schedule is not None
            and template.priority == const.PRIORITY_REQUIRED
        ]
        occurrences = OccurrenceEngine.generate(
            required, child, reference_date, future_only=False
        )
        overdue = [occ for occ in occurrences if occ.due_date < reference_date]
        return sorted(overdue, key=overdue_sort_key)

    # =========================================================================
    # SUGGESTIONS AND ACTIVATION FILTER
    # =========================================================================

    @staticmethod
    def suggestions(
        templates: Iterable[ReminderTemplate],
        child: Child,
        reference_date: date,
        ignored_template_ids: Iterable[str] = (),
    ) -> list[Suggestion]:
        """Build suggestions for every template applicable today.

        Ignored templates are left out. Sorted by priority rank, then title.
        """
        ignored = set(ignored_template_ids)
        result = [
            Suggestion(
                id=suggestion_id(child.internal_id, template.id),
                template_id=template.id,
                title=template.title,
                category=template.category,
                priority=template.priority,
                description=template.description,
            )
            for template in templates
            if template.id not in ignored
            and EligibilityEngine.is_applicable(template, child, reference_date)
        ]
        return sorted(result, key=lambda s: (priority_rank(s.priority), s.title))

    @staticmethod
    def filter_activated(
        occurrences: Iterable[Occurrence], reminders: Iterable[ScheduledReminder]
    ) -> list[Occurrence]:
        """Keep occurrences whose template has an active, uncompleted reminder."""
        active_templates = {
            reminder.template_id
            for reminder in reminders
            if reminder.template_id is not None
            and reminder.is_activated
            and not reminder.is_completed
        }
        return [occ for occ in occurrences if occ.template_id in active_templates]
