"""Eligibility Engine - decides whether a template applies to a child.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data. The caller
supplies the reference date already reduced to a local calendar date.

Two evaluation paths:
- Month path: templates with a schedule. A ±1 month tolerance window is applied
  around every target age; a range [min, max] widens to [min-1, max+1].
- Year path: templates without a schedule fall back to min/max age in years
  and min/max birth date bounds (all inclusive).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from ..models import Child, Conditions, ReminderTemplate, Schedule

# Months of slack on either side of a scheduled age
MONTH_TOLERANCE = 1


class EligibilityEngine:
    """Pure logic engine for template applicability."""

    @staticmethod
    def is_applicable(
        template: ReminderTemplate, child: Child, reference_date: date
    ) -> bool:
        """Return True when the template applies to the child at reference_date.

        A schedule takes precedence over year-based conditions when both exist.
        """
        if template.schedule is not None:
            return EligibilityEngine.matches_schedule(
                template.schedule, child.age_in_months(reference_date)
            )
        return EligibilityEngine.matches_conditions(
            template.conditions, child, reference_date
        )

    @staticmethod
    def matches_schedule(schedule: Schedule, age_in_months: int) -> bool:
        """Check an age in months against the schedule's tolerance windows.

        A schedule with neither targets nor a range never matches.
        """
        if schedule.due_age_months:
            return any(
                target - MONTH_TOLERANCE <= age_in_months <= target + MONTH_TOLERANCE
                for target in schedule.due_age_months
            )
        if schedule.due_age_months_range is not None:
            range_min, range_max = schedule.due_age_months_range
            return (
                range_min - MONTH_TOLERANCE
                <= age_in_months
                <= range_max + MONTH_TOLERANCE
            )
        return False

    @staticmethod
    def matches_conditions(
        conditions: Conditions, child: Child, reference_date: date
    ) -> bool:
        """Check year and birth-date bounds (all inclusive)."""
        age = EligibilityEngine.age_in_years(child, reference_date)
        if age is None:
            if conditions.min_age is not None or conditions.max_age is not None:
                return False
        else:
            if conditions.min_age is not None and age < conditions.min_age:
                return False
            if conditions.max_age is not None and age > conditions.max_age:
                return False

        if (
            conditions.min_birth_date is not None
            and child.birth_date < conditions.min_birth_date
        ):
            return False
        if (
            conditions.max_birth_date is not None
            and child.birth_date > conditions.max_birth_date
        ):
            return False
        return True

    @staticmethod
    def age_in_years(child: Child, reference_date: date) -> int | None:
        """Return the child's age in whole years, or None when not computable."""
        if child.birth_date is None or reference_date is None:
            return None
        return child.age_in_years(reference_date)
