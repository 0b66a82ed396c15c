"""Dashboard Engine - ranks suggestions and reminders into two buckets.

"now" holds reminders due within the next week (inclusive) followed by every
suggestion; "upcoming" holds reminders due after that window. Suggestions
never land in "upcoming".

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .. import const
from ..models import DashboardItem, ReminderItem, SuggestionItem


@dataclass(frozen=True, slots=True)
class DashboardBuckets:
    """Result of DashboardEngine.prioritize()."""

    now: list[DashboardItem] = field(default_factory=list)
    upcoming: list[DashboardItem] = field(default_factory=list)


class DashboardEngine:
    """Pure logic engine for dashboard prioritization."""

    @staticmethod
    def prioritize(
        items: Iterable[DashboardItem],
        reference_date: date,
        max_now: int = const.DEFAULT_DASHBOARD_MAX_NOW,
        max_upcoming: int = const.DEFAULT_DASHBOARD_MAX_UPCOMING,
    ) -> DashboardBuckets:
        """Split items into "now" and "upcoming", each truncated to its limit."""
        cutoff = reference_date + timedelta(days=const.DASHBOARD_NOW_WINDOW_DAYS)

        due_soon: list[ReminderItem] = []
        later: list[ReminderItem] = []
        suggestions: list[SuggestionItem] = []

        for item in items:
            match item:
                case SuggestionItem():
                    suggestions.append(item)
                case ReminderItem(reminder=reminder) if reminder.due_date <= cutoff:
                    due_soon.append(item)
                case ReminderItem():
                    later.append(item)

        due_soon.sort(key=lambda entry: entry.reminder.due_date)
        later.sort(key=lambda entry: entry.reminder.due_date)

        now: list[DashboardItem] = [*due_soon, *suggestions]
        return DashboardBuckets(
            now=now[: max(max_now, 0)],
            upcoming=list(later[: max(max_upcoming, 0)]),
        )
