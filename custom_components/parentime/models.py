# File: models.py
"""Runtime value types for ParenTime.

Frozen dataclasses passed between engines and managers. Persisted shapes
live in type_defs.py; conversion happens through `from_dict()` / `as_dict()`
at the manager boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import TYPE_CHECKING, Any
import uuid

from . import const
from .utils.dt_utils import (
    dt_months_between,
    dt_parse_date,
    dt_to_date,
    dt_years_between,
)
from .utils.id_utils import occurrence_id

if TYPE_CHECKING:
    from .type_defs import ChildData, ReminderData


# =============================================================================
# CHILD
# =============================================================================


@dataclass(frozen=True, slots=True)
class Child:
    """A child whose health reminders are tracked."""

    internal_id: str
    first_name: str
    last_name: str
    birth_date: date

    @property
    def full_name(self) -> str:
        """Return first and last name joined."""
        return f"{self.first_name} {self.last_name}".strip()

    def age_in_years(self, reference_date: date) -> int:
        """Whole completed years at reference_date, never negative."""
        return dt_years_between(self.birth_date, reference_date)

    def age_in_months(self, reference_date: date) -> int:
        """Whole completed months at reference_date, never negative."""
        return dt_months_between(self.birth_date, reference_date)

    @classmethod
    def from_dict(cls, data: ChildData | dict[str, Any]) -> Child:
        """Build from a stored child record."""
        birth_date = dt_parse_date(data.get(const.DATA_CHILD_BIRTH_DATE))
        if birth_date is None:
            raise ValueError(
                f"Child {data.get(const.DATA_CHILD_INTERNAL_ID)} "
                "has no valid birth date"
            )
        return cls(
            internal_id=data[const.DATA_CHILD_INTERNAL_ID],
            first_name=data.get(const.DATA_CHILD_FIRST_NAME, ""),
            last_name=data.get(const.DATA_CHILD_LAST_NAME, ""),
            birth_date=birth_date,
        )

    def as_dict(self) -> ChildData:
        """Return the storage representation."""
        return {
            "internal_id": self.internal_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "birth_date": self.birth_date.isoformat(),
        }


# =============================================================================
# TEMPLATES
# =============================================================================


@dataclass(frozen=True, slots=True)
class Conditions:
    """Year/birth-date eligibility conditions (all bounds inclusive)."""

    min_age: int | None = None
    max_age: int | None = None
    min_birth_date: date | None = None
    max_birth_date: date | None = None


@dataclass(frozen=True, slots=True)
class Schedule:
    """Month-based schedule: target ages, or a single [min, max] range."""

    due_age_months: tuple[int, ...] | None = None
    due_age_months_range: tuple[int, int] | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither targets nor a range are populated."""
        return not self.due_age_months and self.due_age_months_range is None


@dataclass(frozen=True, slots=True)
class ReminderTemplate:
    """Immutable catalog entry describing when a reminder applies."""

    id: str
    title: str
    category: str = const.CATEGORY_CUSTOM
    priority: str = const.PRIORITY_INFO
    description: str | None = None
    series_id: str | None = None
    conditions: Conditions = field(default_factory=Conditions)
    schedule: Schedule | None = None
    default_notification_time: str = const.DEFAULT_NOTIFICATION_TIME


# =============================================================================
# OCCURRENCES AND SUGGESTIONS (ephemeral)
# =============================================================================


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One dated instance of a template for a specific child."""

    id: str
    template_id: str
    series_id: str | None
    title: str
    category: str
    priority: str
    due_date: date
    description: str | None = None

    @classmethod
    def from_template(cls, template: ReminderTemplate, due_date: date) -> Occurrence:
        """Create the occurrence of a template on a due date."""
        return cls(
            id=occurrence_id(template.id, due_date),
            template_id=template.id,
            series_id=template.series_id,
            title=template.title,
            category=template.category,
            priority=template.priority,
            due_date=due_date,
            description=template.description,
        )

    @property
    def group_key(self) -> str:
        """Series id when present, else the template id."""
        return self.series_id or self.template_id

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "id": self.id,
            "template_id": self.template_id,
            "series_id": self.series_id,
            "title": self.title,
            "category": self.category,
            "priority": self.priority,
            "due_date": self.due_date.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A catalog match offered before a due date is committed to."""

    id: str
    template_id: str
    title: str
    category: str
    priority: str
    description: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "id": self.id,
            "template_id": self.template_id,
            "title": self.title,
            "category": self.category,
            "priority": self.priority,
            "description": self.description,
        }


# =============================================================================
# SCHEDULED REMINDER (persisted)
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScheduledReminder:
    """A reminder committed for a child, tracked through its lifecycle.

    `completed_at` is set if and only if `is_completed` is true.
    """

    id: str
    child_id: str
    template_id: str | None
    title: str
    category: str
    priority: str
    due_date: date
    description: str | None = None
    is_activated: bool = False
    is_completed: bool = False
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        """Reject records that break the completion invariant."""
        if self.is_completed != (self.completed_at is not None):
            raise ValueError(
                f"Reminder {self.id}: completed_at must be set iff is_completed"
            )

    @classmethod
    def from_occurrence(
        cls, occurrence: Occurrence, child_id: str, reminder_id: str | None = None
    ) -> ScheduledReminder:
        """Promote an occurrence into an inactive reminder."""
        return cls(
            id=reminder_id or str(uuid.uuid4()),
            child_id=child_id,
            template_id=occurrence.template_id,
            title=occurrence.title,
            category=occurrence.category,
            priority=occurrence.priority,
            due_date=occurrence.due_date,
            description=occurrence.description,
        )

    @classmethod
    def from_dict(cls, data: ReminderData | dict[str, Any]) -> ScheduledReminder:
        """Build from a stored reminder record."""
        due_date = dt_to_date(data.get(const.DATA_REMINDER_DUE_DATE))
        if due_date is None:
            raise ValueError(
                f"Reminder {data.get(const.DATA_REMINDER_ID)} has no due date"
            )
        completed_raw = data.get(const.DATA_REMINDER_COMPLETED_AT)
        completed_at = datetime.fromisoformat(completed_raw) if completed_raw else None
        return cls(
            id=data[const.DATA_REMINDER_ID],
            child_id=data[const.DATA_REMINDER_CHILD_ID],
            template_id=data.get(const.DATA_REMINDER_TEMPLATE_ID),
            title=data.get(const.DATA_REMINDER_TITLE, ""),
            category=data.get(const.DATA_REMINDER_CATEGORY, const.CATEGORY_CUSTOM),
            priority=data.get(const.DATA_REMINDER_PRIORITY, const.PRIORITY_INFO),
            due_date=due_date,
            description=data.get(const.DATA_REMINDER_DESCRIPTION),
            is_activated=bool(data.get(const.DATA_REMINDER_IS_ACTIVATED, False)),
            is_completed=bool(data.get(const.DATA_REMINDER_IS_COMPLETED, False)),
            completed_at=completed_at,
        )

    def as_dict(self) -> ReminderData:
        """Return the storage representation."""
        return {
            "id": self.id,
            "child_id": self.child_id,
            "template_id": self.template_id,
            "title": self.title,
            "category": self.category,
            "priority": self.priority,
            "due_date": self.due_date.isoformat(),
            "description": self.description,
            "is_activated": self.is_activated,
            "is_completed": self.is_completed,
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
        }

    def evolve(self, **changes: Any) -> ScheduledReminder:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


# =============================================================================
# DASHBOARD ITEMS (two-variant union)
# =============================================================================


@dataclass(frozen=True, slots=True)
class SuggestionItem:
    """Dashboard entry wrapping a suggestion."""

    suggestion: Suggestion


@dataclass(frozen=True, slots=True)
class ReminderItem:
    """Dashboard entry wrapping a scheduled reminder."""

    reminder: ScheduledReminder


DashboardItem = SuggestionItem | ReminderItem
