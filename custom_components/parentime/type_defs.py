"""Type definitions for ParenTime storage structures.

HYBRID APPROACH (TypedDict + dataclasses)
=========================================

1. **TypedDict for PERSISTED structures** (what lives in the Store document):
   ChildData, ReminderData, SuggestionStateData, PendingNotificationData.

2. **Frozen dataclasses for RUNTIME values** (see models.py):
   Child, ReminderTemplate, Occurrence, ScheduledReminder, Suggestion.
   Engines work exclusively with these; managers convert at the boundary
   with `from_dict()` / `as_dict()`.

IMPORTANT: This file must NOT import from coordinator.py or any manager to
avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime null checks and `.get()`
defaults remain in the managers.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ChildId = str  # UUID string
ReminderId = str  # UUID string
TemplateId = str  # Catalog id, e.g. "dtp_series"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Persisted entities
# =============================================================================


class ChildData(TypedDict):
    """A child record as stored in `children`."""

    internal_id: ChildId
    first_name: str
    last_name: str
    birth_date: ISODate


class ReminderData(TypedDict):
    """A scheduled reminder as stored in `reminders`."""

    id: ReminderId
    child_id: ChildId
    template_id: TemplateId | None
    title: str
    category: str
    priority: str
    due_date: ISODate
    description: str | None
    is_activated: bool
    is_completed: bool
    completed_at: ISODatetime | None


class SuggestionStateData(TypedDict):
    """Per-child suggestion bookkeeping in `suggestion_states`."""

    ignored_template_ids: list[TemplateId]


class PendingNotificationData(TypedDict):
    """A scheduled alert that has not fired yet, in `notifications`."""

    id: str
    title: str
    body: str
    fire_at: ISODatetime


class MetaData(TypedDict):
    """Storage metadata."""

    schema_version: int
    last_updated: NotRequired[ISODatetime | None]


# =============================================================================
# Catalog documents (validated by template_catalog)
# =============================================================================


class ConditionsData(TypedDict, total=False):
    """Year/birth-date eligibility conditions of a template."""

    min_age: int
    max_age: int
    min_birth_date: ISODate
    max_birth_date: ISODate


class ScheduleData(TypedDict, total=False):
    """Month-based schedule of a template."""

    due_age_months: list[int]
    due_age_months_range: dict[str, int]


class TemplateData(TypedDict):
    """A template entry of a catalog document."""

    id: TemplateId
    title: str
    category: str
    priority: str
    description: NotRequired[str | None]
    series_id: NotRequired[str | None]
    conditions: NotRequired[ConditionsData]
    schedule: NotRequired[ScheduleData | None]
    default_notification_time: NotRequired[str]


# Whole storage document; buckets are keyed by internal id
StorageData = dict[str, Any]
