"""Engine modules for ParenTime integration.

Contains pure computation engines:
- eligibility_engine: Template applicability (month windows, age/birth-date bounds)
- occurrence_engine: Occurrence generation, series resolution, overdue detection
- reminder_engine: Reminder lifecycle state machine and overdue presentation
- dashboard_engine: "now" / "upcoming" prioritization
"""

# Use relative imports within package to avoid mypy module resolution issues
from .dashboard_engine import DashboardBuckets, DashboardEngine
from .eligibility_engine import EligibilityEngine
from .occurrence_engine import OccurrenceEngine, canonical_sort_key, priority_rank
from .reminder_engine import InvalidTransitionError, ReminderEngine

__all__ = [
    "DashboardBuckets",
    "DashboardEngine",
    "EligibilityEngine",
    "InvalidTransitionError",
    "OccurrenceEngine",
    "ReminderEngine",
    "canonical_sort_key",
    "priority_rank",
]
