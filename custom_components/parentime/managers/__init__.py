"""Manager modules for ParenTime integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and own every store mutation.
"""

from .base_manager import BaseManager
from .child_manager import ChildManager
from .notification_manager import NotificationManager
from .reminder_manager import ReminderManager

__all__ = [
    "BaseManager",
    "ChildManager",
    "NotificationManager",
    "ReminderManager",
]
