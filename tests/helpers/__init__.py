"""Test helpers for ParenTime integration tests.

    from tests.helpers import CHILD_ID, make_child, make_reminder, make_template
"""

from tests.helpers.builders import (
    CHILD_ID,
    make_child,
    make_reminder,
    make_template,
)

__all__ = [
    "CHILD_ID",
    "make_child",
    "make_reminder",
    "make_template",
]
