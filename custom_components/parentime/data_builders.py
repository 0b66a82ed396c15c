"""Entity building and validation helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Child and user-created reminder field defaults
- Input validation (business rules at the service boundary)
- Complete record structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes service input (FIELD_* keys, aligned with DATA_* keys)
- Generates internal_id (UUID) for new entities
- Applies field defaults
- Returns a complete record ready for storage

### Validation Functions
`validate_<entity>_data()` returns a dict of errors (empty if valid) and never
raises; build functions raise EntityValidationError on the first failure.

Consumers:
- managers/child_manager.py
- managers/reminder_manager.py
- services.py
"""

from __future__ import annotations

from datetime import date
from typing import Any
import uuid

from . import const
from .type_defs import ChildData, ReminderData
from .utils.dt_utils import dt_parse_date, dt_today_local

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The FIELD_* constant identifying the input that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    return dt_parse_date(value) if isinstance(value, str) else None


# ==============================================================================
# CHILDREN
# ==============================================================================


def validate_child_data(
    data: dict[str, Any],
    *,
    is_update: bool = False,
    today: date | None = None,
) -> dict[str, str]:
    """Validate child business rules.

    Args:
        data: Child data dict with DATA_CHILD_* keys
        is_update: True when only provided fields are checked
        today: Reference "today" (defaults to the local calendar date)

    Returns:
        Dict of errors: {field: translation_key}. Empty means valid.

    Validation Rules:
        1. First name not blank
        2. Birth date parses as a calendar date
        3. Birth date is not in the future
    """
    errors: dict[str, str] = {}

    if not is_update or const.DATA_CHILD_FIRST_NAME in data:
        first_name = str(data.get(const.DATA_CHILD_FIRST_NAME) or "").strip()
        if not first_name:
            errors[const.FIELD_FIRST_NAME] = const.TRANS_KEY_INVALID_FIRST_NAME

    if not is_update or const.DATA_CHILD_BIRTH_DATE in data:
        birth_date = _coerce_date(data.get(const.DATA_CHILD_BIRTH_DATE))
        if birth_date is None:
            errors[const.FIELD_BIRTH_DATE] = const.TRANS_KEY_INVALID_BIRTH_DATE
        elif birth_date > (today or dt_today_local()):
            errors[const.FIELD_BIRTH_DATE] = const.TRANS_KEY_BIRTH_DATE_IN_FUTURE

    return errors


def build_child(
    user_input: dict[str, Any],
    existing: ChildData | None = None,
    *,
    today: date | None = None,
) -> ChildData:
    """Build child data for create or update operations.

    One function handles both create (existing=None) and update.

    Raises:
        EntityValidationError: If any field is invalid
    """
    errors = validate_child_data(
        user_input, is_update=existing is not None, today=today
    )
    if errors:
        field, translation_key = next(iter(errors.items()))
        raise EntityValidationError(field=field, translation_key=translation_key)

    def get_field(key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if key in user_input:
            return user_input[key]
        if existing is not None:
            return existing.get(key, default)
        return default

    if existing is None:
        internal_id = user_input.get(const.DATA_CHILD_INTERNAL_ID) or str(uuid.uuid4())
    else:
        internal_id = existing[const.DATA_CHILD_INTERNAL_ID]

    birth_date = _coerce_date(get_field(const.DATA_CHILD_BIRTH_DATE, None))

    return ChildData(
        internal_id=internal_id,
        first_name=str(get_field(const.DATA_CHILD_FIRST_NAME, "")).strip(),
        last_name=str(get_field(const.DATA_CHILD_LAST_NAME, "") or "").strip(),
        birth_date=birth_date.isoformat() if birth_date else "",
    )


# ==============================================================================
# USER-CREATED REMINDERS
# ==============================================================================


def validate_reminder_data(data: dict[str, Any]) -> dict[str, str]:
    """Validate a user-created reminder.

    Validation Rules:
        1. Title not blank
        2. Due date parses as a calendar date
        3. Category and priority, when given, are known values
    """
    errors: dict[str, str] = {}

    if not str(data.get(const.DATA_REMINDER_TITLE) or "").strip():
        errors[const.FIELD_TITLE] = const.TRANS_KEY_INVALID_TITLE

    if _coerce_date(data.get(const.DATA_REMINDER_DUE_DATE)) is None:
        errors[const.FIELD_DUE_DATE] = const.TRANS_KEY_INVALID_DUE_DATE

    category = data.get(const.DATA_REMINDER_CATEGORY)
    if category is not None and category not in const.CATEGORY_OPTIONS:
        errors[const.FIELD_CATEGORY] = const.TRANS_KEY_INVALID_CATEGORY

    priority = data.get(const.DATA_REMINDER_PRIORITY)
    if priority is not None and priority not in const.PRIORITY_OPTIONS:
        errors[const.FIELD_PRIORITY] = const.TRANS_KEY_INVALID_PRIORITY

    return errors


def build_reminder(user_input: dict[str, Any], child_id: str) -> ReminderData:
    """Build a user-created reminder (no template), starting inactive.

    Raises:
        EntityValidationError: If any field is invalid
    """
    errors = validate_reminder_data(user_input)
    if errors:
        field, translation_key = next(iter(errors.items()))
        raise EntityValidationError(field=field, translation_key=translation_key)

    due_date = _coerce_date(user_input[const.DATA_REMINDER_DUE_DATE])
    description = user_input.get(const.DATA_REMINDER_DESCRIPTION)

    return ReminderData(
        id=str(uuid.uuid4()),
        child_id=child_id,
        template_id=None,
        title=str(user_input[const.DATA_REMINDER_TITLE]).strip(),
        category=user_input.get(const.DATA_REMINDER_CATEGORY) or const.CATEGORY_CUSTOM,
        priority=user_input.get(const.DATA_REMINDER_PRIORITY) or const.PRIORITY_INFO,
        due_date=due_date.isoformat() if due_date else "",
        description=description.strip() if description else None,
        is_activated=False,
        is_completed=False,
        completed_at=None,
    )
