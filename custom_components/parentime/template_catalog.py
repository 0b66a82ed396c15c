# File: template_catalog.py
"""Reminder template catalog loading and validation.

Catalog documents are JSON, either `{"templates": [...]}` or a bare list.
Each template is validated with voluptuous at the boundary:

- A document that cannot be parsed yields an empty catalog (logged, never raised).
- A template that fails validation is skipped with a warning.
- Unknown category values map to `custom`, unknown priorities to `info`.
- camelCase keys (`seriesId`, `dueAgeMonths`, ...) are accepted as aliases.

The bundled catalog lives in `catalog/default_templates.json`; a custom
catalog path can be configured in the options flow.
"""

from __future__ import annotations

from collections.abc import Iterator
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import voluptuous as vol

from . import const
from .models import Conditions, ReminderTemplate, Schedule
from .utils.dt_utils import dt_parse_date, dt_parse_time

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

# camelCase document keys accepted as aliases of the canonical keys
_KEY_ALIASES = {
    "seriesId": const.TEMPLATE_SERIES_ID,
    "defaultNotificationTime": const.TEMPLATE_NOTIFICATION_TIME,
    "minAge": const.TEMPLATE_MIN_AGE,
    "maxAge": const.TEMPLATE_MAX_AGE,
    "minBirthDate": const.TEMPLATE_MIN_BIRTH_DATE,
    "maxBirthDate": const.TEMPLATE_MAX_BIRTH_DATE,
    "dueAgeMonths": const.TEMPLATE_DUE_AGE_MONTHS,
    "dueAgeMonthsRange": const.TEMPLATE_DUE_AGE_MONTHS_RANGE,
}


# ==============================================================================
# VALIDATORS
# ==============================================================================


def _normalize_keys(value: Any) -> Any:
    """Rename camelCase keys recursively."""
    if isinstance(value, dict):
        return {_KEY_ALIASES.get(k, k): _normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_keys(v) for v in value]
    return value


def _calendar_date(value: Any):
    parsed = dt_parse_date(value) if isinstance(value, str) else None
    if parsed is None:
        raise vol.Invalid(f"invalid calendar date: {value!r}")
    return parsed


def _time_of_day(value: Any) -> str:
    if dt_parse_time(value) is None:
        raise vol.Invalid(f"invalid time of day: {value!r}")
    return value


def _enum_or_default(options: list[str], default: str):
    """Map unknown enum values to a safe default instead of failing."""

    def validator(value: Any) -> str:
        if isinstance(value, str) and value.lower() in options:
            return value.lower()
        const.LOGGER.debug(
            "DEBUG: Unknown catalog value '%s', using '%s'", value, default
        )
        return default

    return validator


def _month_range(value: Any) -> tuple[int, int]:
    """Accept {"min": a, "max": b} or [a, b]."""
    if isinstance(value, dict):
        bounds = (
            value.get(const.TEMPLATE_RANGE_MIN),
            value.get(const.TEMPLATE_RANGE_MAX),
        )
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        bounds = (value[0], value[1])
    else:
        raise vol.Invalid(f"invalid month range: {value!r}")
    try:
        range_min, range_max = (int(bound) for bound in bounds)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(f"invalid month range: {value!r}") from err
    if range_min < 0 or range_max < range_min:
        raise vol.Invalid(f"invalid month range: {value!r}")
    return (range_min, range_max)


CONDITIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.TEMPLATE_MIN_AGE): vol.Any(
            None, vol.All(vol.Coerce(int), vol.Range(min=0))
        ),
        vol.Optional(const.TEMPLATE_MAX_AGE): vol.Any(
            None, vol.All(vol.Coerce(int), vol.Range(min=0))
        ),
        vol.Optional(const.TEMPLATE_MIN_BIRTH_DATE): vol.Any(None, _calendar_date),
        vol.Optional(const.TEMPLATE_MAX_BIRTH_DATE): vol.Any(None, _calendar_date),
    },
    extra=vol.REMOVE_EXTRA,
)

SCHEDULE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.TEMPLATE_DUE_AGE_MONTHS): vol.Any(
            None, [vol.All(vol.Coerce(int), vol.Range(min=0))]
        ),
        vol.Optional(const.TEMPLATE_DUE_AGE_MONTHS_RANGE): vol.Any(None, _month_range),
    },
    extra=vol.REMOVE_EXTRA,
)

TEMPLATE_SCHEMA = vol.Schema(
    {
        vol.Required(const.TEMPLATE_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.TEMPLATE_TITLE): vol.All(str, vol.Length(min=1)),
        vol.Optional(
            const.TEMPLATE_CATEGORY, default=const.CATEGORY_CUSTOM
        ): _enum_or_default(const.CATEGORY_OPTIONS, const.CATEGORY_CUSTOM),
        vol.Optional(
            const.TEMPLATE_PRIORITY, default=const.PRIORITY_INFO
        ): _enum_or_default(const.PRIORITY_OPTIONS, const.PRIORITY_INFO),
        vol.Optional(const.TEMPLATE_DESCRIPTION): vol.Any(None, str),
        vol.Optional(const.TEMPLATE_SERIES_ID): vol.Any(None, str),
        vol.Optional(const.TEMPLATE_CONDITIONS, default={}): vol.Any(
            None, CONDITIONS_SCHEMA
        ),
        vol.Optional(const.TEMPLATE_SCHEDULE): vol.Any(None, SCHEDULE_SCHEMA),
        vol.Optional(
            const.TEMPLATE_NOTIFICATION_TIME, default=const.DEFAULT_NOTIFICATION_TIME
        ): _time_of_day,
    },
    extra=vol.REMOVE_EXTRA,
)


# ==============================================================================
# CATALOG
# ==============================================================================


class TemplateCatalog:
    """Ordered, read-only collection of reminder templates."""

    def __init__(self, templates: list[ReminderTemplate] | None = None) -> None:
        """Initialize the catalog."""
        self._templates: tuple[ReminderTemplate, ...] = tuple(templates or ())
        self._by_id = {template.id: template for template in self._templates}

    def __iter__(self) -> Iterator[ReminderTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._by_id

    @property
    def templates(self) -> tuple[ReminderTemplate, ...]:
        """Return all templates in document order."""
        return self._templates

    def get(self, template_id: str) -> ReminderTemplate | None:
        """Return a template by id, or None."""
        return self._by_id.get(template_id)


def build_template(data: dict[str, Any]) -> ReminderTemplate:
    """Validate one template document and build the runtime value.

    Raises:
        vol.Invalid: If the document does not describe a usable template.
    """
    validated = TEMPLATE_SCHEMA(_normalize_keys(data))

    conditions_data = validated.get(const.TEMPLATE_CONDITIONS) or {}
    conditions = Conditions(
        min_age=conditions_data.get(const.TEMPLATE_MIN_AGE),
        max_age=conditions_data.get(const.TEMPLATE_MAX_AGE),
        min_birth_date=conditions_data.get(const.TEMPLATE_MIN_BIRTH_DATE),
        max_birth_date=conditions_data.get(const.TEMPLATE_MAX_BIRTH_DATE),
    )

    schedule: Schedule | None = None
    schedule_data = validated.get(const.TEMPLATE_SCHEDULE)
    if schedule_data is not None:
        months = schedule_data.get(const.TEMPLATE_DUE_AGE_MONTHS)
        schedule = Schedule(
            due_age_months=tuple(months) if months else None,
            due_age_months_range=schedule_data.get(
                const.TEMPLATE_DUE_AGE_MONTHS_RANGE
            ),
        )
        if schedule.is_empty:
            const.LOGGER.warning(
                "WARNING: Template '%s' has an empty schedule and will never apply",
                validated[const.TEMPLATE_ID],
            )

    return ReminderTemplate(
        id=validated[const.TEMPLATE_ID],
        title=validated[const.TEMPLATE_TITLE],
        category=validated[const.TEMPLATE_CATEGORY],
        priority=validated[const.TEMPLATE_PRIORITY],
        description=validated.get(const.TEMPLATE_DESCRIPTION),
        series_id=validated.get(const.TEMPLATE_SERIES_ID),
        conditions=conditions,
        schedule=schedule,
        default_notification_time=validated[const.TEMPLATE_NOTIFICATION_TIME],
    )


def parse_catalog(
    document: str | bytes | dict[str, Any] | list[Any],
) -> TemplateCatalog:
    """Parse a catalog document, degrading gracefully on bad input."""
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            const.LOGGER.warning(
                "WARNING: Template catalog is not valid JSON, using empty catalog: %s",
                err,
            )
            return TemplateCatalog()

    if isinstance(document, dict):
        entries = document.get(const.CATALOG_TEMPLATES)
    else:
        entries = document

    if not isinstance(entries, list):
        const.LOGGER.warning(
            "WARNING: Template catalog has no template list, using empty catalog"
        )
        return TemplateCatalog()

    templates: list[ReminderTemplate] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            const.LOGGER.warning(
                "WARNING: Skipping catalog entry #%s: not an object", index
            )
            continue
        try:
            template = build_template(entry)
        except vol.Invalid as err:
            const.LOGGER.warning(
                "WARNING: Skipping invalid catalog template #%s (%s): %s",
                index,
                entry.get(const.TEMPLATE_ID, "?"),
                err,
            )
            continue
        if template.id in seen_ids:
            const.LOGGER.warning(
                "WARNING: Skipping duplicate catalog template id '%s'", template.id
            )
            continue
        seen_ids.add(template.id)
        templates.append(template)

    const.LOGGER.debug(
        "DEBUG: Parsed template catalog with %s templates", len(templates)
    )
    return TemplateCatalog(templates)


def default_catalog_path() -> Path:
    """Return the path of the bundled catalog."""
    return Path(__file__).parent / const.CATALOG_DIR / const.CATALOG_DEFAULT_FILE


def load_catalog_file(path: str | Path) -> TemplateCatalog:
    """Read and parse a catalog file (blocking I/O)."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        const.LOGGER.warning(
            "WARNING: Unable to read template catalog %s, using empty catalog: %s",
            path,
            err,
        )
        return TemplateCatalog()
    return parse_catalog(raw)


async def async_load_catalog(
    hass: HomeAssistant, custom_path: str | None = None
) -> TemplateCatalog:
    """Load the configured (or bundled) catalog in the executor."""
    path = Path(custom_path) if custom_path else default_catalog_path()
    if custom_path and not path.is_absolute():
        path = Path(hass.config.path(custom_path))
    catalog = await hass.async_add_executor_job(load_catalog_file, path)
    const.LOGGER.info(
        "INFO: Loaded %s reminder templates from %s", len(catalog), path.name
    )
    return catalog
