# File: services.py
"""Defines custom services for the ParenTime integration.

Mutating services manage children and reminders; response-only services
return upcoming/overdue occurrences, suggestions and the dashboard buckets.
Domain errors raised by managers and engines are translated here into
ServiceValidationError so automations get a readable message.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .data_builders import EntityValidationError
from .engines import ReminderEngine
from .engines.reminder_engine import InvalidTransitionError
from .models import DashboardItem, ReminderItem, ScheduledReminder, SuggestionItem
from .pt_helpers import get_coordinator
from .utils.dt_utils import dt_today_local

# --- Service Schemas ---
ADD_CHILD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_FIRST_NAME): cv.string,
        vol.Optional(const.FIELD_LAST_NAME, default=""): cv.string,
        vol.Required(const.FIELD_BIRTH_DATE): cv.string,
    }
)

UPDATE_CHILD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_ID): cv.string,
        vol.Optional(const.FIELD_FIRST_NAME): cv.string,
        vol.Optional(const.FIELD_LAST_NAME): cv.string,
        vol.Optional(const.FIELD_BIRTH_DATE): cv.string,
    }
)

CHILD_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_CHILD_ID): cv.string})

REMINDER_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_REMINDER_ID): cv.string})

CREATE_REMINDER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_ID): cv.string,
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_DUE_DATE): cv.string,
        vol.Optional(const.FIELD_CATEGORY): cv.string,
        vol.Optional(const.FIELD_PRIORITY): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_ACTIVATE, default=False): cv.boolean,
    }
)

CHILD_TEMPLATE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_ID): cv.string,
        vol.Required(const.FIELD_TEMPLATE_ID): cv.string,
    }
)

GET_UPCOMING_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHILD_ID): cv.string,
        vol.Optional(const.FIELD_MAX_MONTHS): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.FIELD_INCLUDE_OVERDUE, default=False): cv.boolean,
        vol.Optional(const.FIELD_ONLY_ACTIVATED, default=False): cv.boolean,
    }
)


# --- Response Serialization ---
def _reminder_response(reminder: ScheduledReminder) -> dict[str, Any]:
    data: dict[str, Any] = dict(reminder.as_dict())
    data["state"] = ReminderEngine.state_of(reminder)
    data["late_since"] = ReminderEngine.late_since_text(reminder, dt_today_local())
    return data


def _dashboard_item_response(item: DashboardItem) -> dict[str, Any]:
    match item:
        case SuggestionItem(suggestion=suggestion):
            return {
                const.RESPONSE_ITEM_KIND: const.ITEM_KIND_SUGGESTION,
                **suggestion.as_dict(),
            }
        case ReminderItem(reminder=reminder):
            return {
                const.RESPONSE_ITEM_KIND: const.ITEM_KIND_REMINDER,
                **_reminder_response(reminder),
            }
    raise TypeError(f"Unsupported dashboard item: {item!r}")


# --- Error Translation ---
def _translate_domain_errors(
    handler: Callable[[ServiceCall], Awaitable[ServiceResponse]],
) -> Callable[[ServiceCall], Awaitable[ServiceResponse]]:
    """Map validation and lifecycle errors to ServiceValidationError."""

    @wraps(handler)
    async def wrapper(call: ServiceCall) -> ServiceResponse:
        try:
            return await handler(call)
        except EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: %s: invalid %s (%s)",
                call.service,
                err.field,
                err.translation_key,
            )
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=err.translation_key,
                translation_placeholders=err.placeholders,
            ) from err
        except InvalidTransitionError as err:
            const.LOGGER.warning("WARNING: %s: %s", call.service, err)
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_TRANSITION,
                translation_placeholders={
                    "reminder_id": err.reminder_id,
                    "from_state": err.from_state,
                    "to_state": err.to_state,
                },
            ) from err

    return wrapper


def async_setup_services(hass: HomeAssistant) -> None:
    """Register ParenTime services (once per Home Assistant instance)."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_ADD_CHILD):
        return

    # --- Children ---
    @_translate_domain_errors
    async def handle_add_child(call: ServiceCall) -> ServiceResponse:
        """Handle adding a child."""
        coordinator = get_coordinator(hass)
        child_id = await coordinator.child_manager.async_add_child(dict(call.data))
        return {const.RESPONSE_CHILD_ID: child_id}

    @_translate_domain_errors
    async def handle_update_child(call: ServiceCall) -> ServiceResponse:
        """Handle updating a child's name or birth date."""
        coordinator = get_coordinator(hass)
        updates = dict(call.data)
        child_id = updates.pop(const.FIELD_CHILD_ID)
        await coordinator.child_manager.async_update_child(child_id, updates)
        return None

    async def handle_delete_child(call: ServiceCall) -> None:
        """Handle deleting a child and everything attached to it."""
        coordinator = get_coordinator(hass)
        await coordinator.child_manager.async_delete_child(
            call.data[const.FIELD_CHILD_ID]
        )

    # --- Reminders ---
    @_translate_domain_errors
    async def handle_create_reminder(call: ServiceCall) -> ServiceResponse:
        """Handle creating a user-defined reminder, optionally activating it."""
        coordinator = get_coordinator(hass)
        user_input = dict(call.data)
        child_id = user_input.pop(const.FIELD_CHILD_ID)
        activate = user_input.pop(const.FIELD_ACTIVATE, False)

        reminder = await coordinator.reminder_manager.async_create_custom(
            child_id, user_input
        )
        response: dict[str, Any] = {const.RESPONSE_REMINDER_ID: reminder.id}
        if activate:
            response[const.RESPONSE_RESULT] = (
                await coordinator.reminder_manager.async_activate(reminder.id)
            )
        return response

    @_translate_domain_errors
    async def handle_activate_reminder(call: ServiceCall) -> ServiceResponse:
        """Handle activating a reminder (permission check, then schedule)."""
        coordinator = get_coordinator(hass)
        result = await coordinator.reminder_manager.async_activate(
            call.data[const.FIELD_REMINDER_ID]
        )
        return {const.RESPONSE_RESULT: result}

    @_translate_domain_errors
    async def handle_deactivate_reminder(call: ServiceCall) -> ServiceResponse:
        """Handle deactivating a reminder."""
        coordinator = get_coordinator(hass)
        await coordinator.reminder_manager.async_deactivate(
            call.data[const.FIELD_REMINDER_ID]
        )
        return None

    @_translate_domain_errors
    async def handle_complete_reminder(call: ServiceCall) -> ServiceResponse:
        """Handle marking a reminder completed."""
        coordinator = get_coordinator(hass)
        await coordinator.reminder_manager.async_complete(
            call.data[const.FIELD_REMINDER_ID]
        )
        return None

    async def handle_delete_reminder(call: ServiceCall) -> None:
        """Handle deleting a reminder."""
        coordinator = get_coordinator(hass)
        await coordinator.reminder_manager.async_delete_reminder(
            call.data[const.FIELD_REMINDER_ID]
        )

    # --- Templates and suggestions ---
    @_translate_domain_errors
    async def handle_activate_template(call: ServiceCall) -> ServiceResponse:
        """Handle committing and activating the next occurrence of a template."""
        coordinator = get_coordinator(hass)
        reminder, result = await coordinator.reminder_manager.async_activate_template(
            call.data[const.FIELD_CHILD_ID], call.data[const.FIELD_TEMPLATE_ID]
        )
        return {
            const.RESPONSE_REMINDER_ID: reminder.id,
            const.RESPONSE_RESULT: result,
        }

    async def handle_ignore_suggestion(call: ServiceCall) -> None:
        """Handle hiding a suggestion for a child."""
        coordinator = get_coordinator(hass)
        await coordinator.reminder_manager.async_ignore_suggestion(
            call.data[const.FIELD_CHILD_ID], call.data[const.FIELD_TEMPLATE_ID]
        )

    # --- Queries ---
    async def handle_get_upcoming(call: ServiceCall) -> ServiceResponse:
        """Return the next occurrence per series or template."""
        coordinator = get_coordinator(hass)
        max_months = call.data.get(
            const.FIELD_MAX_MONTHS,
            coordinator.options[const.CONF_UPCOMING_HORIZON_MONTHS],
        )
        occurrences = coordinator.reminder_manager.upcoming(
            call.data[const.FIELD_CHILD_ID],
            max_months,
            include_overdue=call.data[const.FIELD_INCLUDE_OVERDUE],
            only_activated=call.data[const.FIELD_ONLY_ACTIVATED],
        )
        return {const.RESPONSE_OCCURRENCES: [occ.as_dict() for occ in occurrences]}

    async def handle_get_overdue(call: ServiceCall) -> ServiceResponse:
        """Return past-due required occurrences."""
        coordinator = get_coordinator(hass)
        occurrences = coordinator.reminder_manager.overdue(
            call.data[const.FIELD_CHILD_ID]
        )
        return {const.RESPONSE_OCCURRENCES: [occ.as_dict() for occ in occurrences]}

    async def handle_get_suggestions(call: ServiceCall) -> ServiceResponse:
        """Return suggestions applicable today."""
        coordinator = get_coordinator(hass)
        suggestions = coordinator.reminder_manager.suggestions(
            call.data[const.FIELD_CHILD_ID]
        )
        return {const.RESPONSE_SUGGESTIONS: [s.as_dict() for s in suggestions]}

    async def handle_get_dashboard(call: ServiceCall) -> ServiceResponse:
        """Return the prioritized "now" and "upcoming" buckets."""
        coordinator = get_coordinator(hass)
        buckets = coordinator.reminder_manager.dashboard(
            call.data[const.FIELD_CHILD_ID]
        )
        return {
            const.RESPONSE_NOW: [_dashboard_item_response(i) for i in buckets.now],
            const.RESPONSE_UPCOMING: [
                _dashboard_item_response(i) for i in buckets.upcoming
            ],
        }

    # --- Register Services ---
    registrations: list[tuple[str, Callable, vol.Schema, SupportsResponse]] = [
        (
            const.SERVICE_ADD_CHILD,
            handle_add_child,
            ADD_CHILD_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_UPDATE_CHILD,
            handle_update_child,
            UPDATE_CHILD_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DELETE_CHILD,
            handle_delete_child,
            CHILD_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_CREATE_REMINDER,
            handle_create_reminder,
            CREATE_REMINDER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_ACTIVATE_REMINDER,
            handle_activate_reminder,
            REMINDER_ID_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_DEACTIVATE_REMINDER,
            handle_deactivate_reminder,
            REMINDER_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_COMPLETE_REMINDER,
            handle_complete_reminder,
            REMINDER_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DELETE_REMINDER,
            handle_delete_reminder,
            REMINDER_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ACTIVATE_TEMPLATE,
            handle_activate_template,
            CHILD_TEMPLATE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_IGNORE_SUGGESTION,
            handle_ignore_suggestion,
            CHILD_TEMPLATE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_GET_UPCOMING,
            handle_get_upcoming,
            GET_UPCOMING_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GET_OVERDUE,
            handle_get_overdue,
            CHILD_ID_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GET_SUGGESTIONS,
            handle_get_suggestions,
            CHILD_ID_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GET_DASHBOARD,
            handle_get_dashboard,
            CHILD_ID_SCHEMA,
            SupportsResponse.ONLY,
        ),
    ]
    for service, handler, schema, supports_response in registrations:
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: ParenTime services have been registered successfully")


SERVICES = [
    const.SERVICE_ADD_CHILD,
    const.SERVICE_UPDATE_CHILD,
    const.SERVICE_DELETE_CHILD,
    const.SERVICE_CREATE_REMINDER,
    const.SERVICE_ACTIVATE_REMINDER,
    const.SERVICE_DEACTIVATE_REMINDER,
    const.SERVICE_COMPLETE_REMINDER,
    const.SERVICE_DELETE_REMINDER,
    const.SERVICE_ACTIVATE_TEMPLATE,
    const.SERVICE_IGNORE_SUGGESTION,
    const.SERVICE_GET_UPCOMING,
    const.SERVICE_GET_OVERDUE,
    const.SERVICE_GET_SUGGESTIONS,
    const.SERVICE_GET_DASHBOARD,
]


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister ParenTime services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: ParenTime services have been unregistered")
