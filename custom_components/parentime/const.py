# File: const.py
"""Constants for the ParenTime integration.

This file centralizes storage keys, enum-like string values, configuration
options, service names and translation keys used across the integration.
"""

import logging

import homeassistant.util.dt as dt_util

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
PARENTIME_TITLE = "ParenTime"

# Integration Domain
DOMAIN = "parentime"

# Logger
LOGGER = logging.getLogger(__package__)

# No entity platforms; the integration is driven through services
PLATFORMS: list = []

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "parentime_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Update Interval (minutes)
DEFAULT_UPDATE_INTERVAL = 60

# Bundled catalog location (relative to the integration package)
CATALOG_DIR = "catalog"
CATALOG_DEFAULT_FILE = "default_templates.json"

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_UPDATED = "last_updated"
DATA_META_NOTIFICATION_CONSENT = "notification_consent"

DATA_CHILDREN = "children"
DATA_REMINDERS = "reminders"
DATA_SUGGESTION_STATES = "suggestion_states"
DATA_NOTIFICATIONS = "notifications"

# Child
DATA_CHILD_INTERNAL_ID = "internal_id"
DATA_CHILD_FIRST_NAME = "first_name"
DATA_CHILD_LAST_NAME = "last_name"
DATA_CHILD_BIRTH_DATE = "birth_date"

# Scheduled reminder
DATA_REMINDER_ID = "id"
DATA_REMINDER_CHILD_ID = "child_id"
DATA_REMINDER_TEMPLATE_ID = "template_id"
DATA_REMINDER_TITLE = "title"
DATA_REMINDER_CATEGORY = "category"
DATA_REMINDER_PRIORITY = "priority"
DATA_REMINDER_DUE_DATE = "due_date"
DATA_REMINDER_DESCRIPTION = "description"
DATA_REMINDER_IS_ACTIVATED = "is_activated"
DATA_REMINDER_IS_COMPLETED = "is_completed"
DATA_REMINDER_COMPLETED_AT = "completed_at"

# Suggestion state (per child)
DATA_SUGGESTION_IGNORED = "ignored_template_ids"

# Pending notification
DATA_NOTIFICATION_TITLE = "title"
DATA_NOTIFICATION_BODY = "body"
DATA_NOTIFICATION_FIRE_AT = "fire_at"

# ------------------------------------------------------------------------------------------------
# Template Catalog Keys
# ------------------------------------------------------------------------------------------------
TEMPLATE_ID = "id"
TEMPLATE_TITLE = "title"
TEMPLATE_CATEGORY = "category"
TEMPLATE_PRIORITY = "priority"
TEMPLATE_DESCRIPTION = "description"
TEMPLATE_SERIES_ID = "series_id"
TEMPLATE_CONDITIONS = "conditions"
TEMPLATE_SCHEDULE = "schedule"
TEMPLATE_NOTIFICATION_TIME = "default_notification_time"
TEMPLATE_MIN_AGE = "min_age"
TEMPLATE_MAX_AGE = "max_age"
TEMPLATE_MIN_BIRTH_DATE = "min_birth_date"
TEMPLATE_MAX_BIRTH_DATE = "max_birth_date"
TEMPLATE_DUE_AGE_MONTHS = "due_age_months"
TEMPLATE_DUE_AGE_MONTHS_RANGE = "due_age_months_range"
TEMPLATE_RANGE_MIN = "min"
TEMPLATE_RANGE_MAX = "max"
CATALOG_TEMPLATES = "templates"

# ------------------------------------------------------------------------------------------------
# Categories and Priorities
# ------------------------------------------------------------------------------------------------
CATEGORY_VACCINES = "vaccines"
CATEGORY_APPOINTMENTS = "appointments"
CATEGORY_MEDICATIONS = "medications"
CATEGORY_CUSTOM = "custom"
CATEGORY_OPTIONS = [
    CATEGORY_VACCINES,
    CATEGORY_APPOINTMENTS,
    CATEGORY_MEDICATIONS,
    CATEGORY_CUSTOM,
]

PRIORITY_REQUIRED = "required"
PRIORITY_RECOMMENDED = "recommended"
PRIORITY_INFO = "info"
PRIORITY_OPTIONS = [PRIORITY_REQUIRED, PRIORITY_RECOMMENDED, PRIORITY_INFO]

# Sort rank; anything not listed ranks last
PRIORITY_RANK = {
    PRIORITY_REQUIRED: 0,
    PRIORITY_RECOMMENDED: 1,
    PRIORITY_INFO: 2,
}
PRIORITY_RANK_UNKNOWN = 3

# ------------------------------------------------------------------------------------------------
# Reminder Lifecycle
# ------------------------------------------------------------------------------------------------
REMINDER_STATE_INACTIVE = "inactive"
REMINDER_STATE_ACTIVE = "active"
REMINDER_STATE_COMPLETED = "completed"

ACTIVATION_RESULT_ACTIVATED = "activated"
ACTIVATION_RESULT_ALREADY_ACTIVE = "already_active"
ACTIVATION_RESULT_PERMISSION_DENIED = "permission_denied"

# ------------------------------------------------------------------------------------------------
# Notification Authority
# ------------------------------------------------------------------------------------------------
AUTH_STATUS_UNDETERMINED = "undetermined"
AUTH_STATUS_AUTHORIZED = "authorized"
AUTH_STATUS_DENIED = "denied"
AUTH_STATUS_PROVISIONAL = "provisional"

NOTIFY_DOMAIN = "notify"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
NOTIFY_DATA = "data"
NOTIFY_TAG = "tag"
PERSISTENT_NOTIFICATION_DOMAIN = "persistent_notification"
PERSISTENT_NOTIFICATION_CREATE = "create"
PERSISTENT_NOTIFICATION_DISMISS = "dismiss"
NOTIFICATION_ID = "notification_id"
DISPLAY_DOT = "."

NOTIFICATION_TITLE_FMT = "ParenTime: {title}"
NOTIFICATION_BODY_FMT = (
    "Don't forget to book an appointment for {first_name}. Category: {category}"
)

# ------------------------------------------------------------------------------------------------
# Configuration (Options Flow)
# ------------------------------------------------------------------------------------------------
CONF_NOTIFY_SERVICE = "notify_service"
CONF_ENABLE_PERSISTENT_NOTIFICATIONS = "enable_persistent_notifications"
CONF_NOTIFICATION_TIME = "notification_time"
CONF_UPCOMING_HORIZON_MONTHS = "upcoming_horizon_months"
CONF_ACTIVATION_HORIZON_MONTHS = "activation_horizon_months"
CONF_DASHBOARD_MAX_NOW = "dashboard_max_now"
CONF_DASHBOARD_MAX_UPCOMING = "dashboard_max_upcoming"
CONF_CANCEL_ON_COMPLETE = "cancel_on_complete"
CONF_CATALOG_PATH = "catalog_path"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_NOTIFY_SERVICE = ""
DEFAULT_ENABLE_PERSISTENT_NOTIFICATIONS = True
DEFAULT_NOTIFICATION_TIME = "09:00"
DEFAULT_UPCOMING_HORIZON_MONTHS = 12
DEFAULT_ACTIVATION_HORIZON_MONTHS = 24
DEFAULT_DASHBOARD_MAX_NOW = 3
DEFAULT_DASHBOARD_MAX_UPCOMING = 3
DEFAULT_CANCEL_ON_COMPLETE = False
DEFAULT_CATALOG_PATH = ""

# CONF_ENABLE_PERSISTENT_NOTIFICATIONS has no default: unset means "undetermined"
DEFAULT_OPTIONS = {
    CONF_NOTIFY_SERVICE: DEFAULT_NOTIFY_SERVICE,
    CONF_NOTIFICATION_TIME: DEFAULT_NOTIFICATION_TIME,
    CONF_UPCOMING_HORIZON_MONTHS: DEFAULT_UPCOMING_HORIZON_MONTHS,
    CONF_ACTIVATION_HORIZON_MONTHS: DEFAULT_ACTIVATION_HORIZON_MONTHS,
    CONF_DASHBOARD_MAX_NOW: DEFAULT_DASHBOARD_MAX_NOW,
    CONF_DASHBOARD_MAX_UPCOMING: DEFAULT_DASHBOARD_MAX_UPCOMING,
    CONF_CANCEL_ON_COMPLETE: DEFAULT_CANCEL_ON_COMPLETE,
    CONF_CATALOG_PATH: DEFAULT_CATALOG_PATH,
    CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
}

# Dashboard "now" window (days, inclusive)
DASHBOARD_NOW_WINDOW_DAYS = 7

# Flow steps
CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_CHILD = "add_child"
SERVICE_UPDATE_CHILD = "update_child"
SERVICE_DELETE_CHILD = "delete_child"
SERVICE_CREATE_REMINDER = "create_reminder"
SERVICE_ACTIVATE_REMINDER = "activate_reminder"
SERVICE_DEACTIVATE_REMINDER = "deactivate_reminder"
SERVICE_COMPLETE_REMINDER = "complete_reminder"
SERVICE_DELETE_REMINDER = "delete_reminder"
SERVICE_ACTIVATE_TEMPLATE = "activate_template"
SERVICE_IGNORE_SUGGESTION = "ignore_suggestion"
SERVICE_GET_UPCOMING = "get_upcoming"
SERVICE_GET_OVERDUE = "get_overdue"
SERVICE_GET_SUGGESTIONS = "get_suggestions"
SERVICE_GET_DASHBOARD = "get_dashboard"

FIELD_CHILD_ID = "child_id"
FIELD_FIRST_NAME = "first_name"
FIELD_LAST_NAME = "last_name"
FIELD_BIRTH_DATE = "birth_date"
FIELD_REMINDER_ID = "reminder_id"
FIELD_TEMPLATE_ID = "template_id"
FIELD_TITLE = "title"
FIELD_CATEGORY = "category"
FIELD_PRIORITY = "priority"
FIELD_DUE_DATE = "due_date"
FIELD_DESCRIPTION = "description"
FIELD_ACTIVATE = "activate"
FIELD_MAX_MONTHS = "max_months"
FIELD_INCLUDE_OVERDUE = "include_overdue"
FIELD_ONLY_ACTIVATED = "only_activated"

# Service response keys
RESPONSE_CHILD_ID = "child_id"
RESPONSE_REMINDER_ID = "reminder_id"
RESPONSE_RESULT = "result"
RESPONSE_OCCURRENCES = "occurrences"
RESPONSE_SUGGESTIONS = "suggestions"
RESPONSE_NOW = "now"
RESPONSE_UPCOMING = "upcoming"
RESPONSE_ITEM_KIND = "kind"
ITEM_KIND_SUGGESTION = "suggestion"
ITEM_KIND_REMINDER = "reminder"

# ------------------------------------------------------------------------------------------------
# Signals (instance-scoped dispatcher suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_CHILD_CREATED = "child_created"
SIGNAL_SUFFIX_CHILD_UPDATED = "child_updated"
SIGNAL_SUFFIX_CHILD_DELETED = "child_deleted"
SIGNAL_SUFFIX_REMINDER_ACTIVATED = "reminder_activated"
SIGNAL_SUFFIX_REMINDER_DEACTIVATED = "reminder_deactivated"
SIGNAL_SUFFIX_REMINDER_COMPLETED = "reminder_completed"
SIGNAL_SUFFIX_REMINDER_DELETED = "reminder_deleted"

# Every signal above refreshes the coordinator overview
SIGNAL_SUFFIXES_DATA_CHANGED = (
    SIGNAL_SUFFIX_CHILD_CREATED,
    SIGNAL_SUFFIX_CHILD_UPDATED,
    SIGNAL_SUFFIX_CHILD_DELETED,
    SIGNAL_SUFFIX_REMINDER_ACTIVATED,
    SIGNAL_SUFFIX_REMINDER_DEACTIVATED,
    SIGNAL_SUFFIX_REMINDER_COMPLETED,
    SIGNAL_SUFFIX_REMINDER_DELETED,
)

# ------------------------------------------------------------------------------------------------
# Labels and Translation Keys
# ------------------------------------------------------------------------------------------------
LABEL_CHILD = "child"
LABEL_REMINDER = "reminder"
LABEL_TEMPLATE = "template"

TRANS_KEY_ERROR_NOT_FOUND = "not_found"
TRANS_KEY_ERROR_ALREADY_EXISTS = "already_exists"
TRANS_KEY_ERROR_STORAGE = "storage_error"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry"
TRANS_KEY_ERROR_INVALID_TRANSITION = "invalid_transition"
TRANS_KEY_ERROR_NO_OCCURRENCE = "no_occurrence"
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_INVALID_FIRST_NAME = "invalid_first_name"
TRANS_KEY_INVALID_BIRTH_DATE = "invalid_birth_date"
TRANS_KEY_BIRTH_DATE_IN_FUTURE = "birth_date_in_future"
TRANS_KEY_INVALID_TITLE = "invalid_title"
TRANS_KEY_INVALID_DUE_DATE = "invalid_due_date"
TRANS_KEY_INVALID_CATEGORY = "invalid_category"
TRANS_KEY_INVALID_PRIORITY = "invalid_priority"
TRANS_KEY_INVALID_NOTIFICATION_TIME = "invalid_notification_time"

# Display text
DISPLAY_OVERDUE = "Overdue"
DISPLAY_LATE_MONTHS_FMT = "{count} month(s) late"
DISPLAY_LATE_DAYS_FMT = "{count} day(s) late"
