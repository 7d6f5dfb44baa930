# File: const.py
"""Constants for the HomeChores integration.

This file centralizes configuration keys, defaults, storage keys, service names,
signal suffixes and platform identifiers for consistency across the integration.
"""

import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
HOMECHORES_TITLE = "HomeChores"

DOMAIN = "homechores"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "homechores_data"
STORAGE_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_NOTIFY_SERVICE = "notify_service"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_REMINDER_INTERVAL = "reminder_interval"
CONF_HORIZON_DAYS = "horizon_days"

DEFAULT_NOTIFY_SERVICE = ""
DEFAULT_UPDATE_INTERVAL = 5  # minutes
DEFAULT_REMINDER_INTERVAL = 15  # minutes
DEFAULT_HORIZON_DAYS = 30

# ------------------------------------------------------------------------------------------------
# Scheduling Engine Limits
# ------------------------------------------------------------------------------------------------
# Occurrence lists are capped to guard against runaway loops
MAX_OCCURRENCES = 200
MAX_SEQUENTIAL_ITERATIONS = 100

# Upper bounds accepted from service input
MAX_FREQUENCY_INTERVAL = 365
MAX_GENERATION_OFFSET_DAYS = 365
MAX_NOTIFICATION_OFFSET_HOURS = 168

# Minimum seconds between two horizon generation passes
GENERATION_THROTTLE_SECONDS = 60
# A pass running longer than this is abandoned and the guard released
GENERATION_TIMEOUT_SECONDS = 300
# Pause between templates so the event loop stays responsive
GENERATION_TEMPLATE_DELAY = 0.05

# Custom expressions that cannot be parsed recur weekly
DEFAULT_CUSTOM_INTERVAL_DAYS = 7

# Urgency thresholds (days from start of today)
URGENCY_WEEK_DAYS = 7
URGENCY_TWO_WEEKS_DAYS = 14

# Reminders
DEFAULT_NOTIFICATION_OFFSET_HOURS = 6
REMINDER_WINDOW_HOURS = 1

# ------------------------------------------------------------------------------------------------
# Frequency Types
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_TIMES_PER_WEEK = "times_per_week"
FREQUENCY_CUSTOM = "custom"

FREQUENCY_TYPES = [
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FREQUENCY_MONTHLY,
    FREQUENCY_TIMES_PER_WEEK,
    FREQUENCY_CUSTOM,
]

# Keywords recognized in free-text frequencies (English / Hebrew)
CUSTOM_DAY_KEYWORDS = ("day", "יום")
CUSTOM_WEEK_KEYWORDS = ("week", "שבוע")
CUSTOM_MONTH_KEYWORDS = ("month", "חודש")
CUSTOM_DAILY_KEYWORDS = ("daily", "יומי", "כל יום")

# ------------------------------------------------------------------------------------------------
# Task States / Priorities / Categories
# ------------------------------------------------------------------------------------------------
TASK_STATUS_PENDING = "pending"
TASK_STATUS_IN_PROGRESS = "in_progress"
TASK_STATUS_COMPLETED = "completed"

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITIES = [PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW]

DEFAULT_CATEGORY = "household"
DEFAULT_PRIORITY = PRIORITY_MEDIUM

# ------------------------------------------------------------------------------------------------
# Urgency Buckets (display order: most urgent first)
# ------------------------------------------------------------------------------------------------
BUCKET_OVERDUE = "overdue"
BUCKET_TODAY = "today"
BUCKET_THIS_WEEK = "this_week"
BUCKET_COMING_SOON = "coming_soon"
BUCKET_LATER = "later"

URGENCY_BUCKETS = [
    BUCKET_OVERDUE,
    BUCKET_TODAY,
    BUCKET_THIS_WEEK,
    BUCKET_COMING_SOON,
    BUCKET_LATER,
]

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_REMINDERS_SENT = "reminders_sent"
DATA_META_LAST_GENERATION = "last_generation"
DATA_TEMPLATES = "templates"
DATA_TASKS = "tasks"

SCHEMA_VERSION = 1

# Shared entity fields
DATA_ID = "id"
DATA_CREATED_AT = "created_at"
DATA_UPDATED_AT = "updated_at"

# Template fields
DATA_TEMPLATE_NAME = "template_name"
DATA_TEMPLATE_DESCRIPTION = "description"
DATA_TEMPLATE_CATEGORY = "category"
DATA_TEMPLATE_PRIORITY = "priority"
DATA_TEMPLATE_ASSIGNED_TO = "assigned_to"
DATA_TEMPLATE_ESTIMATED_DURATION = "estimated_duration"
DATA_TEMPLATE_ROOM_LOCATION = "room_location"
DATA_TEMPLATE_FREQUENCY_TYPE = "frequency_type"
DATA_TEMPLATE_FREQUENCY_INTERVAL = "frequency_interval"
DATA_TEMPLATE_FREQUENCY_CUSTOM = "frequency_custom"
DATA_TEMPLATE_SELECTED_DAYS = "selected_days"
DATA_TEMPLATE_IS_ACTIVE = "is_active"
DATA_TEMPLATE_AUTO_GENERATE = "auto_generate"
DATA_TEMPLATE_GENERATION_OFFSET = "generation_offset"
DATA_TEMPLATE_NOTIFICATION_OFFSET_HOURS = "notification_offset_hours"

# Task fields
DATA_TASK_TEMPLATE_ID = "template_id"
DATA_TASK_TITLE = "title"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_CATEGORY = "category"
DATA_TASK_PRIORITY = "priority"
DATA_TASK_ASSIGNED_TO = "assigned_to"
DATA_TASK_DUE_DATE = "due_date"
DATA_TASK_DUE_TIME = "due_time"
DATA_TASK_SCHEDULED_DATE = "scheduled_date"
DATA_TASK_STATUS = "status"
DATA_TASK_IS_ARCHIVED = "is_archived"
DATA_TASK_COMPLETION_DATE = "completion_date"
DATA_TASK_DEFER_UNTIL = "defer_until"
DATA_TASK_DEFER_COUNT = "defer_count"
DATA_TASK_AUTO_GENERATED = "auto_generated"
DATA_TASK_ESTIMATED_DURATION = "estimated_duration"
DATA_TASK_ROOM_LOCATION = "room_location"
DATA_TASK_NOTIFICATION_OFFSET_HOURS = "notification_offset_hours"
DATA_TASK_POSTPONED_FROM_DATE = "postponed_from_date"
DATA_TASK_POSTPONED_DATE = "postponed_date"

# Template fields copied verbatim onto generated instances
TEMPLATE_TO_TASK_FIELDS = {
    DATA_TEMPLATE_DESCRIPTION: DATA_TASK_DESCRIPTION,
    DATA_TEMPLATE_CATEGORY: DATA_TASK_CATEGORY,
    DATA_TEMPLATE_PRIORITY: DATA_TASK_PRIORITY,
    DATA_TEMPLATE_ASSIGNED_TO: DATA_TASK_ASSIGNED_TO,
    DATA_TEMPLATE_ESTIMATED_DURATION: DATA_TASK_ESTIMATED_DURATION,
    DATA_TEMPLATE_ROOM_LOCATION: DATA_TASK_ROOM_LOCATION,
}

# ------------------------------------------------------------------------------------------------
# Signals (instance-scoped dispatcher suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_TASK_CREATED = "task_created"
SIGNAL_SUFFIX_TASK_UPDATED = "task_updated"
SIGNAL_SUFFIX_TASK_COMPLETED = "task_completed"
SIGNAL_SUFFIX_HORIZON_GENERATED = "horizon_generated"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_GENERATE_HORIZON = "generate_horizon"
SERVICE_GENERATE_TASK = "generate_task"
SERVICE_CREATE_TEMPLATE = "create_template"
SERVICE_CREATE_TASK = "create_task"
SERVICE_DEFER_TASK = "defer_task"
SERVICE_MOVE_TASK = "move_task"
SERVICE_POSTPONE_TASK = "postpone_task"
SERVICE_START_TASK = "start_task"
SERVICE_COMPLETE_TASK = "complete_task"

FIELD_TEMPLATE_ID = "template_id"
FIELD_TASK_ID = "task_id"
FIELD_DUE_DATE = "due_date"
FIELD_DUE_TIME = "due_time"
FIELD_UNTIL_DATE = "until_date"
FIELD_NEW_DATE = "new_date"
FIELD_TITLE = "title"
FIELD_NAME = "template_name"
FIELD_FREQUENCY = "frequency"

# ------------------------------------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------------------------------------
NOTIFY_DOMAIN = "notify"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
NOTIFY_DATA = "data"
NOTIFY_TAG = "tag"
NOTIFICATION_ID_FMT = "homechores_reminder_{}"
DISPLAY_DOT = "."

REMINDER_TITLE = "Chore reminder"
REMINDER_MESSAGE_FMT = "{title} is due {due}"

# ------------------------------------------------------------------------------------------------
# Sensor Attributes
# ------------------------------------------------------------------------------------------------
ATTR_TASKS = "tasks"
ATTR_BUCKET = "bucket"
ATTR_TASK_ID = "task_id"
ATTR_TITLE = "title"
ATTR_DUE_DATE = "due_date"
ATTR_DEFER_UNTIL = "defer_until"
ATTR_ASSIGNED_TO = "assigned_to"

# Entity naming
SENSOR_UID_SUFFIX_FMT = "_{}_tasks"
TRANS_KEY_SENSOR_BUCKET_FMT = "{}_tasks"

SENSOR_ICONS = {
    BUCKET_OVERDUE: "mdi:alert-circle-outline",
    BUCKET_TODAY: "mdi:calendar-today",
    BUCKET_THIS_WEEK: "mdi:calendar-week",
    BUCKET_COMING_SOON: "mdi:calendar-clock",
    BUCKET_LATER: "mdi:calendar-blank-outline",
}

# ------------------------------------------------------------------------------------------------
# Error Translation Keys (see translations/en.json "exceptions")
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ABORT_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry"
TRANS_KEY_ERROR_TASK_NOT_FOUND = "task_not_found"
TRANS_KEY_ERROR_TEMPLATE_NOT_FOUND = "template_not_found"
TRANS_KEY_ERROR_INVALID_DATE = "invalid_date"
TRANS_KEY_ERROR_INVALID_TIME = "invalid_time"
TRANS_KEY_ERROR_POSTPONE_NOT_BIWEEKLY = "postpone_not_biweekly"
TRANS_KEY_ERROR_POSTPONE_NO_DUE_DATE = "postpone_no_due_date"
TRANS_KEY_ERROR_INVALID_TRANSITION = "invalid_transition"
