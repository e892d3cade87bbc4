"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_MAX_TIME_ENTRIES = 3
DEFAULT_BULK_CLOSE_MAX_WORKERS = 4
DEFAULT_REALTIME_TIMEOUT_SECONDS = 2.0
DEFAULT_DB_TIMEOUT_SECONDS = 5

CREW_CHIEF_ROLE_CODE = "CC"
WORKER_ROLE_CODE = "WR"

TIMESHEET_TOPIC_PREFIX = "timesheet-"
SHIFT_TOPIC_PREFIX = "shift-"
STATUS_UPDATE_EVENT = "status-update"
ASSIGNMENT_UPDATE_EVENT = "assignment-update"
