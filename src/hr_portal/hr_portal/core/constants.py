"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TIMESHEET_SLOTS = 10
MIN_PASSWORD_LENGTH = 6
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REPORT_DAYS = 7
DEFAULT_LIST_LIMIT = 200
GOAL_WEEKS = 4

TASK_PROGRESS_IN_PROGRESS = 50
TASK_PROGRESS_COMPLETED = 100
NOT_COMPLETED_REASON_TAG = "[NOT COMPLETED REASON]"

FOCUS_TOPIC = "focus"

# Sign-in sessions untouched for this long are closed.
SESSION_IDLE_MINUTES = 12 * 60
