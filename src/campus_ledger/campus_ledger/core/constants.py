"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_THRESHOLD_HOUR = 9
DEFAULT_REPORT_DAYS = 7
DEFAULT_DATA_SERVICE_TIMEOUT = 10

MONTH_KEY_FORMAT = "%Y-%m"
# Installments with neither payment_date nor created_at land in this group.
UNDATED_MONTH_KEY = ""

TRANSACTION_PREFIX = "TXN"

# Stored in attendance_records.course_key for attendance not tied to a course.
GENERAL_COURSE_KEY = ""
