"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_EDIT_WINDOW_DAYS = 7
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_REFERENCE_TIMEZONE = "Asia/Kolkata"

DEFAULT_SECTION = "A"
DEFAULT_COHORT_SPAN_YEARS = 4
MAX_NOTES_LENGTH = 1000
