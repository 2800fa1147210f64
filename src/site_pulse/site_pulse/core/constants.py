"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Overtime baseline: regular shift hours plus a flat lunch deduction.
# The deduction does not look at recorded break minutes.
DEFAULT_REGULAR_HOURS = 8
DEFAULT_FIXED_BREAK_HOURS = 1

DEFAULT_REPORT_DAYS = 7
DEFAULT_JWT_EXPIRES_HOURS = 24
DEFAULT_DB_POOL_SIZE = 10

API_PREFIX = "/api/time-tracking"
AUTH_PREFIX = "/api/auth"
