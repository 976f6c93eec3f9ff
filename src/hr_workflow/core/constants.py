"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_ALLOWED_RADIUS_METERS = 500.0
DEFAULT_LATE_CUTOFF = time(9, 15)

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 200

DEFAULT_LEAVE_BALANCE = {
    "Sick": 14,
    "Casual": 10,
    "Earned": 0,
}

# One automatic retry after losing a compare-and-swap on a request.
STALE_STATE_RETRIES = 1
