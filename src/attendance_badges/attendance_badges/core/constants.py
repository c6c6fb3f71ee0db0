"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CHECKIN_WINDOW_BEFORE_MINUTES = 15
DEFAULT_CHECKIN_WINDOW_AFTER_MINUTES = 5

EARTH_RADIUS_M = 6_371_000

BADGE_ID_PREFIX = "B"
BADGE_ID_SUFFIX_LENGTH = 3
BADGE_ID_MAX_ATTEMPTS = 5
BADGE_PROMPT_PREFIX = "A cohesive art piece inspired by: "
BADGE_PROMPT_WORD_COUNT = 5
BADGE_FILE_EXTENSION = ".jpg"
BADGE_HANDLER_NAME = "process_pending_badges"
BADGE_TRIGGER_DELAY_MS = 100
BADGE_CLAIM_TIMEOUT_SECONDS = 600
BADGE_TASK_NAME = "attendance_badges.process_pending_badges"
BADGE_TASK_QUEUE = "badges"

# Extra lifetime of a scheduled-run marker past its countdown, so a lost task
# cannot block scheduling forever.
SCHEDULE_MARKER_PREFIX = "scheduled:"
SCHEDULE_MARKER_GRACE_SECONDS = 60

WORD_LIST_CACHE_KEY = "WORD_LIST"
WORD_LIST_TTL_SECONDS = 21_600
WORD_LIST_MAX_CACHED_WORDS = 5_000
FALLBACK_WORDS = (
    "robot",
    "future",
    "tech",
    "space",
    "cyber",
    "data",
    "code",
    "mech",
    "gear",
    "volt",
)

# Per-entry size limit enforced by the in-memory and Redis caches.
CACHE_MAX_VALUE_BYTES = 100 * 1024
