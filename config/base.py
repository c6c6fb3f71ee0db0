import os

SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_badges"),
}

DEBUG = bool(int(os.getenv("DEBUG", "0")))

# Apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Identity
ALLOWED_DOMAIN = os.getenv("ALLOWED_DOMAIN", "carobotics.org")
TOKENINFO_URL = os.getenv("TOKENINFO_URL", "https://oauth2.googleapis.com/tokeninfo")
TEST_TOKENS = {}

# Badge image generation
GENERATION_API_KEY = os.getenv("POLLINATIONS_API_KEY")
GENERATION_ENDPOINT = os.getenv("GENERATION_ENDPOINT", "https://enter.pollinations.ai/api/generate/image/")
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "nanobanana")
GENERATION_WIDTH = int(os.getenv("GENERATION_WIDTH", "1024"))
GENERATION_HEIGHT = int(os.getenv("GENERATION_HEIGHT", "1024"))
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "120"))

WORD_LIST_URL = os.getenv(
    "WORD_LIST_URL",
    "https://raw.githubusercontent.com/first20hours/google-10000-english/master/google-10000-english-no-swears.txt",
)

# Empty -> in-process cache. Set it when the Celery worker runs in its own
# process so both sides see the same scheduled-run markers.
REDIS_URL = os.getenv("REDIS_URL", "")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL or "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND") or None
# Run tasks inline in the caller instead of sending them to a worker
CELERY_TASK_ALWAYS_EAGER = bool(int(os.getenv("CELERY_TASK_ALWAYS_EAGER", "0")))

# "s3" or "local"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")
S3_BUCKET = os.getenv("S3_BUCKET", "")
S3_PREFIX = os.getenv("S3_PREFIX", "badges/")
S3_PUBLIC_BASE_URL = os.getenv("S3_PUBLIC_BASE_URL") or None
LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "static/badges")
LOCAL_STORAGE_BASE_URL = os.getenv("LOCAL_STORAGE_BASE_URL", "/static/badges")

CHECKIN_WINDOW_BEFORE_MINUTES = int(os.getenv("CHECKIN_WINDOW_BEFORE_MINUTES", "15"))
CHECKIN_WINDOW_AFTER_MINUTES = int(os.getenv("CHECKIN_WINDOW_AFTER_MINUTES", "5"))

BADGE_CLAIM_TIMEOUT_SECONDS = int(os.getenv("BADGE_CLAIM_TIMEOUT_SECONDS", "600"))
RESUME_PENDING_BADGES_ON_START = bool(int(os.getenv("RESUME_PENDING_BADGES_ON_START", "1")))
