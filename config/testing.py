from config.base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
RESUME_PENDING_BADGES_ON_START = False

CELERY_BROKER_URL = "memory://"
CELERY_TASK_ALWAYS_EAGER = True

TEST_TOKENS = {
    "TEST_TOKEN_ADMIN": f"admin@{ALLOWED_DOMAIN}",  # noqa: F405
    "TEST_TOKEN_USER": f"student@{ALLOWED_DOMAIN}",  # noqa: F405
}
