from config.base import *  # noqa: F401,F403

DEBUG = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))  # noqa: F405

# Magic tokens for local testing
TEST_TOKENS = {
    "TEST_TOKEN_ADMIN": f"admin@{ALLOWED_DOMAIN}",  # noqa: F405
    "TEST_TOKEN_USER": f"student@{ALLOWED_DOMAIN}",  # noqa: F405
}
