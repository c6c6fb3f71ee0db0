from config.base import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")  # noqa: F405

DEBUG = False

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "s3")  # noqa: F405
