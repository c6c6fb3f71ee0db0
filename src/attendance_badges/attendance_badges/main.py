from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.controller import register as register_api
from .container import build_container
from .database.bootstrap import apply_schema, ensure_initial_admin, list_tables
from .logging_config import get_logger, setup_logging
from .tasks import bind_container as bind_tasks_container

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    setup_logging(debug=app.config["DEBUG"])
    logger.info(
        "app_starting",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        ensure_initial_admin(db_config, allowed_domain=getattr(settings, "ALLOWED_DOMAIN"))
        logger.info("schema_ready", tables=len(list_tables(db_config)))

    container = build_container(settings)
    app.extensions["attendance_badges"] = container

    register_api(app, container)

    bind_tasks_container(container)

    if bool(getattr(settings, "RESUME_PENDING_BADGES_ON_START", True)):
        # Pick up jobs left pending by a previous process.
        container.badge_queue.resume_pending()

    return app
