from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_badges.attendance_badges.database.bootstrap import apply_schema, ensure_initial_admin, list_tables
from src.attendance_badges.attendance_badges.logging_config import get_logger, setup_logging

logger = get_logger("scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(debug=bool(getattr(settings, "DEBUG", False)))
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    created_admin = ensure_initial_admin(db_config, allowed_domain=settings.ALLOWED_DOMAIN)
    tables = list_tables(db_config)
    logger.info(
        "schema_applied",
        target=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        tables=len(tables),
        admin_created=created_admin,
    )


if __name__ == "__main__":
    main()
