"""Run one badge fulfillment pass outside the web process (e.g. from cron)."""
from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_badges.attendance_badges.container import build_container
from src.attendance_badges.attendance_badges.logging_config import get_logger, setup_logging

logger = get_logger("scripts.process_badges")


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(debug=bool(getattr(settings, "DEBUG", False)))

    container = build_container(settings)
    summary = container.badge_worker.process_pending_badges()
    logger.info(
        "badge_pass_done",
        claimed=summary.claimed,
        ready=summary.ready,
        failed=summary.failed,
        released=summary.released,
    )
    return 0 if summary.released == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
