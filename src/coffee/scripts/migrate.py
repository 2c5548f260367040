# src/coffee/scripts/migrate.py
from __future__ import annotations

import logging
import os

from alembic import command
from alembic.config import Config

from coffee.core.settings import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def alembic_config() -> Config:
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    # Alembic runs synchronously, so hand it the sync driver URL.
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    return cfg


def run_upgrade_head() -> None:
    logger.info("Upgrading database schema to head")
    command.upgrade(alembic_config(), "head")


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    run_upgrade_head()
