"""Programmatic Alembic runner used at process startup."""
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def build_alembic_config(database_url: str) -> Config:
    """
    Build an Alembic config pointing at the bundled migrations.

    No ini file is used, so env.py leaves the application's logging untouched.
    """
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation: a literal % must be doubled
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def run_migrations(database_url: str) -> None:
    """
    Upgrade the database schema to the latest revision.

    Must be called outside a running event loop (env.py drives its own loop).
    """
    logger.info("Running database migrations...")
    command.upgrade(build_alembic_config(database_url), "head")
    logger.info("Migrations complete.")
