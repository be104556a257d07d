import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from callspend.config import settings
from callspend.database import create_db_engine

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


def alembic_config(database_url: Optional[str] = None) -> Config:
    config = Config(str(ALEMBIC_INI))
    # ConfigParser interpolation treats % as a directive, so escape URL-encoded passwords.
    url = (database_url or settings.database_url).replace("%", "%%")
    config.set_main_option("sqlalchemy.url", url)
    config.attributes["configure_logger"] = False
    return config


def existing_tables(database_url: str) -> list[str]:
    db_engine = create_db_engine(database_url)
    try:
        with db_engine.connect() as connection:
            return inspect(connection).get_table_names()
    finally:
        db_engine.dispose()


def run_migrations(database_url: Optional[str] = None, revision: str = "head") -> None:
    """Bring the schema up to ``revision``.

    A database whose tables were created without Alembic (``create_all``) is
    stamped at head instead, so later upgrades start from a known baseline.
    """
    url = database_url or settings.database_url
    config = alembic_config(url)
    tables = existing_tables(url)
    if tables and "alembic_version" not in tables:
        logger.warning("Existing tables detected without alembic version; stamping %s.", revision)
        command.stamp(config, revision)
        return
    command.upgrade(config, revision)
