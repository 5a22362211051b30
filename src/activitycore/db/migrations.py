"""
Additive column upgrades for existing SQLite activity databases.

create_all() never alters an existing table, so a database file whose tables
lack any of the optional columns below gets them added with ALTER TABLE.
Every step checks the live schema first, so the run is safe to repeat on
each start.
"""
import logging
from typing import Set

from sqlalchemy import text

logger = logging.getLogger(__name__)

# (table, column, SQLite type) for the nullable columns added on top of the base tables
COLUMN_ADDITIONS = (
    ("activity", "relative_effort", "REAL"),
    ("activity", "best_10km_seconds", "INTEGER"),
    ("gpspoint", "power_watts", "INTEGER"),
    ("gpspoint", "temperature_c", "REAL"),
)


def run_migrations(engine) -> None:
    """Add any column from COLUMN_ADDITIONS that the database lacks.

    Only SQLite files are upgraded in place; other backends are expected to
    be created fresh from the current models.
    """
    if engine.dialect.name != "sqlite":
        logger.info("Skipping column migrations on %s", engine.dialect.name)
        return

    with engine.connect() as conn:
        for table, column, col_type in COLUMN_ADDITIONS:
            if column in _table_columns(conn, table):
                continue
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))
            logger.info("Added column %s.%s", table, column)
        conn.commit()


def _table_columns(conn, table: str) -> Set[str]:
    """Column names of `table` as reported by PRAGMA table_info."""
    return {row[1] for row in conn.execute(text(f"PRAGMA table_info({table})"))}
