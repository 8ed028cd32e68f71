"""
db/init_db.py
-------------
Creates the target database and the posts table if they do not already exist.
Runs once at startup, before the HTTP server accepts traffic.
Run this module directly to provision a fresh server:
    python -m db.init_db
"""

import sys

from psycopg2 import errors, sql

from config import ConfigError, DatabaseSettings, load_settings, validate_identifier
from db.connection import open_connection
from utils.logger import get_logger

logger = get_logger(__name__)

DATABASE_EXISTS_SQL = "SELECT 1 FROM pg_database WHERE datname = %s;"

# Identifiers cannot be bound as parameters, so the name is quoted into the text.
CREATE_DATABASE_SQL = sql.SQL("CREATE DATABASE {}")

CREATE_TABLE_SQL = sql.SQL("""
CREATE TABLE IF NOT EXISTS {} (
    ID          TEXT PRIMARY KEY,
    Imagen      TEXT,
    Nombre      TEXT,
    Descripcion TEXT
)
""")


def ensure_database(settings: DatabaseSettings) -> bool:
    """
    Create the target database unless it already exists.

    Connects to the maintenance database in autocommit mode, because
    CREATE DATABASE cannot run inside a transaction block.

    Args:
        settings: Connection parameters; ``settings.name`` is the target.

    Returns:
        True if the database was created, False if it already existed.

    Raises:
        psycopg2.Error: If the server is unreachable or a statement fails.
    """
    conn = open_connection(settings, settings.maintenance_name)
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute(DATABASE_EXISTS_SQL, (settings.name,))
            if cur.fetchone() is not None:
                logger.info(f"Database '{settings.name}' already exists.")
                return False
            try:
                cur.execute(CREATE_DATABASE_SQL.format(sql.Identifier(settings.name)))
            except errors.DuplicateDatabase:
                logger.info(f"Database '{settings.name}' was created concurrently.")
                return False
        logger.info(f"Database '{settings.name}' created.")
        return True
    finally:
        conn.close()


def ensure_table(settings: DatabaseSettings) -> None:
    """
    Create the posts table inside the target database.
    Safe to call multiple times (uses IF NOT EXISTS).

    Raises:
        ConfigError: If the table name is empty or not a valid identifier.
        psycopg2.Error: If the connection or the statement fails.
    """
    table = validate_identifier(settings.table, "DB_TABLE")
    conn = open_connection(settings)
    try:
        with conn.cursor() as cur:
            cur.execute(CREATE_TABLE_SQL.format(sql.Identifier(table)))
        conn.commit()
        logger.info(f"Table '{table}' is ready in database '{settings.name}'.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to create table '{table}': {e}")
        raise
    finally:
        conn.close()


def provision(settings: DatabaseSettings) -> None:
    """Ensure the database, then the table. Errors propagate to the caller."""
    ensure_database(settings)
    ensure_table(settings)


if __name__ == "__main__":
    try:
        provision(load_settings().database)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    print("✅ Database and table are ready.")
