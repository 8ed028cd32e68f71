"""
db/connection.py
----------------
Manages PostgreSQL connections.
Uses psycopg2's ThreadedConnectionPool, since request handlers run on the
web server's worker threads and share one pool.
"""

import threading
from typing import Optional

import psycopg2
from psycopg2 import pool

from config import DatabaseSettings
from utils.logger import get_logger

logger = get_logger(__name__)


def open_connection(settings: DatabaseSettings, database: Optional[str] = None):
    """
    Open a single, unpooled connection.

    Used by the schema provisioner, which runs before the pool exists and may
    need to connect to the maintenance database.

    Args:
        settings: Connection parameters.
        database: Database to connect to. Defaults to ``settings.name``.

    Raises:
        psycopg2.OperationalError: If the server is unreachable.
    """
    return psycopg2.connect(**settings.connect_kwargs(database))


class ConnectionPool:
    """Bounded pool of connections to the target database."""

    def __init__(self, settings: DatabaseSettings):
        """
        Open the pool.

        Args:
            settings: Connection parameters and pool bounds.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        try:
            self._pool = pool.ThreadedConnectionPool(
                settings.pool_min, settings.pool_max, **settings.connect_kwargs()
            )
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise
        # getconn fails instead of waiting when the pool is exhausted, so
        # borrowers queue on a semaphore sized to the pool.
        self._slots = threading.BoundedSemaphore(settings.pool_max)
        self._wait_timeout = settings.connect_timeout or None
        logger.info(
            f"Database connection pool initialized "
            f"({settings.pool_min}-{settings.pool_max} connections to '{settings.name}')."
        )

    def get_connection(self):
        """
        Borrow a connection from the pool.

        Blocks while all ``pool_max`` connections are borrowed, for at most
        ``connect_timeout`` seconds (forever when it is 0).

        Raises:
            psycopg2.pool.PoolError: If no connection frees up in time or the
                pool has been closed.
        """
        if not self._slots.acquire(timeout=self._wait_timeout):
            raise pool.PoolError(
                f"timed out after {self._wait_timeout}s waiting for a free connection"
            )
        try:
            return self._pool.getconn()
        except Exception:
            self._slots.release()
            raise

    def release_connection(self, conn) -> None:
        """Return a connection to the pool. Open transactions are rolled back."""
        try:
            self._pool.putconn(conn)
        finally:
            self._slots.release()

    def close(self) -> None:
        """Close all connections in the pool."""
        if not self._pool.closed:
            self._pool.closeall()
            logger.info("Database connection pool closed.")
