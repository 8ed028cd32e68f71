"""
config.py
---------
Central configuration module. Loads environment variables from the .env
file and builds the immutable settings objects that are passed explicitly
to the provisioner, the connection pool and the repositories.
"""

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1 bytes.
_MAX_IDENTIFIER_LENGTH = 63
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""


def validate_identifier(value: str, setting: str) -> str:
    """
    Check that a database or table name is safe to use as an SQL identifier.

    Args:
        value: The raw identifier.
        setting: Name of the environment variable it came from (for errors).

    Returns:
        The identifier unchanged.

    Raises:
        ConfigError: If the identifier is empty, too long or contains
            characters outside the allow-list.
    """
    if not value:
        raise ConfigError(f"{setting} is not set.")
    if len(value) > _MAX_IDENTIFIER_LENGTH:
        raise ConfigError(
            f"{setting} must be at most {_MAX_IDENTIFIER_LENGTH} characters, got {len(value)}."
        )
    if not _IDENTIFIER_RE.match(value):
        raise ConfigError(f"{setting} is not a valid identifier: {value!r}")
    return value


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection parameters for PostgreSQL.

    Attributes:
        host: Server host name.
        port: Server port.
        user: Role used for every connection (provisioning included).
        password: Password for ``user``.
        name: Target database, created on startup if missing.
        table: Target table, created on startup if missing.
        maintenance_name: Database used while the target may not exist yet.
        sslmode: libpq ``sslmode``.
        pool_min: Connections kept open by the pool.
        pool_max: Upper bound on concurrently borrowed connections.
        connect_timeout: Seconds libpq waits for a connection.
        statement_timeout_ms: Server-side limit per statement (0 disables).
    """
    name: str
    table: str
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    maintenance_name: str = "postgres"
    sslmode: str = "disable"
    pool_min: int = 1
    pool_max: int = 10
    connect_timeout: int = 10
    statement_timeout_ms: int = 30000

    def __post_init__(self) -> None:
        validate_identifier(self.name, "DB_NAME")
        validate_identifier(self.table, "DB_TABLE")
        # The table is always quoted, so fold it the way PostgreSQL folds
        # unquoted names. DB_NAME is a libpq connection value and keeps its case.
        object.__setattr__(self, "table", self.table.lower())
        if self.pool_min < 0 or self.pool_max < max(self.pool_min, 1):
            raise ConfigError(
                f"Invalid pool bounds: DB_POOL_MIN={self.pool_min}, DB_POOL_MAX={self.pool_max}"
            )

    def connect_kwargs(self, database: Optional[str] = None) -> dict:
        """
        Keyword arguments for ``psycopg2.connect``.

        Args:
            database: Database to connect to. Defaults to the target database.
        """
        kwargs = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": database or self.name,
            "sslmode": self.sslmode,
            "connect_timeout": self.connect_timeout,
        }
        if self.statement_timeout_ms > 0:
            kwargs["options"] = f"-c statement_timeout={self.statement_timeout_ms}"
        return kwargs


@dataclass(frozen=True)
class ServerSettings:
    """HTTP listener and process-level settings."""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


@dataclass(frozen=True)
class Settings:
    database: DatabaseSettings
    server: ServerSettings


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build the application settings.

    Reads the .env file (if any) into the process environment first, unless
    an explicit mapping is given.

    Args:
        env: Optional mapping to read instead of ``os.environ``.

    Returns:
        The frozen Settings object.

    Raises:
        ConfigError: If a required value is missing or malformed.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    # ── PostgreSQL ────────────────────────────────────────────
    database = DatabaseSettings(
        host=env.get("DB_HOST", "localhost"),
        port=_get_int(env, "DB_PORT", 5432),
        user=env.get("DB_USER", "postgres"),
        password=env.get("DB_PASSWORD", ""),
        name=env.get("DB_NAME", "").strip(),
        table=env.get("DB_TABLE", "").strip(),
        maintenance_name=env.get("DB_MAINTENANCE_NAME", "postgres"),
        sslmode=env.get("DB_SSLMODE", "disable"),
        pool_min=_get_int(env, "DB_POOL_MIN", 1),
        pool_max=_get_int(env, "DB_POOL_MAX", 10),
        connect_timeout=_get_int(env, "DB_CONNECT_TIMEOUT", 10),
        statement_timeout_ms=_get_int(env, "DB_STATEMENT_TIMEOUT_MS", 30000),
    )

    # ── HTTP server ───────────────────────────────────────────
    server = ServerSettings(
        host=env.get("SERVER_HOST", "0.0.0.0"),
        port=_get_int(env, "SERVER_PORT", 3000),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )

    return Settings(database=database, server=server)
