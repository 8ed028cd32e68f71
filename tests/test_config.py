"""Tests for configuration loading."""

import pytest

from config import ConfigError, load_settings, validate_identifier
from tests.conftest import make_db_settings

REQUIRED = {"DB_NAME": "prograred", "DB_TABLE": "posts"}


def test_load_settings_defaults() -> None:
    settings = load_settings(REQUIRED)
    db = settings.database
    assert (db.host, db.port, db.user, db.password) == ("localhost", 5432, "postgres", "")
    assert db.name == "prograred"
    assert db.table == "posts"
    assert db.maintenance_name == "postgres"
    assert db.sslmode == "disable"
    assert (db.pool_min, db.pool_max) == (1, 10)
    assert settings.server.host == "0.0.0.0"
    assert settings.server.port == 3000
    assert settings.server.log_level == "INFO"


def test_load_settings_reads_every_value() -> None:
    env = REQUIRED | {
        "DB_HOST": "postgres_db",
        "DB_PORT": "6543",
        "DB_USER": "app",
        "DB_PASSWORD": "secret",
        "DB_POOL_MIN": "2",
        "DB_POOL_MAX": "4",
        "SERVER_PORT": "8080",
        "LOG_LEVEL": "debug",
    }
    settings = load_settings(env)
    assert settings.database.host == "postgres_db"
    assert settings.database.port == 6543
    assert settings.database.user == "app"
    assert settings.database.password == "secret"
    assert (settings.database.pool_min, settings.database.pool_max) == (2, 4)
    assert settings.server.port == 8080
    assert settings.server.log_level == "DEBUG"


def test_load_settings_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_NAME", "from_env")
    monkeypatch.setenv("DB_TABLE", "items")
    settings = load_settings()
    assert settings.database.name == "from_env"
    assert settings.database.table == "items"


@pytest.mark.parametrize("missing", ["DB_NAME", "DB_TABLE"])
def test_load_settings_requires_name_and_table(missing: str) -> None:
    env = {k: v for k, v in REQUIRED.items() if k != missing}
    with pytest.raises(ConfigError, match=missing):
        load_settings(env)


def test_load_settings_rejects_non_integer_port() -> None:
    with pytest.raises(ConfigError, match="DB_PORT must be an integer"):
        load_settings(REQUIRED | {"DB_PORT": "five"})


def test_load_settings_rejects_bad_pool_bounds() -> None:
    with pytest.raises(ConfigError, match="pool bounds"):
        load_settings(REQUIRED | {"DB_POOL_MIN": "5", "DB_POOL_MAX": "2"})


@pytest.mark.parametrize(
    "name",
    ["posts; DROP TABLE users", 'posts"', "1posts", "my-table", "a" * 64],
)
def test_validate_identifier_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ConfigError):
        validate_identifier(name, "DB_TABLE")


@pytest.mark.parametrize("name", ["posts", "_posts", "Posts2024", "a" * 63])
def test_validate_identifier_accepts_plain_names(name: str) -> None:
    assert validate_identifier(name, "DB_TABLE") == name


def test_connect_kwargs_targets_database_and_sets_timeouts() -> None:
    kwargs = make_db_settings(statement_timeout_ms=1500).connect_kwargs()
    assert kwargs["dbname"] == "prograred"
    assert kwargs["connect_timeout"] == 10
    assert kwargs["options"] == "-c statement_timeout=1500"


def test_connect_kwargs_for_maintenance_database_without_statement_timeout() -> None:
    kwargs = make_db_settings(statement_timeout_ms=0).connect_kwargs("postgres")
    assert kwargs["dbname"] == "postgres"
    assert "options" not in kwargs


def test_table_name_is_folded_to_lower_case() -> None:
    settings = load_settings({"DB_NAME": "Prograred", "DB_TABLE": "Posts"})
    assert settings.database.table == "posts"
    assert settings.database.name == "Prograred"
