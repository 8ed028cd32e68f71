"""Shared test constants, fixtures, and fakes."""

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import psycopg2
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from psycopg2 import sql

from config import DatabaseSettings, ServerSettings, Settings
from handlers.post_handler import get_repository
from main import create_app
from models.post import InvalidPostError, Post
from repositories.post_repo import PostNotFoundError

# -- Constants --

DB_NAME = "prograred"
TABLE = "posts"

CHAIR: dict[str, str] = {
    "ID": "1",
    "Imagen": "img.png",
    "Nombre": "Chair",
    "Descripcion": "Wooden chair",
}


# -- Factories --


def make_db_settings(**overrides: Any) -> DatabaseSettings:
    """Create DatabaseSettings with test defaults. Override any field."""
    defaults: dict[str, Any] = {"name": DB_NAME, "table": TABLE, "password": "root"}
    return DatabaseSettings(**(defaults | overrides))


def make_settings(**db_overrides: Any) -> Settings:
    return Settings(database=make_db_settings(**db_overrides), server=ServerSettings())


def render(query: Any) -> str:
    """Render a psycopg2.sql composable to text without a live connection."""
    if isinstance(query, str):
        return query
    if isinstance(query, sql.Composed):
        return "".join(render(part) for part in query.seq)
    if isinstance(query, sql.SQL):
        return query.string
    if isinstance(query, sql.Identifier):
        return ".".join('"%s"' % s.replace('"', '""') for s in query.strings)
    raise TypeError(f"cannot render {query!r}")


def squash(text: str) -> str:
    """Collapse whitespace so multi-line statements compare on one line."""
    return " ".join(text.split())


# -- Fakes --


class InMemoryPostRepository:
    """Dict-backed stand-in for PostRepository with the same contract."""

    def __init__(self) -> None:
        self.rows: dict[str, Post] = {}
        self.lookups = 0
        self.fail_with: Exception | None = None

    @staticmethod
    def _require_id(post_id: str) -> None:
        if not post_id:
            raise InvalidPostError("post ID must not be empty")

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def insert(self, post: Post) -> None:
        self._require_id(post.id)
        self._check()
        if post.id in self.rows:
            raise psycopg2.IntegrityError(
                'duplicate key value violates unique constraint "posts_pkey"'
            )
        self.rows[post.id] = Post(**vars(post))

    def select_all(self) -> list[Post]:
        self._check()
        return [Post(**vars(p)) for p in self.rows.values()]

    def select_by_id(self, post_id: str) -> Post:
        self._require_id(post_id)
        self._check()
        self.lookups += 1
        if post_id not in self.rows:
            raise PostNotFoundError(post_id)
        return Post(**vars(self.rows[post_id]))

    def update(self, post: Post) -> int:
        self._require_id(post.id)
        self._check()
        if post.id not in self.rows:
            return 0
        self.rows[post.id] = Post(**vars(post))
        return 1

    def delete(self, post: Post) -> int:
        self._require_id(post.id)
        self._check()
        return 1 if self.rows.pop(post.id, None) is not None else 0


# -- Fixtures --


@pytest.fixture
def cursor() -> MagicMock:
    cur = MagicMock()
    cur.fetchone.return_value = None
    cur.fetchall.return_value = []
    cur.rowcount = 0
    return cur


@pytest.fixture
def connection(cursor: MagicMock) -> MagicMock:
    """A psycopg2-like connection whose cursor() context yields ``cursor``."""
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def pool(connection: MagicMock) -> MagicMock:
    mock_pool = MagicMock()
    mock_pool.get_connection.return_value = connection
    return mock_pool


@pytest.fixture
def repository() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def app(repository: InMemoryPostRepository) -> FastAPI:
    application = create_app(make_settings())
    application.state.repository = repository
    application.dependency_overrides[get_repository] = lambda: repository
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c
