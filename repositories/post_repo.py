"""
repositories/post_repo.py
-------------------------
Data access layer for post records.
All SQL statements for the posts table live here. The table name is quoted
into the statement text once; every data value is a bound parameter.
"""

from psycopg2 import sql

from config import validate_identifier
from db.connection import ConnectionPool
from models.post import InvalidPostError, Post
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = sql.SQL("ID, Imagen, Nombre, Descripcion")


class PostNotFoundError(LookupError):
    """Raised when no row matches the requested ID."""

    def __init__(self, post_id: str):
        super().__init__(f"no post found with ID '{post_id}'")
        self.post_id = post_id


def _require_id(post_id: str) -> None:
    if not post_id:
        raise InvalidPostError("post ID must not be empty")


class PostRepository:
    """Repository for CRUD operations on the posts table."""

    def __init__(self, pool: ConnectionPool, table: str):
        """
        Args:
            pool: Shared connection pool for the target database.
            table: Name of the posts table, matched case-insensitively.

        Raises:
            config.ConfigError: If the table name is not a valid identifier.
        """
        self.pool = pool
        # Unquoted names fold to lower case in PostgreSQL; quote the folded form.
        self.table = validate_identifier(table, "DB_TABLE").lower()
        ident = sql.Identifier(self.table)
        self._insert_sql = sql.SQL(
            "INSERT INTO {} ({}) VALUES (%s, %s, %s, %s);"
        ).format(ident, _COLUMNS)
        self._select_all_sql = sql.SQL("SELECT {} FROM {};").format(_COLUMNS, ident)
        self._select_one_sql = sql.SQL("SELECT {} FROM {} WHERE ID = %s;").format(_COLUMNS, ident)
        self._update_sql = sql.SQL(
            "UPDATE {} SET Imagen = %s, Nombre = %s, Descripcion = %s WHERE ID = %s;"
        ).format(ident)
        self._delete_sql = sql.SQL("DELETE FROM {} WHERE ID = %s;").format(ident)

    # ── CREATE ────────────────────────────────────────────

    def insert(self, post: Post) -> None:
        """
        Insert a new post.

        Raises:
            InvalidPostError: If the ID is empty. No connection is used.
            psycopg2.IntegrityError: If a post with the same ID exists.
            psycopg2.Error: On any other database failure.
        """
        _require_id(post.id)
        conn = self.pool.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(self._insert_sql, (
                    post.id, post.imagen, post.nombre, post.descripcion,
                ))
            conn.commit()
            logger.info(f"Saved post '{post.id}'")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to save post '{post.id}': {e}")
            raise
        finally:
            self.pool.release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def select_all(self) -> list[Post]:
        """
        Fetch every post.

        Returns:
            List of Post objects in storage order (not guaranteed stable).
        """
        conn = self.pool.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(self._select_all_sql)
                return [Post.from_row(r) for r in cur.fetchall()]
        except Exception as e:
            logger.error(f"Failed to list posts: {e}")
            raise
        finally:
            self.pool.release_connection(conn)

    def select_by_id(self, post_id: str) -> Post:
        """
        Fetch a single post by ID.

        Raises:
            InvalidPostError: If the ID is empty. No connection is used.
            PostNotFoundError: If no row has that ID.
        """
        _require_id(post_id)
        conn = self.pool.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(self._select_one_sql, (post_id,))
                row = cur.fetchone()
        except Exception as e:
            logger.error(f"Failed to fetch post '{post_id}': {e}")
            raise
        finally:
            self.pool.release_connection(conn)

        if row is None:
            raise PostNotFoundError(post_id)
        return Post.from_row(row)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, post: Post) -> int:
        """
        Overwrite Imagen, Nombre and Descripcion of the post with ``post.id``.

        Returns:
            Number of rows updated. 0 means no post had that ID; this is not
            treated as an error.

        Raises:
            InvalidPostError: If the ID is empty. No connection is used.
        """
        _require_id(post.id)
        conn = self.pool.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(self._update_sql, (
                    post.imagen, post.nombre, post.descripcion, post.id,
                ))
                updated = cur.rowcount
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update post '{post.id}': {e}")
            raise
        finally:
            self.pool.release_connection(conn)

        if updated:
            logger.info(f"Updated post '{post.id}'")
        else:
            logger.warning(f"Update matched no post with ID '{post.id}'")
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete(self, post: Post) -> int:
        """
        Delete the post with ``post.id``. Other fields are ignored.

        Returns:
            Number of rows deleted (0 if the ID was not present).

        Raises:
            InvalidPostError: If the ID is empty. No connection is used.
        """
        _require_id(post.id)
        conn = self.pool.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(self._delete_sql, (post.id,))
                deleted = cur.rowcount
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete post '{post.id}': {e}")
            raise
        finally:
            self.pool.release_connection(conn)

        if deleted:
            logger.info(f"Deleted post '{post.id}'")
        else:
            logger.warning(f"Delete matched no post with ID '{post.id}'")
        return deleted
