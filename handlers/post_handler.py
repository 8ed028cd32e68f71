"""
handlers/post_handler.py
------------------------
HTTP endpoints for post records.
Each handler receives the decoded Post, calls one PostRepository operation
and wraps the outcome in an Envelope. Handlers are plain functions, so the
web server runs them on its worker threads while they block on the database.
"""

import json

import psycopg2
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from models.post import InvalidPostError, Post
from models.response import Envelope
from repositories.post_repo import PostNotFoundError, PostRepository
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

INVALID_REQUEST = "invalid request"


def get_repository(request: Request) -> PostRepository:
    """Dependency: the repository built at startup."""
    return request.app.state.repository


async def read_post(request: Request) -> Post:
    """
    Dependency: decode the request body as a JSON Post.

    The Content-Type header is not consulted; any body that parses as a JSON
    object is accepted.

    Raises:
        InvalidPostError: If the body is empty, not JSON, or not Post-shaped.
    """
    body = await request.body()
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidPostError(f"body is not valid JSON: {e}") from None
    return Post.from_dict(payload)


def respond(envelope: Envelope, status_code: int = 200) -> JSONResponse:
    return JSONResponse(envelope.to_dict(), status_code=status_code)


def _client_error(context: str, error: InvalidPostError) -> JSONResponse:
    logger.warning(f"{context}: {error}")
    return respond(Envelope.error(f"{context}: {error}"), 400)


def _server_error(context: str, error: Exception) -> JSONResponse:
    logger.error(f"{context}: {error}")
    return respond(Envelope.error(f"{context}: {error}"), 500)


@router.post("/notify")
def create_post(
    post: Post = Depends(read_post),
    repo: PostRepository = Depends(get_repository),
) -> JSONResponse:
    """Insert a new post."""
    try:
        repo.insert(post)
    except InvalidPostError as e:
        return _client_error("error saving post", e)
    except psycopg2.Error as e:
        return _server_error("error saving post", e)
    return respond(Envelope.message("saved"))


@router.get("/posts")
def list_posts(repo: PostRepository = Depends(get_repository)) -> JSONResponse:
    """Return every post."""
    try:
        posts = repo.select_all()
    except psycopg2.Error as e:
        return _server_error("error listing posts", e)
    return respond(Envelope.records(posts))


@router.post("/posts_uni")
def get_post(
    post: Post = Depends(read_post),
    repo: PostRepository = Depends(get_repository),
) -> JSONResponse:
    """
    Return the post whose ID is in the body.

    Only ``ID`` is read from the body. The reply carries the full record.
    """
    try:
        found = repo.select_by_id(post.id)
    except InvalidPostError as e:
        return _client_error("error fetching post", e)
    except PostNotFoundError as e:
        logger.info(f"Lookup miss: {e}")
        return respond(Envelope.error(f"error fetching post: {e}"), 404)
    except psycopg2.Error as e:
        return _server_error("error fetching post", e)
    return respond(Envelope.record(found))


@router.post("/update")
def update_post(
    post: Post = Depends(read_post),
    repo: PostRepository = Depends(get_repository),
) -> JSONResponse:
    """
    Overwrite the non-ID fields of a post.

    An ID that matches no row still gets the success reply.
    """
    try:
        repo.update(post)
    except InvalidPostError as e:
        return _client_error("error updating post", e)
    except psycopg2.Error as e:
        return _server_error("error updating post", e)
    return respond(Envelope.message("updated"))


@router.post("/delete")
def delete_post(
    post: Post = Depends(read_post),
    repo: PostRepository = Depends(get_repository),
) -> JSONResponse:
    """Delete a post by ID. An ID that matches no row still gets the success reply."""
    try:
        repo.delete(post)
    except InvalidPostError as e:
        return _client_error("error deleting post", e)
    except psycopg2.Error as e:
        return _server_error("error deleting post", e)
    return respond(Envelope.message("deleted"))
