"""
main.py
-------
Entry point for the posts service.

Responsibilities:
    - Load the settings once and configure logging.
    - Provision the database and the posts table before serving.
    - Build the FastAPI application and run it with uvicorn.
"""

import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import psycopg2
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import ConfigError, Settings, load_settings
from db.connection import ConnectionPool
from db.init_db import provision
from handlers.post_handler import INVALID_REQUEST, respond
from handlers.post_handler import router as post_router
from models.post import InvalidPostError
from models.response import Envelope
from repositories.post_repo import PostRepository
from utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the connection pool on startup and close it on shutdown."""
    settings: Settings = app.state.settings
    pool = None
    if getattr(app.state, "repository", None) is None:
        pool = ConnectionPool(settings.database)
        app.state.repository = PostRepository(pool, settings.database.table)
    logger.info(f"Serving table '{settings.database.table}'.")
    yield
    if pool is not None:
        pool.close()


async def invalid_request_handler(request: Request, exc: InvalidPostError) -> JSONResponse:
    """Bodies that do not decode to a Post get the error envelope."""
    logger.warning(f"Invalid request to {request.url.path}: {exc}")
    return respond(Envelope.error(INVALID_REQUEST), 400)


def create_app(settings: Settings) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Loaded settings, stored on ``app.state``.
    """
    app = FastAPI(title="Posts Service", lifespan=lifespan)
    app.state.settings = settings
    app.add_exception_handler(InvalidPostError, invalid_request_handler)
    app.include_router(post_router)

    @app.get("/health")
    def health() -> JSONResponse:
        return respond(Envelope.message("ok"))

    return app


def main() -> None:
    """Provision the schema, then serve until interrupted."""

    # ── 1. Settings ───────────────────────────────────────
    try:
        settings = load_settings()
        configure_logging(settings.server.log_level)
    except (ConfigError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # ── 2. Database setup ─────────────────────────────────
    logger.info("Provisioning database...")
    try:
        provision(settings.database)
    except psycopg2.Error as e:
        logger.error(f"Failed to provision database '{settings.database.name}': {e}")
        sys.exit(1)

    # ── 3. HTTP server ────────────────────────────────────
    app = create_app(settings)
    logger.info(f"🚀 Listening on http://{settings.server.host}:{settings.server.port}/")
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
    logger.info("Posts service stopped.")


if __name__ == "__main__":
    main()
