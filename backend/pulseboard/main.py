"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from pulseboard.api import router as api_router
from pulseboard.config import Settings, get_settings
from pulseboard.db.session import close_db, init_db
from pulseboard.exceptions import BoardError
from pulseboard.middleware.logging import LoggingMiddleware
from pulseboard.middleware.request_id import RequestIDMiddleware
from pulseboard.services.board_state import BoardStateManager
from pulseboard.storage import StateStore, build_store

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structlog: JSON lines in production, console output otherwise."""
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.environment == "production"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    settings: Settings = app.state.settings
    uses_database = app.state.board_manager is None and settings.storage_backend == "database"

    # Startup
    logger.info("Starting Pulseboard API", version=settings.app_version, storage=settings.storage_backend)
    if uses_database:
        await init_db()
        logger.info("Database connection initialized")
    if app.state.board_manager is None:
        app.state.board_manager = BoardStateManager(build_store(settings))

    yield

    # Shutdown
    logger.info("Shutting down Pulseboard API")
    if uses_database:
        await close_db()
        logger.info("Database connection closed")


async def board_error_handler(request: Request, exc: BoardError) -> ORJSONResponse:
    """Render service errors as ``{"ok": false, "error": ...}``."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("board_error", code=exc.code, status_code=exc.status_code, error=exc.message)
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message, "code": exc.code},
    )


def create_app(settings: Settings | None = None, store: StateStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Passing ``store`` skips database setup and serves the board from it.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Kanban task board and team-management dashboard",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.board_manager = BoardStateManager(store) if store is not None else None

    app.add_exception_handler(BoardError, board_error_handler)

    # Add middleware (order matters - last added is first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    # Trust proxy headers (X-Forwarded-Proto, X-Forwarded-For) from a reverse proxy
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    # Include API router
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()
