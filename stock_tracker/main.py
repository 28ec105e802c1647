"""
Application entry point.
Run with:  uvicorn stock_tracker.main:app --reload
"""
import logging
import sqlite3

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from stock_tracker.core.logging_config import configure_logging
from stock_tracker.core.config import settings
from stock_tracker.api.v1.router import api_router
from stock_tracker.db.database import init_db

configure_logging()

logger = logging.getLogger(__name__)


async def database_error_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """Answer persistence failures with a generic 500 instead of a traceback."""
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    logger.info("Starting FastAPI application setup")
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Backend API for recording weekly stock receipts and sales "
            "per user."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error handlers ──────────────────────────────────────────────────────
    app.add_exception_handler(sqlite3.Error, database_error_handler)

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_router)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def root() -> str:
        return "API is running..."

    # ── Startup / shutdown events ───────────────────────────────────────────
    @app.on_event("startup")
    def on_startup() -> None:
        """Create the database tables if they are missing."""
        logger.info("Initializing database")
        init_db()

    return app


app = create_app()
