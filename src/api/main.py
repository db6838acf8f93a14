import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLitePublisherRepo
from src.api.deps import close_email_adapter, get_password_hasher, get_settings
from src.app_shell.config import Settings
from src.app_shell.telemetry import init_telemetry
from src.components.publishers import ensure_publisher

logger = logging.getLogger(__name__)


def prepare_database(settings: Settings) -> None:
    """Apply pending migrations and create the bootstrap publisher, if configured."""
    if settings.database.run_migrations:
        applied = SQLiteMigrator(settings.database.path).run_migrations()
        if applied:
            logger.info("Applied %d migration(s)", len(applied))

    publisher = ensure_publisher(
        os.environ.get("APP_PUBLISHER_USERNAME"),
        os.environ.get("APP_PUBLISHER_PASSWORD"),
        SQLitePublisherRepo(settings.database.path, settings.database.timeout_seconds),
        get_password_hasher(),
    )
    if publisher:
        logger.info("Publisher account '%s' is available", publisher.username)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    init_telemetry(settings.telemetry.name, settings.telemetry.level)

    # Fail fast if the database cannot be prepared
    try:
        prepare_database(settings)
    except Exception:
        logger.critical("Database preparation failed", exc_info=True)
        sys.exit(1)

    logger.info(
        "Starting %s (%s) at %s",
        settings.telemetry.name,
        settings.environment.value,
        settings.application.base_url,
    )
    yield
    close_email_adapter()


app = FastAPI(
    title="Newsletter API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests are client errors: 400 rather than 422."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.info("Rejected malformed request to %s", request.url.path)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": errors})


# --- Routers ---
from src.api.routes import health, newsletters, subscriptions  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
app.include_router(newsletters.router, prefix="/newsletters", tags=["Newsletters"])
