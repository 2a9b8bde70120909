"""
FastAPI application entry point.

Run with: python -m api.main   (reads .env from the working directory)
"""
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional, Tuple

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api.routes import books
from db import Database
from domain.errors import NotFoundError, StartupError, StorageError, ValidationError
from repositories import BooksRepository
from services.book_service import BookService
from settings import Settings

logger = logging.getLogger(__name__)

GREETING = "Welcome to the MySQL book shop!"


def _error_body(kind: str, detail: str, fields: Optional[Dict[str, str]] = None) -> dict:
    body = {"error": kind, "detail": detail}
    if fields:
        body["fields"] = fields
    return body


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content=_error_body("not_found", str(exc)))


async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content=_error_body("validation_error", exc.message, exc.fields),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON, missing fields and bad path params are client errors (400)."""
    fields = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path")]
        fields[".".join(loc) or "body"] = err.get("msg", "invalid value")
    return JSONResponse(
        status_code=400,
        content=_error_body("validation_error", "Invalid request", fields),
    )


async def storage_handler(request: Request, exc: StorageError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=_error_body("storage_error", "Database error"))


def create_app(database: Database, cors_origins=("*",)) -> FastAPI:
    """
    Build the application around an already constructed database handle.

    The handle is opened on startup if it is not open yet and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="Book Shop API",
        description="CRUD API for the books table",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.book_service = BookService(BooksRepository(database))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StorageError, storage_handler)

    app.include_router(books.router, prefix="/api/books", tags=["books"])

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Liveness greeting."""
        return GREETING

    @app.get("/health")
    def health():
        """Health check endpoint; pings the database."""
        try:
            database.ping()
        except StorageError as exc:
            logger.warning("Health check failed: %s", exc)
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "healthy"}

    return app


def load_environment(env_file: Optional[str] = None) -> Path:
    """Load the .env file into the process environment; a missing file is fatal."""
    path = Path(env_file or os.getenv("ENV_FILE", ".env"))
    if not path.is_file():
        raise StartupError(f"Error loading {path} file")
    load_dotenv(path)
    return path


def bootstrap(env_file: Optional[str] = None) -> Tuple[Settings, Database]:
    """Load configuration and open the database; raises StartupError on failure."""
    load_environment(env_file)
    settings = Settings()
    database = Database.from_settings(settings)
    database.open()
    return settings, database


def run(env_file: Optional[str] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        settings, database = bootstrap(env_file)
    except StartupError as exc:
        logger.error("Startup failed: %s", exc)
        sys.exit(1)

    logging.getLogger().setLevel(settings.LOG_LEVEL)
    app = create_app(database, cors_origins=settings.CORS_ORIGINS)
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    run()
