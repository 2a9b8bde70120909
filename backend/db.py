"""
Database setup for the FastAPI backend.
Provides the SQLAlchemy engine/session handle used by the repositories.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from domain.errors import StartupError, StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Process-wide database handle.

    Constructed explicitly at startup and passed to the repositories; call
    ``open`` before serving and ``close`` at shutdown.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_recycle = pool_recycle
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.dsn,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            echo=settings.DB_ECHO,
        )

    @property
    def safe_url(self) -> str:
        """The URL with the password masked, for log output."""
        try:
            return make_url(self.url).render_as_string(hide_password=True)
        except SQLAlchemyError:
            return "<invalid database url>"

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StorageError("Database is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def _create_engine(self) -> Engine:
        url = make_url(self.url)
        if url.get_backend_name() == "sqlite":
            # check_same_thread=False allows usage across FastAPI threads
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url.database in (None, "", ":memory:"):
                # one shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool
            return create_engine(url, echo=self.echo, **kwargs)
        return create_engine(
            url,
            echo=self.echo,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
            pool_pre_ping=True,
        )

    def open(self) -> "Database":
        """Create the engine, ping the server and make sure the table exists.

        Raises StartupError on any failure; the caller decides whether that is fatal.
        """
        if self._engine is not None:
            return self
        logger.info("Attempting to connect to %s", self.safe_url)
        try:
            engine = self._create_engine()
        except (SQLAlchemyError, ValueError, ImportError) as exc:
            logger.error("Failed to create engine for %s: %s", self.safe_url, exc)
            raise StartupError(f"database connection error: {exc}") from exc

        self._engine = engine
        self._sessionmaker = sessionmaker(bind=engine, autoflush=False, autocommit=False)
        try:
            self.ping()
            self.init_db()
        except StorageError as exc:
            logger.error("Failed to ping database at %s: %s", self.safe_url, exc)
            self.close()
            raise StartupError(f"database ping error: {exc}") from exc

        logger.info("Database connection successful")
        return self

    def ping(self) -> None:
        """Run ``SELECT 1``; raises StorageError when the server is unreachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def init_db(self) -> None:
        """Create tables if they don't exist."""
        from repositories import models  # noqa: F401  Ensures models are registered

        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session and close it on exit; callers commit explicitly."""
        if self._sessionmaker is None:
            raise StorageError("Database is not open")
        session = self._sessionmaker()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connection closed")
        self._engine = None
        self._sessionmaker = None
