import logging
import os
from typing import List, Mapping, Optional
from urllib.parse import quote_plus

from domain.errors import StartupError

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(name: str, val: str | None, default: int) -> int:
    if val is None or val.strip() == "":
        return default
    try:
        return int(val)
    except ValueError:
        raise StartupError(f"{name} must be an integer, got {val!r}") from None


def _as_log_level(val: str | None, default: str = "INFO") -> str:
    level = (val or default).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise StartupError(f"LOG_LEVEL must be a logging level name, got {val!r}")
    return level


class Settings:
    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if environ is None else environ

        self.DB_USER: str = env.get("DB_USER", "")
        self.DB_PASSWORD: str = env.get("DB_PASSWORD", "")
        self.DB_HOST: str = env.get("DB_HOST", "localhost")
        self.DB_PORT: int = _as_int("DB_PORT", env.get("DB_PORT"), 3306)
        self.DB_NAME: str = env.get("DB_NAME", "")
        self.DATABASE_URL: Optional[str] = env.get("DATABASE_URL") or None

        self.DB_POOL_SIZE: int = _as_int("DB_POOL_SIZE", env.get("DB_POOL_SIZE"), 5)
        self.DB_MAX_OVERFLOW: int = _as_int("DB_MAX_OVERFLOW", env.get("DB_MAX_OVERFLOW"), 10)
        self.DB_POOL_RECYCLE: int = _as_int("DB_POOL_RECYCLE", env.get("DB_POOL_RECYCLE"), 3600)
        self.DB_ECHO: bool = _as_bool(env.get("DB_ECHO"), False)

        self.APP_HOST: str = env.get("APP_HOST", "0.0.0.0")
        self.APP_PORT: int = _as_int("APP_PORT", env.get("APP_PORT"), 3000)
        self.LOG_LEVEL: str = _as_log_level(env.get("LOG_LEVEL"))
        self.CORS_ORIGINS: List[str] = [
            origin.strip()
            for origin in env.get("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

    @property
    def dsn(self) -> str:
        """SQLAlchemy URL for the book database.

        ``DATABASE_URL`` wins when set; otherwise the DB_* parts are assembled
        into a MySQL URL for the PyMySQL driver.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return "mysql+pymysql://{user}:{password}@{host}:{port}/{name}".format(
            user=quote_plus(self.DB_USER),
            password=quote_plus(self.DB_PASSWORD),
            host=self.DB_HOST,
            port=self.DB_PORT,
            name=self.DB_NAME,
        )
