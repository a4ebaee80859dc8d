import logging
import time
from collections.abc import Generator
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, event
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""

    __abstract__ = True  # Prevents this class from being created as a table


class DatabaseSettings(BaseSettings):
    """Settings for database connection, loaded from environment variables."""

    db: str = "clubhub"
    user: str = "clubhub"
    password: str = "clubhub"
    host: str = "localhost"
    port: int = 5432
    # Full URL override, e.g. sqlite:///./clubhub.db for local runs
    url: str | None = Field(default=None, alias="DATABASE_URL")

    @property
    def database_url(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+psycopg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="POSTGRES_", extra="ignore", populate_by_name=True)


@lru_cache(maxsize=1)
def get_database_url() -> str:
    settings = DatabaseSettings()
    return settings.database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # ON DELETE CASCADE on registrations and photos needs this on SQLite
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache(maxsize=1)
def _get_engine_and_sessionmaker() -> tuple[Engine, sessionmaker[Session]]:  # pragma: no cover
    """Create and cache the SQLAlchemy engine and sessionmaker lazily."""
    database_url = get_database_url()
    if database_url.startswith("sqlite"):
        eng = create_engine(database_url, connect_args={"check_same_thread": False})
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    else:
        eng = create_engine(database_url, pool_size=10, max_overflow=5, pool_recycle=1800, pool_pre_ping=True)
    sess = sessionmaker(bind=eng, expire_on_commit=False)

    return eng, sess


def get_engine() -> Engine:  # pragma: no cover - simple accessor
    return _get_engine_and_sessionmaker()[0]


def get_session_maker() -> sessionmaker[Session]:  # pragma: no cover - simple accessor
    return _get_engine_and_sessionmaker()[1]


def get_db() -> Generator[Session]:  # pragma: no cover
    """Dependency injection for database sessions."""
    session_maker = get_session_maker()
    session = session_maker()
    session_start = time.time()

    try:
        yield session
    except Exception as e:
        logger.warning("Session error after %.3fs: %s", time.time() - session_start, e)
        session.rollback()
        raise
    finally:
        duration = time.time() - session_start
        if duration > 1.0:  # Log sessions longer than 1 second
            logger.warning("Long-lived session: %.3fs", duration)
        session.close()


def init_db() -> None:
    """Create missing tables. Schema changes beyond that are applied by hand."""
    from clubhub import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(get_engine())
    logger.info("Database tables ensured")
