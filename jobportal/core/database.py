"""Database configuration and session management"""

import logging
from typing import Any, Dict, Generator

from fastapi import Request
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from jobportal.config import Settings

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()


class Database:
    """Engine + session factory owned by the application that built it."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        statement_timeout_ms: int = 5000,
        echo: bool = False,
    ):
        self.url = url
        engine_kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": max(statement_timeout_ms / 1000.0, 1.0),
            }
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise each checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=3600,
            )
            if url.startswith("postgresql"):
                engine_kwargs["connect_args"] = {
                    "options": f"-c statement_timeout={int(statement_timeout_ms)}"
                }

        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.get_database_url(),
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            statement_timeout_ms=settings.DATABASE_STATEMENT_TIMEOUT_MS,
            echo=settings.DEBUG,
        )

    def session(self) -> Generator[Session, None, None]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def create_all(self) -> None:
        # Import models so metadata is populated.
        from jobportal import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()

    def init(self, mode: str, require_head: bool = True) -> None:
        """
        Initialize database according to configured strategy.

        DB_INIT_MODE:
          - migrate: require alembic_version table (migration-first discipline)
          - create_all: create tables directly, for local/dev bootstrap and tests
          - off: skip initialization check
        """
        mode = mode.lower().strip()
        if mode == "off":
            logger.info("DB initialization check skipped (DB_INIT_MODE=off)")
            return

        if mode == "create_all":
            self.create_all()
            logger.warning("Using create_all database initialization (recommended only for local development).")
            return

        if mode == "migrate":
            with self.engine.connect() as conn:
                if self.engine.dialect.name == "postgresql":
                    version_table_exists = conn.execute(
                        text("SELECT to_regclass('public.alembic_version')")
                    ).scalar()
                    exists = bool(version_table_exists)
                else:
                    exists = "alembic_version" in inspect(conn).get_table_names()
                if require_head and not exists:
                    raise RuntimeError(
                        "Migration table missing. Run Alembic migrations before starting the API."
                    )
            logger.info("Migration metadata detected.")
            return

        raise RuntimeError(f"Unknown DB_INIT_MODE: {mode}")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting a database session from the app's Database

    Yields:
        Session: Database session
    """
    yield from request.app.state.database.session()
