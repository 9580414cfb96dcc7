"""
Database engine and session handling for the issue store.

Usage:
    from bugbot.db import db

    db.initialize()
    db.create_all_tables()
    with db.session() as session:
        GlobalIssueRepository(session).list_recent()
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


def _engine_options(url: str, settings) -> dict:
    if url.startswith("sqlite"):
        # Sync cycles run on the scheduler's worker thread
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


class DatabaseManager:
    """
    Process-wide owner of the engine and session factory.

    The CLI initializes it once per command; the scheduler shares it across
    every sync cycle it runs.
    """

    _instance: Optional["DatabaseManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def initialize(self, database_url: str | None = None) -> None:
        """Create the engine. Later calls are no-ops until ``reset``."""
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url
        self.engine = create_engine(url, echo=settings.debug, **_engine_options(url, settings))
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self._initialized = True

    def create_all_tables(self) -> None:
        """Create the issue tables if they do not exist."""
        self._ensure_initialized()
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error."""
        self._ensure_initialized()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """
        Round-trip a trivial query.

        Returns:
            dict with 'healthy', 'latency_ms' and 'error'
        """
        if not self._initialized:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        start = time.perf_counter()
        error = None
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            error = str(e)
        latency = round((time.perf_counter() - start) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency, "error": error}

    def reset(self) -> None:
        """Dispose the engine so the next ``initialize`` can pick a new URL."""
        if self._initialized:
            self.engine.dispose()
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


db = DatabaseManager()


__all__ = ["Base", "DatabaseManager", "db"]
