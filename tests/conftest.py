"""
Pytest fixtures for BugBot tests.

Uses an in-memory SQLite database through the ORM models.
"""

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bugbot.config import Settings
from bugbot.db import Base
from bugbot.models import GlobalIssue  # noqa: F401
from bugbot.timeutils import utcnow


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )

    yield TestingSessionLocal, engine

    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        GITHUB_TOKENS="tok_a,tok_b",
        SYNC_PAGE_THROTTLE_SECONDS=0,
        SYNC_CYCLE_DEADLINE_SECONDS=0,
    )


def _iso(value):
    return value.replace(microsecond=0).isoformat() + "Z"


@pytest.fixture
def make_item():
    """Factory for raw GitHub search items."""

    def _make(issue_id=1, updated_days_ago=0, title=None, repo="octocat/hello", login="octocat", **overrides):
        updated = utcnow() - timedelta(days=updated_days_ago)
        item = {
            "id": issue_id,
            "number": issue_id % 1000,
            "title": title or f"Issue {issue_id}",
            "html_url": f"https://github.com/{repo}/issues/{issue_id % 1000}",
            "repository_url": f"https://api.github.com/repos/{repo}",
            "user": {"login": login},
            "created_at": _iso(updated - timedelta(days=1)),
            "updated_at": _iso(updated),
        }
        item.update(overrides)
        return item

    return _make


@pytest.fixture
def make_record(make_item):
    """Factory for normalized issue records."""
    from bugbot.parsing import normalize_issue

    def _make(*args, **kwargs):
        return normalize_issue(make_item(*args, **kwargs))

    return _make
