"""Base repository bound to a session and one model."""

from typing import Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from bugbot.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Usage:
        class GlobalIssueRepository(BaseRepository[GlobalIssue]):
            model = GlobalIssue

        total = GlobalIssueRepository(session).count()
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def count(self, **filters) -> int:
        """Count rows, optionally filtered by column equality."""
        query = self.session.query(func.count(self.model.id))  # type: ignore[attr-defined]
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter key: {key}")
            query = query.filter(getattr(self.model, key) == value)
        return query.scalar() or 0
