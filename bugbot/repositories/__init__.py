"""
Repository pattern implementations for data access.

Usage:
    from bugbot.repositories import GlobalIssueRepository
    from bugbot.db import db

    with db.session() as session:
        repo = GlobalIssueRepository(session)
        result = repo.apply(records)
"""

from .base import BaseRepository
from .issue_repository import GlobalIssueRepository, StoreError, UpsertResult

__all__ = [
    "BaseRepository",
    "GlobalIssueRepository",
    "StoreError",
    "UpsertResult",
]
