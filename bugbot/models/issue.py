"""
Issue-related SQLAlchemy models.
"""

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bugbot.timeutils import utcnow

from .base import Base

# Columns overwritten on every observation of an issue
SYNCED_FIELDS = (
    "title",
    "html_url",
    "number",
    "repo_name",
    "user",
    "created_at",
    "updated_at",
)


class GlobalIssue(Base):
    """
    Open GitHub issue synchronized from the search API.

    Keyed by GitHub's numeric issue id. ``created_at`` and ``updated_at``
    mirror GitHub; ``fetched_at`` is the last time a sync cycle observed the
    issue. The GitHub timestamps are nullable so rows written by older
    versions can be repaired from ``fetched_at``.
    """
    __tablename__ = "global_issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    issue_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(1024))
    html_url: Mapped[str] = mapped_column(String(512))
    number: Mapped[int] = mapped_column(Integer)
    repo_name: Mapped[str] = mapped_column(String(255))
    user: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def to_dict(self) -> Dict:
        """
        Convert the issue record into a serializable dictionary.

        Returns:
            Dictionary compatible with CLI output and downstream readers.
        """
        return {
            "issue_id": self.issue_id,
            "title": self.title,
            "html_url": self.html_url,
            "number": self.number,
            "repo_name": self.repo_name,
            "user": self.user,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
        }

    def __repr__(self) -> str:
        return f"<GlobalIssue {self.repo_name}#{self.number} id={self.issue_id}>"
