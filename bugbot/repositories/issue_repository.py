"""
Global issue repository: idempotent upserts, retention and repair.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from bugbot.logging import get_logger, log_timing
from bugbot.models import GlobalIssue
from bugbot.models.issue import SYNCED_FIELDS
from bugbot.timeutils import utcnow

from .base import BaseRepository

logger = get_logger("database.issues")

DEFAULT_RETENTION = timedelta(days=7)


class StoreError(Exception):
    """A single upsert or an eviction pass failed at the storage layer."""

    def __init__(self, message: str, issue_id: int | None = None):
        super().__init__(message)
        self.issue_id = issue_id


@dataclass
class UpsertResult:
    """Aggregate outcome of applying a batch of records."""

    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: list[StoreError] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return self.inserted + self.updated + self.unchanged


class GlobalIssueRepository(BaseRepository[GlobalIssue]):
    """
    Repository for synchronized GitHub issues.

    Key features:
    - apply: per-record upsert keyed by GitHub issue id, each record
      committed on its own so one bad row never rolls back the batch
    - evict_stale: retention by ``updated_at`` age
    - repair_missing_timestamps: operator-triggered backfill
    """

    model = GlobalIssue

    def get_by_issue_id(self, issue_id: int) -> GlobalIssue | None:
        """Get an issue by its GitHub id."""
        return self.session.query(GlobalIssue).filter(GlobalIssue.issue_id == issue_id).first()

    def apply(self, records: Iterable[dict]) -> UpsertResult:
        """
        Insert or overwrite normalized issue records.

        Every observed record gets ``fetched_at = now``. Records whose synced
        fields are identical to the stored row count as unchanged. When the
        same issue id appears more than once (an issue that moved between
        pages mid-cycle), only its last occurrence is applied.

        Args:
            records: Dictionaries produced by ``normalize_issue``

        Returns:
            UpsertResult with inserted/updated/unchanged counts and per-record errors
        """
        result = UpsertResult()
        latest = {data.get("issue_id"): data for data in records}

        for issue_id, data in latest.items():
            try:
                now = utcnow()
                issue = self.get_by_issue_id(issue_id)

                if issue is None:
                    issue = GlobalIssue(issue_id=issue_id, fetched_at=now)
                    for key in SYNCED_FIELDS:
                        setattr(issue, key, data.get(key))
                    self.session.add(issue)
                    outcome = "inserted"
                else:
                    changed = any(getattr(issue, key) != data.get(key) for key in SYNCED_FIELDS)
                    for key in SYNCED_FIELDS:
                        setattr(issue, key, data.get(key))
                    issue.fetched_at = now
                    outcome = "updated" if changed else "unchanged"

                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.warning("upsert_failed", issue_id=issue_id, error=str(e))
                result.errors.append(StoreError(str(e), issue_id=issue_id))
                continue

            setattr(result, outcome, getattr(result, outcome) + 1)

        return result

    def evict_stale(self, retention: timedelta = DEFAULT_RETENTION) -> int:
        """
        Delete issues whose ``updated_at`` is older than ``now - retention``.

        Rows without ``updated_at`` are left for ``repair_missing_timestamps``.

        Returns:
            Number of deleted rows

        Raises:
            StoreError: If the delete fails
        """
        cutoff = utcnow() - retention
        try:
            deleted = (
                self.session.query(GlobalIssue)
                .filter(GlobalIssue.updated_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Eviction failed: {e}") from e

        if deleted:
            logger.info("stale_issues_evicted", deleted=deleted, cutoff=cutoff.isoformat())
        return deleted

    @log_timing("repair_missing_timestamps", logger=logger)
    def repair_missing_timestamps(self) -> int:
        """
        Backfill missing ``created_at`` / ``updated_at`` from ``fetched_at``.

        Only the missing field is written; present timestamps are kept.
        Running it again finds nothing to repair.

        Returns:
            Number of repaired rows
        """
        broken = (
            self.session.query(GlobalIssue)
            .filter(
                or_(GlobalIssue.created_at.is_(None), GlobalIssue.updated_at.is_(None)),
                GlobalIssue.fetched_at.isnot(None),
            )
            .all()
        )

        for issue in broken:
            if issue.created_at is None:
                issue.created_at = issue.fetched_at
            if issue.updated_at is None:
                issue.updated_at = issue.fetched_at

        self.session.commit()
        logger.info("timestamps_repaired", repaired=len(broken))
        return len(broken)

    def list_recent(self, limit: int = 50, offset: int = 0) -> list[GlobalIssue]:
        """Stored issues, most recently updated first."""
        return (
            self.session.query(GlobalIssue)
            .order_by(GlobalIssue.updated_at.desc().nulls_last(), GlobalIssue.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def introspect(self, sample_size: int = 5) -> dict:
        """Total stored count plus a small sample, for operational sanity checks."""
        return {
            "total": self.count(),
            "sample": [issue.to_dict() for issue in self.list_recent(limit=sample_size)],
        }
