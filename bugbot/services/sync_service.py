"""
Global issue sync service.

One cycle: fetch pages from GitHub, upsert whatever was fetched, then evict
issues that fell out of the retention window.
"""

from dataclasses import asdict, dataclass, field
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from bugbot.api.credentials import CredentialPool
from bugbot.config import Settings, get_settings
from bugbot.db import db
from bugbot.enums import TerminationReason
from bugbot.logging import get_logger
from bugbot.repositories import GlobalIssueRepository, StoreError

from .fetcher import CycleResult, PaginatedFetcher

logger = get_logger("sync")

_WARNING_REASONS = {TerminationReason.POOL_EXHAUSTED, TerminationReason.DEADLINE_EXCEEDED}


@dataclass
class SyncSummary:
    """What one sync cycle did, for logging and the CLI."""

    reason: TerminationReason
    pages_fetched: int = 0
    fetched: int = 0
    dropped: int = 0
    rotations: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    evicted: int = 0
    store_errors: list[str] = field(default_factory=list)
    fetch_seconds: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["reason"] = self.reason.value
        return data


def _persist(session: Session, result: CycleResult, retention: timedelta, summary: SyncSummary) -> None:
    repo = GlobalIssueRepository(session)

    upserted = repo.apply(result.records)
    summary.inserted = upserted.inserted
    summary.updated = upserted.updated
    summary.unchanged = upserted.unchanged
    summary.store_errors.extend(str(e) for e in upserted.errors)

    try:
        summary.evicted = repo.evict_stale(retention)
    except StoreError as e:
        logger.error("eviction_failed", error=str(e))
        summary.store_errors.append(str(e))


def _log_summary(summary: SyncSummary) -> None:
    fields = summary.to_dict()
    fields["store_errors"] = len(summary.store_errors)

    if summary.reason == TerminationReason.HARD_API_ERROR:
        logger.error("sync_cycle_aborted", **fields)
    elif summary.reason in _WARNING_REASONS:
        logger.warning("sync_cycle_cut_short", **fields)
    else:
        logger.info("sync_cycle_complete", **fields)


def run_sync_cycle(
    pool: CredentialPool,
    session: Optional[Session] = None,
    settings: Optional[Settings] = None,
    fetcher: Optional[PaginatedFetcher] = None,
) -> SyncSummary:
    """
    Run one full sync cycle.

    Partial fetch results (pool exhausted, hard API error, deadline) are
    still persisted, and eviction runs after every cycle.

    Args:
        pool: Credential pool owned by the caller
        session: Optional session; a managed session is opened when omitted
        settings: Optional settings override
        fetcher: Optional fetcher override (defaults to one built from settings)

    Returns:
        SyncSummary for the cycle
    """
    settings = settings or get_settings()
    fetcher = fetcher or PaginatedFetcher.from_settings(pool, settings)
    retention = timedelta(days=settings.retention_days)

    pool.reset_cycle()
    # No database session is held while pages are fetched and throttled
    result = fetcher.run_cycle(
        settings.sync_query,
        page_size=settings.sync_per_page,
        max_pages=settings.sync_max_pages,
    )

    summary = SyncSummary(
        reason=result.reason,
        pages_fetched=result.pages_fetched,
        fetched=len(result.records),
        dropped=result.dropped,
        rotations=result.rotations,
        fetch_seconds=result.duration_seconds,
    )

    if session is not None:
        _persist(session, result, retention, summary)
    else:
        with db.session() as managed:
            _persist(managed, result, retention, summary)

    _log_summary(summary)
    return summary
