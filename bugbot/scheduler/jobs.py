"""
Background job functions for the sync scheduler.
"""

from __future__ import annotations

from typing import Callable, Optional

from bugbot.api.credentials import CredentialPool
from bugbot.config import Settings, get_settings
from bugbot.services.sync_service import SyncSummary, run_sync_cycle


def make_sync_job(pool: CredentialPool, settings: Optional[Settings] = None) -> Callable[[], SyncSummary]:
    """
    Bind a sync cycle to one credential pool.

    The pool lives as long as the scheduler so its rotation index carries
    over from one cycle to the next.
    """
    settings = settings or get_settings()

    def run_sync_job() -> SyncSummary:
        return run_sync_cycle(pool, settings=settings)

    return run_sync_job
