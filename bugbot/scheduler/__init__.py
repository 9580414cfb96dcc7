"""
Scheduler initialization and management.
"""

from __future__ import annotations

from typing import Optional

from bugbot.api.credentials import CredentialPool
from bugbot.config import Settings, get_settings

from .cycle_scheduler import HEARTBEAT_JOB_ID, REFRESH_JOB_ID, CycleScheduler
from .jobs import make_sync_job


def build_scheduler(
    pool: Optional[CredentialPool] = None,
    settings: Optional[Settings] = None,
) -> CycleScheduler:
    """
    Build the sync scheduler from settings.

    Raises:
        ConfigError: If no GitHub token is configured
    """
    settings = settings or get_settings()
    pool = pool or CredentialPool.from_settings(settings)
    return CycleScheduler(
        make_sync_job(pool, settings),
        heartbeat_seconds=settings.scheduler_heartbeat_seconds,
        refresh_hours=settings.scheduler_refresh_hours,
    )


__all__ = [
    "CycleScheduler",
    "HEARTBEAT_JOB_ID",
    "REFRESH_JOB_ID",
    "build_scheduler",
    "make_sync_job",
]
