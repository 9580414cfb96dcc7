"""
Service layer for the sync engine and issue triage.
"""

from .fetcher import CycleResult, PaginatedFetcher
from .sync_service import SyncSummary, run_sync_cycle
from .triage_service import (
    Assignment,
    Classifier,
    RemoteClassifier,
    RoundRobinClassifier,
    TriageItem,
    triage_issues,
)

__all__ = [
    "CycleResult",
    "PaginatedFetcher",
    "SyncSummary",
    "run_sync_cycle",
    "Assignment",
    "Classifier",
    "RemoteClassifier",
    "RoundRobinClassifier",
    "TriageItem",
    "triage_issues",
]
