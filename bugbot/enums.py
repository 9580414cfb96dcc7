"""
Shared Enumerations.

Defines enums used across the sync engine for type safety and consistency.
"""

from enum import Enum


class CredentialState(str, Enum):
    """Per-cycle usability of a GitHub token."""
    AVAILABLE = "available"
    COOLING = "cooling"


class TerminationReason(str, Enum):
    """Why a fetch cycle stopped requesting pages."""
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    POOL_EXHAUSTED = "pool_exhausted"
    HARD_API_ERROR = "hard_api_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class SchedulerState(str, Enum):
    """Cycle arbiter state."""
    IDLE = "idle"
    RUNNING = "running"


class TriggerOutcome(str, Enum):
    """Result of asking the scheduler to start a cycle."""
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class Priority(str, Enum):
    """Triage priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
