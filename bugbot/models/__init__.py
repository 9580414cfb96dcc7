"""
SQLAlchemy models for BugBot.

Usage:
    from bugbot.models import GlobalIssue
"""

from .base import Base
from .issue import GlobalIssue

__all__ = [
    "Base",
    "GlobalIssue",
]
