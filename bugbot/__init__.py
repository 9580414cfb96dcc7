"""
BugBot Core Library.

This package keeps a local store of open GitHub issues in sync with the
GitHub search API, and triages stored issues.

Usage:
    # Database
    from bugbot.db import db
    from bugbot.models import GlobalIssue
    from bugbot.repositories import GlobalIssueRepository

    # Sync engine
    from bugbot.api import CredentialPool
    from bugbot.services import PaginatedFetcher, run_sync_cycle
    from bugbot.scheduler import CycleScheduler

    # Config
    from bugbot.config import get_settings, Settings

    # Logging
    from bugbot.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from bugbot.db import db
#   from bugbot.config import get_settings
#   from bugbot.logging import get_logger
