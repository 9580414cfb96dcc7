"""
Application constants for BugBot.

Contains GitHub API endpoints, sync defaults, and triage vocabulary.
"""

# =============================================================================
# GitHub API Constants
# =============================================================================

GITHUB_API_BASE = "https://api.github.com"
SEARCH_ISSUES_PATH = "/search/issues"
SEARCH_MAX_PER_PAGE = 100
USER_AGENT = "BugBot/1.0"

# =============================================================================
# Sync Defaults
# =============================================================================

DEFAULT_SYNC_QUERY = "is:issue is:open sort:updated-desc"

# Stored in place of repository / author when the API omits them
UNKNOWN = "Unknown"

# =============================================================================
# Triage
# =============================================================================

TRIAGE_DEVELOPERS = ["Dev1", "Dev2", "Dev3"]
TRIAGE_PRIORITIES = ["high", "medium", "low"]
