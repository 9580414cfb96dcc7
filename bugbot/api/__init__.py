# GitHub API integration module

from .credentials import ConfigError, Credential, CredentialPool
from .github_api import HardApiError, RateLimitSignal, search_issues_page

__all__ = [
    "ConfigError",
    "Credential",
    "CredentialPool",
    "HardApiError",
    "RateLimitSignal",
    "search_issues_page",
]
