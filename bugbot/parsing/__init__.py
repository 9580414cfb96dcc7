"""Issue parsing package."""

from .issue_parser import NormalizationError, normalize_issue, parse_author, parse_repo_name

__all__ = ["NormalizationError", "normalize_issue", "parse_author", "parse_repo_name"]
