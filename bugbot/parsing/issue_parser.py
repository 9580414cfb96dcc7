"""Issue parsing module for mapping GitHub search items to stored issue records."""

from urllib.parse import urlparse

from bugbot.constants import UNKNOWN
from bugbot.timeutils import parse_github_timestamp


class NormalizationError(Exception):
    """A search item could not be mapped to an issue record."""

    def __init__(self, message: str, issue_id=None):
        super().__init__(message)
        self.issue_id = issue_id


def parse_repo_name(repository_url: str | None) -> str:
    """
    Derive "owner/name" from a repository API URL.

    Example:
        "https://api.github.com/repos/octocat/hello" -> "octocat/hello"
    """
    if not isinstance(repository_url, str) or not repository_url:
        return UNKNOWN
    segments = [s for s in urlparse(repository_url).path.split("/") if s]
    if len(segments) < 2:
        return UNKNOWN
    return "/".join(segments[-2:])


def parse_author(item: dict) -> str:
    user = item.get("user")
    if not isinstance(user, dict) or not isinstance(user.get("login"), str) or not user["login"]:
        return UNKNOWN
    return user["login"]


def _text(item: dict, field: str) -> str:
    value = item.get(field)
    return value if isinstance(value, str) else ""


def _number(item: dict) -> int:
    value = item.get("number")
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _parse_timestamp(item: dict, field: str, issue_id):
    value = item.get(field)
    if value is None:
        raise NormalizationError(f"Missing {field}", issue_id=issue_id)
    try:
        return parse_github_timestamp(value)
    except (TypeError, ValueError, AttributeError) as e:
        raise NormalizationError(f"Invalid {field}: {value!r}", issue_id=issue_id) from e


def normalize_issue(item: dict) -> dict:
    """
    Map one raw search item to the stored issue shape.

    Args:
        item: Issue dictionary from the GitHub search API

    Returns:
        Dictionary with keys matching the GlobalIssue model

    Raises:
        NormalizationError: If the item is not a mapping, or the id or a
            timestamp is missing or malformed
    """
    if not isinstance(item, dict):
        raise NormalizationError(f"Expected an object, got {type(item).__name__}")

    issue_id = item.get("id")
    if not isinstance(issue_id, int) or isinstance(issue_id, bool):
        raise NormalizationError(f"Missing or invalid id: {issue_id!r}")

    return {
        "issue_id": issue_id,
        "title": _text(item, "title"),
        "html_url": _text(item, "html_url"),
        "number": _number(item),
        "repo_name": parse_repo_name(item.get("repository_url")),
        "user": parse_author(item),
        "created_at": _parse_timestamp(item, "created_at", issue_id),
        "updated_at": _parse_timestamp(item, "updated_at", issue_id),
    }
