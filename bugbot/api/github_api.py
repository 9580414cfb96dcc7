"""GitHub search API transport.

One call fetches one page of the issue search endpoint with a caller-supplied
token. Rate limiting is reported as ``RateLimitSignal`` so the caller can
rotate credentials; every other failure is a ``HardApiError``.
"""

import requests  # type: ignore[import-untyped]

from bugbot.config import get_settings
from bugbot.constants import SEARCH_ISSUES_PATH, SEARCH_MAX_PER_PAGE, USER_AGENT
from bugbot.logging import get_logger

logger = get_logger("github")

RATE_LIMIT_STATUS = 429


class RateLimitSignal(Exception):
    """The token used for a request is rate limited. Retry with another token."""

    def __init__(self, status_code: int, reset: int | None = None):
        super().__init__(f"GitHub rate limit hit (status {status_code})")
        self.status_code = status_code
        self.reset = reset


class HardApiError(Exception):
    """Non-retryable failure talking to the GitHub API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _get_headers(token: str) -> dict[str, str]:
    """Get headers for GitHub API requests."""
    return {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
        "Authorization": f"Bearer {token}",
    }


def _is_rate_limited(response: requests.Response) -> bool:
    """Check whether a response is GitHub's primary or secondary rate limit."""
    if response.status_code == RATE_LIMIT_STATUS:
        return True
    if response.status_code != 403:
        return False
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    try:
        message = str(response.json().get("message", ""))
    except ValueError:
        return False
    return "rate limit" in message.lower()


def _reset_at(response: requests.Response) -> int | None:
    value = response.headers.get("X-RateLimit-Reset")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def search_issues_page(
    query: str,
    page: int,
    per_page: int,
    token: str,
    timeout: float = 30,
    api_base: str | None = None,
) -> list[dict]:
    """
    Fetch a single page of issue search results.

    Args:
        query: GitHub search query (e.g. "is:issue is:open")
        page: 1-based page number
        per_page: Items per page, clamped to the API maximum of 100
        token: Access token used as bearer credential
        timeout: Request timeout in seconds
        api_base: Override for the API root (defaults to settings)

    Returns:
        Raw issue items from the response (may be empty)

    Raises:
        RateLimitSignal: The token is rate limited
        HardApiError: Any other non-200 response or transport failure
        requests.Timeout: The request did not complete within ``timeout``
    """
    base = api_base or get_settings().github_api_base
    url = f"{base.rstrip('/')}{SEARCH_ISSUES_PATH}"
    params = {
        "q": query,
        "per_page": max(1, min(per_page, SEARCH_MAX_PER_PAGE)),
        "page": page,
    }

    try:
        response = requests.get(url, headers=_get_headers(token), params=params, timeout=timeout)
    except requests.Timeout:
        raise
    except requests.RequestException as e:
        logger.error("request_exception", error=str(e), url=url, page=page)
        raise HardApiError(f"Request to {url} failed: {e}") from e

    if response.status_code == 200:
        try:
            data = response.json()
        except ValueError as e:
            raise HardApiError("GitHub returned a non-JSON body", status_code=200) from e
        items = data.get("items", []) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise HardApiError("GitHub returned an unexpected search payload", status_code=200)
        return items

    if _is_rate_limited(response):
        logger.info("rate_limited", status=response.status_code, page=page)
        raise RateLimitSignal(response.status_code, reset=_reset_at(response))

    logger.error("api_error", status=response.status_code, url=url, page=page)
    raise HardApiError(
        f"GitHub search failed with status {response.status_code}",
        status_code=response.status_code,
    )
