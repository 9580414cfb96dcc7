"""
Paginated issue fetcher.

Pulls search result pages in strictly increasing order, rotating through the
credential pool when GitHub rate limits a token, and normalizes each page.
Nothing is persisted here.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import requests  # type: ignore[import-untyped]

from bugbot.api.credentials import CredentialPool
from bugbot.api.github_api import HardApiError, RateLimitSignal, search_issues_page
from bugbot.constants import SEARCH_MAX_PER_PAGE
from bugbot.enums import TerminationReason
from bugbot.logging import get_logger
from bugbot.parsing.issue_parser import NormalizationError, normalize_issue

logger = get_logger("sync.fetcher")

# Smallest timeout handed to a request when the deadline is almost spent
_MIN_REQUEST_TIMEOUT = 0.01


@dataclass
class CycleResult:
    """Outcome of one fetch cycle."""

    records: list[dict] = field(default_factory=list)
    reason: TerminationReason = TerminationReason.COMPLETED
    pages_fetched: int = 0
    rotations: int = 0
    dropped: int = 0
    duration_seconds: float = 0.0


class PaginatedFetcher:
    """
    Sequential page fetcher for the GitHub issue search endpoint.

    Example:
        pool = CredentialPool(["ghp_a", "ghp_b"])
        fetcher = PaginatedFetcher(pool, throttle_seconds=1.0, deadline=120)
        result = fetcher.run_cycle("is:issue is:open", page_size=100, max_pages=5)
    """

    def __init__(
        self,
        pool: CredentialPool,
        search: Callable[..., list[dict]] = search_issues_page,
        throttle_seconds: float = 1.0,
        rate_limit_backoff: float = 0.0,
        request_timeout: float = 30.0,
        deadline: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pool = pool
        self._search = search
        self.throttle_seconds = throttle_seconds
        self.rate_limit_backoff = rate_limit_backoff
        self.request_timeout = request_timeout
        self.deadline = deadline
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(cls, pool: CredentialPool, settings, **kwargs) -> "PaginatedFetcher":
        """Build a fetcher using the sync settings."""
        return cls(
            pool,
            throttle_seconds=settings.sync_page_throttle_seconds,
            rate_limit_backoff=settings.sync_rate_limit_backoff_seconds,
            request_timeout=settings.sync_request_timeout_seconds,
            deadline=settings.cycle_deadline,
            **kwargs,
        )

    def run_cycle(self, query: str, page_size: int = SEARCH_MAX_PER_PAGE, max_pages: int = 5) -> CycleResult:
        """
        Fetch up to ``max_pages`` pages for ``query``.

        Args:
            query: GitHub search query
            page_size: Items per page (1-100)
            max_pages: Hard cap on pages requested this cycle

        Returns:
            CycleResult with normalized records and the termination reason
        """
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1 (got {max_pages})")
        page_size = max(1, min(page_size, SEARCH_MAX_PER_PAGE))

        started = self._clock()
        deadline_at = started + self.deadline if self.deadline else None
        result = CycleResult()

        for page in range(1, max_pages + 1):
            if page > 1:
                self._pause(self.throttle_seconds, deadline_at)

            items = self._fetch_page(result, query, page, page_size, deadline_at)
            if items is None:
                break

            if not items:
                result.reason = TerminationReason.EXHAUSTED
                logger.debug("pagination_exhausted", page=page)
                break

            for item in items:
                try:
                    result.records.append(normalize_issue(item))
                except NormalizationError as e:
                    result.dropped += 1
                    logger.warning("item_dropped", page=page, issue_id=e.issue_id, error=str(e))

            result.pages_fetched += 1

        result.duration_seconds = round(self._clock() - started, 3)
        return result

    def _fetch_page(
        self,
        result: CycleResult,
        query: str,
        page: int,
        page_size: int,
        deadline_at: Optional[float],
    ) -> Optional[list[dict]]:
        """
        Request one page, rotating credentials on rate limits.

        Returns the raw items, or None after setting ``result.reason`` when
        the cycle has to stop.
        """
        attempts = self.pool.size()

        for attempt in range(1, attempts + 1):
            if self._expired(deadline_at):
                result.reason = TerminationReason.DEADLINE_EXCEEDED
                logger.warning("cycle_deadline_exceeded", page=page)
                return None

            credential = self.pool.acquire()
            try:
                return self._search(
                    query,
                    page,
                    page_size,
                    credential.token,
                    timeout=self._request_timeout(deadline_at),
                )
            except RateLimitSignal:
                self.pool.rotate()
                result.rotations += 1
                logger.info(
                    "credential_rotated",
                    page=page,
                    attempt=attempt,
                    from_index=credential.index,
                    to_index=self.pool.index,
                )
                if attempt < attempts and self.rate_limit_backoff:
                    self._pause(self.rate_limit_backoff, deadline_at)
            except requests.Timeout as e:
                if self._expired(deadline_at):
                    result.reason = TerminationReason.DEADLINE_EXCEEDED
                    logger.warning("cycle_deadline_exceeded", page=page)
                else:
                    result.reason = TerminationReason.HARD_API_ERROR
                    logger.error("page_request_timeout", page=page, error=str(e))
                return None
            except HardApiError as e:
                result.reason = TerminationReason.HARD_API_ERROR
                logger.error("page_request_failed", page=page, status=e.status_code, error=str(e))
                return None

        result.reason = TerminationReason.POOL_EXHAUSTED
        logger.warning("credential_pool_exhausted", page=page, pool_size=attempts)
        return None

    def _remaining(self, deadline_at: Optional[float]) -> Optional[float]:
        if deadline_at is None:
            return None
        return deadline_at - self._clock()

    def _expired(self, deadline_at: Optional[float]) -> bool:
        remaining = self._remaining(deadline_at)
        return remaining is not None and remaining <= 0

    def _request_timeout(self, deadline_at: Optional[float]) -> float:
        remaining = self._remaining(deadline_at)
        if remaining is None:
            return self.request_timeout
        return max(_MIN_REQUEST_TIMEOUT, min(self.request_timeout, remaining))

    def _pause(self, seconds: float, deadline_at: Optional[float]) -> None:
        """Sleep, but never past the cycle deadline."""
        remaining = self._remaining(deadline_at)
        if remaining is not None:
            seconds = min(seconds, max(0.0, remaining))
        if seconds > 0:
            self._sleep(seconds)
