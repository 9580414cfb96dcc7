"""
Tests for the GitHub search transport.

requests.get is patched; no network access.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
import requests

from bugbot.api import github_api
from bugbot.api.github_api import HardApiError, RateLimitSignal, search_issues_page


def _response(status_code, body=None, headers=None):
    return SimpleNamespace(
        status_code=status_code,
        headers=headers or {},
        json=lambda: body if body is not None else {},
    )


def test_returns_items_and_sends_bearer_token(monkeypatch):
    mock_get = Mock(return_value=_response(200, {"items": [{"id": 1}]}))
    monkeypatch.setattr(github_api.requests, "get", mock_get)

    items = search_issues_page("is:issue", 2, 500, "tok", timeout=5, api_base="https://api.example")

    assert items == [{"id": 1}]
    args, kwargs = mock_get.call_args
    assert args[0] == "https://api.example/search/issues"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["params"] == {"q": "is:issue", "per_page": 100, "page": 2}
    assert kwargs["timeout"] == 5


def test_missing_items_is_empty_page(monkeypatch):
    monkeypatch.setattr(github_api.requests, "get", Mock(return_value=_response(200, {})))

    assert search_issues_page("q", 1, 10, "tok", api_base="https://api.example") == []


@pytest.mark.parametrize(
    "response",
    [
        _response(429),
        _response(403, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}),
        _response(403, {"message": "You have exceeded a secondary rate limit."}),
    ],
)
def test_rate_limits_are_soft(monkeypatch, response):
    monkeypatch.setattr(github_api.requests, "get", Mock(return_value=response))

    with pytest.raises(RateLimitSignal):
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")


def test_other_403_is_hard(monkeypatch):
    response = _response(403, {"message": "Resource not accessible"})
    monkeypatch.setattr(github_api.requests, "get", Mock(return_value=response))

    with pytest.raises(HardApiError) as exc_info:
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")
    assert exc_info.value.status_code == 403


def test_server_error_is_hard(monkeypatch):
    monkeypatch.setattr(github_api.requests, "get", Mock(return_value=_response(500)))

    with pytest.raises(HardApiError) as exc_info:
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")
    assert exc_info.value.status_code == 500


def test_timeout_propagates(monkeypatch):
    monkeypatch.setattr(github_api.requests, "get", Mock(side_effect=requests.Timeout("slow")))

    with pytest.raises(requests.Timeout):
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")


def test_connection_error_becomes_hard_error(monkeypatch):
    monkeypatch.setattr(
        github_api.requests, "get", Mock(side_effect=requests.ConnectionError("refused"))
    )

    with pytest.raises(HardApiError):
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")


@pytest.mark.parametrize("body", [[{"id": 1}], {"items": {"id": 1}}, {"items": None}])
def test_unexpected_payload_is_hard_error(monkeypatch, body):
    monkeypatch.setattr(github_api.requests, "get", Mock(return_value=_response(200, body)))

    with pytest.raises(HardApiError):
        search_issues_page("q", 1, 10, "tok", api_base="https://api.example")
