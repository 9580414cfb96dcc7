"""
Tests for issue triage: remote classifier parsing and round-robin fallback.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import requests

from bugbot.services import triage_service
from bugbot.services.triage_service import (
    RemoteClassifier,
    RoundRobinClassifier,
    TriageItem,
    items_from_issues,
    parse_assignments,
    triage_issues,
)

ITEMS = [TriageItem(title=f"Issue {i}", repo="acme/app") for i in range(7)]


def _reply(content, status_code=200):
    return SimpleNamespace(
        status_code=status_code,
        json=lambda: {"choices": [{"message": {"content": content}}]},
    )


def test_round_robin_cycles_developers_and_priorities():
    result = RoundRobinClassifier().classify(ITEMS[:4])

    assert [a.assigned_dev for a in result] == ["Dev1", "Dev2", "Dev3", "Dev1"]
    assert [a.priority for a in result] == ["high", "medium", "low", "high"]


def test_triage_limits_batch_size():
    assert len(triage_issues(ITEMS, batch_size=5)) == 5
    assert triage_issues([], batch_size=5) == []


def test_parse_assignments_strips_code_fences():
    content = '```json\n[{"issue_title": "A", "repo": "r/a", "assigned_dev": "Dev2", "priority": "low"}]\n```'

    result = parse_assignments(content)

    assert len(result) == 1
    assert result[0].assigned_dev == "Dev2"
    assert result[0].priority == "low"


def test_parse_assignments_rejects_non_list():
    assert parse_assignments('{"issue_title": "A"}') is None
    assert parse_assignments("I could not decide") is None
    assert parse_assignments('[{"issue_title": "A", "repo": "r", "assigned_dev": "Dev1", "priority": "urgent"}]') is None


def test_remote_classifier_used_when_it_answers(monkeypatch):
    content = '[{"issue_title": "Issue 0", "repo": "acme/app", "assigned_dev": "Dev3", "priority": "high"}]'
    mock_post = Mock(return_value=_reply(content))
    monkeypatch.setattr(triage_service.requests, "post", mock_post)
    classifier = RemoteClassifier(api_key="key", url="https://llm.example/chat")

    result = triage_issues(ITEMS[:1], classifier=classifier)

    assert [a.assigned_dev for a in result] == ["Dev3"]
    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer key"
    assert "Issue 0" in mock_post.call_args.kwargs["json"]["messages"][0]["content"]


def test_falls_back_on_unparseable_reply(monkeypatch):
    monkeypatch.setattr(triage_service.requests, "post", Mock(return_value=_reply("not json")))
    classifier = RemoteClassifier(api_key="key", url="https://llm.example/chat")

    result = triage_issues(ITEMS[:3], classifier=classifier)

    assert [a.assigned_dev for a in result] == ["Dev1", "Dev2", "Dev3"]


def test_falls_back_on_transport_error(monkeypatch):
    monkeypatch.setattr(
        triage_service.requests, "post", Mock(side_effect=requests.ConnectionError("refused"))
    )
    classifier = RemoteClassifier(api_key="key", url="https://llm.example/chat")

    assert len(triage_issues(ITEMS[:2], classifier=classifier)) == 2


def test_falls_back_on_error_status(monkeypatch):
    monkeypatch.setattr(triage_service.requests, "post", Mock(return_value=_reply("[]", status_code=500)))
    classifier = RemoteClassifier(api_key="key", url="https://llm.example/chat")

    result = triage_issues(ITEMS[:1], classifier=classifier)

    assert result[0].assigned_dev == "Dev1"


def test_unconfigured_remote_classifier_skips_request(monkeypatch):
    mock_post = Mock()
    monkeypatch.setattr(triage_service.requests, "post", mock_post)

    result = triage_issues(ITEMS[:2], classifier=RemoteClassifier(api_key=None, url="https://llm.example/chat"))

    assert len(result) == 2
    mock_post.assert_not_called()


def test_items_from_stored_issues_have_no_body():
    stored = [SimpleNamespace(title="Crash on start", repo_name="acme/app")]

    items = items_from_issues(stored)

    assert items == [TriageItem(title="Crash on start", repo="acme/app", body="")]
