import pytest
from pydantic import ValidationError

from bugbot.config import Settings


def _settings(**env):
    return Settings(_env_file=None, **env)


def test_token_list_parses_comma_separated(monkeypatch):
    monkeypatch.delenv("GITHUB_PERSONAL_TOKEN", raising=False)
    settings = _settings(GITHUB_TOKENS=" a, ,b ,c")

    assert settings.github_token_list == ["a", "b", "c"]


def test_token_list_falls_back_to_personal_token():
    settings = _settings(GITHUB_TOKENS="", GITHUB_PERSONAL_TOKEN="solo")

    assert settings.github_token_list == ["solo"]


def test_per_page_above_api_maximum_rejected():
    with pytest.raises(ValidationError):
        _settings(SYNC_PER_PAGE=101)


def test_zero_deadline_disables_it():
    assert _settings(SYNC_CYCLE_DEADLINE_SECONDS=0).cycle_deadline is None
    assert _settings(SYNC_CYCLE_DEADLINE_SECONDS=90).cycle_deadline == 90


def test_defaults():
    settings = _settings()

    assert settings.sync_query == "is:issue is:open sort:updated-desc"
    assert settings.sync_per_page == 100
    assert settings.sync_max_pages == 5
    assert settings.sync_page_throttle_seconds == 1.0
    assert settings.retention_days == 7
    assert settings.scheduler_heartbeat_seconds == 50
    assert settings.scheduler_refresh_hours == 6


def test_validate_sync_config_requires_a_token():
    errors, _ = _settings(GITHUB_TOKENS="", GITHUB_PERSONAL_TOKEN="").validate_sync_config()

    assert errors


def test_validate_sync_config_warns_on_single_token():
    errors, warnings = _settings(GITHUB_TOKENS="only", OPENROUTER_API_KEY="k").validate_sync_config()

    assert errors == []
    assert any("one GitHub token" in w for w in warnings)
