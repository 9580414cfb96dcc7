import pytest

from bugbot.api.credentials import ConfigError, CredentialPool
from bugbot.enums import CredentialState


def test_empty_pool_is_a_config_error():
    with pytest.raises(ConfigError):
        CredentialPool([])


def test_blank_tokens_are_ignored():
    with pytest.raises(ConfigError):
        CredentialPool(["", "   "])

    pool = CredentialPool([" tok_a ", "", "tok_b"])
    assert pool.size() == 2
    assert pool.acquire().token == "tok_a"


def test_rotate_wraps_and_marks_cooling():
    pool = CredentialPool(["a", "b", "c"])

    assert pool.rotate().token == "b"
    assert pool.rotate().token == "c"
    assert pool.rotate().token == "a"
    assert pool.index == 0
    assert pool.available_count() == 0


def test_reset_cycle_keeps_rotation_index():
    pool = CredentialPool(["a", "b"])
    pool.rotate()

    pool.reset_cycle()

    assert pool.index == 1
    assert pool.acquire().state == CredentialState.AVAILABLE
    assert pool.available_count() == 2


def test_repr_hides_token():
    pool = CredentialPool(["ghp_secret"])

    assert "ghp_secret" not in repr(pool.acquire())


def test_from_settings_falls_back_to_personal_token(settings):
    single = settings.model_copy(update={"github_tokens": "", "github_personal_token": "ghp_one"})

    pool = CredentialPool.from_settings(single)

    assert len(pool) == 1
    assert pool.acquire().token == "ghp_one"
