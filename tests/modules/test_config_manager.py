import pytest
from pydantic import ValidationError

from lexibase import config_manager
from lexibase.config_manager import Settings, get_settings


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("LEXIBASE_DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.database_url == config_manager.DEFAULT_DATABASE_URL
    assert settings.analysis_concurrency == 5
    assert settings.translation_reduce_threshold == 5
    assert settings.translation_lookup_reduce_min == 3
    assert settings.split_cues_into_sentences is False
    assert settings.llm_api_key_value() is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LEXIBASE_ANALYSIS_CONCURRENCY", "2")
    monkeypatch.setenv("LEXIBASE_SPLIT_CUES", "true")
    monkeypatch.setenv("LEXIBASE_LOG_LEVEL", "debug")
    config_manager.reset_settings()

    settings = get_settings()

    assert settings.llm_api_key_value() == "sk-test"
    assert settings.analysis_concurrency == 2
    assert settings.split_cues_into_sentences is True
    assert settings.log_level == "DEBUG"
    assert "sk-test" not in repr(settings)


def test_settings_are_cached_until_reset(monkeypatch) -> None:
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("LEXIBASE_TRANSLATION_TARGET", " FR ")
    config_manager.reset_settings()

    assert get_settings() is not first
    assert get_settings().translation_target_language == "fr"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LEXIBASE_ANALYSIS_CONCURRENCY", "0"),
        ("LEXIBASE_LOG_LEVEL", "chatty"),
        ("LEXIBASE_LOOKUP_REDUCE_MIN", "1"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
