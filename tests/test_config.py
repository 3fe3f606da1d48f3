"""
Settings and environment loading tests.
"""

import os

import pytest
from pydantic import ValidationError

from visitflow.core.config import Settings, get_settings, reset_settings


def test_defaults():
    settings = Settings()
    assert settings.app_name == "visitflow"
    assert settings.voice.enabled is True
    assert settings.voice.transcription_model == "whisper-1"
    assert settings.voice.extraction_model == "gpt-4o"
    assert settings.voice.extraction_temperature == 0.1
    assert settings.queue.default_limit == 200
    assert settings.operator.require_header is False
    assert settings.voice_ai_available is False
    assert settings.is_testing


def test_voice_ai_needs_flag_and_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
    assert Settings().voice_ai_available is True

    monkeypatch.setenv("VOICE_ENABLED", "false")
    assert Settings().voice_ai_available is False


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "not-a-key")
    with pytest.raises(ValidationError):
        Settings()
    monkeypatch.setenv("OPENAI_API_KEY", "")

    monkeypatch.setenv("APP_ENV", "moon")
    with pytest.raises(ValidationError):
        Settings()
    monkeypatch.setenv("APP_ENV", "testing")

    monkeypatch.setenv("VOICE_MAX_AUDIO_MB", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_log_settings_are_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "TEXT")
    settings = Settings()
    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "text"


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first


def test_env_file_is_discovered_from_parent_directory(monkeypatch, tmp_path):
    # Register the variable with monkeypatch so whatever dotenv writes is undone
    monkeypatch.setenv("QUEUE_DEFAULT_LIMIT", "placeholder")
    monkeypatch.delenv("QUEUE_DEFAULT_LIMIT")

    (tmp_path / ".env").write_text("QUEUE_DEFAULT_LIMIT=42\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    reset_settings()
    assert get_settings().queue.default_limit == 42


def test_existing_environment_wins_over_env_file(monkeypatch, tmp_path):
    monkeypatch.setenv("QUEUE_DEFAULT_LIMIT", "7")
    (tmp_path / ".env").write_text("QUEUE_DEFAULT_LIMIT=42\n")
    monkeypatch.chdir(tmp_path)

    reset_settings()
    assert get_settings().queue.default_limit == 7
    assert os.environ["QUEUE_DEFAULT_LIMIT"] == "7"
