"""
Test environment file loading and settings validation.

Already-set environment variables take precedence over .env files, and
invalid values are rejected when settings are built.
"""

import os

import pytest
from dotenv import load_dotenv
from pydantic import ValidationError

from medvoice.core.config import (
    AISettings,
    AudioSettings,
    LoggingSettings,
    Settings,
    _load_env_file_if_available,
    get_settings,
    reset_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_env_file_is_loaded(monkeypatch, tmp_path):
    """Test that values from a .env file reach the environment."""
    monkeypatch.delenv("AI_FAST_DEPLOYMENT", raising=False)
    env_file = tmp_path / "test.env"
    env_file.write_text("AI_FAST_DEPLOYMENT=from-env-file\n")

    load_dotenv(dotenv_path=str(env_file), override=False)
    try:
        assert os.getenv("AI_FAST_DEPLOYMENT") == "from-env-file"
    finally:
        monkeypatch.delenv("AI_FAST_DEPLOYMENT", raising=False)


def test_already_set_env_vars_take_precedence(monkeypatch, tmp_path):
    """Test that already-set environment variables are not overridden."""
    monkeypatch.setenv("AI_DEEP_DEPLOYMENT", "already-set")
    env_file = tmp_path / "test.env"
    env_file.write_text("AI_DEEP_DEPLOYMENT=from-env-file\n")

    load_dotenv(dotenv_path=str(env_file), override=False)

    assert os.getenv("AI_DEEP_DEPLOYMENT") == "already-set"


def test_env_file_search_in_parent_directories(monkeypatch, tmp_path):
    """Test that .env is discovered from a nested working directory."""
    monkeypatch.delenv("PIPELINE_SUMMARIZE", raising=False)
    (tmp_path / ".env").write_text("PIPELINE_SUMMARIZE=true\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    try:
        _load_env_file_if_available()
        assert os.getenv("PIPELINE_SUMMARIZE") == "true"
        assert get_settings().pipeline.summarize is True
    finally:
        monkeypatch.delenv("PIPELINE_SUMMARIZE", raising=False)


def test_no_env_files_no_crash(monkeypatch, tmp_path):
    """Test that missing env files don't cause crashes."""
    monkeypatch.chdir(tmp_path)
    _load_env_file_if_available()


def test_prefixed_environment_variables(monkeypatch):
    monkeypatch.setenv("AI_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("AUDIO_MAX_SIZE_MB", "10")
    monkeypatch.setenv("PROVIDER_NAME", "MUDr. Karel Malý")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.ai.max_attempts == 5
    assert settings.audio.max_size_mb == 10
    assert settings.provider.name == "MUDr. Karel Malý"
    assert settings.logging.level == "DEBUG"
    assert get_settings() is settings


def test_defaults():
    ai = AISettings()
    assert ai.max_attempts == 3
    assert ai.base_delay_seconds == 1.0
    assert ai.max_delay_seconds == 8.0
    assert "audio/wav" in AudioSettings().allowed_mime_types


def test_mime_types_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("AUDIO_ALLOWED_MIME_TYPES", "audio/wav, audio/mpeg")
    assert AudioSettings().allowed_mime_types == ["audio/wav", "audio/mpeg"]


def test_mime_types_from_json_env(monkeypatch):
    monkeypatch.setenv("AUDIO_ALLOWED_MIME_TYPES", '["audio/ogg"]')
    assert AudioSettings().allowed_mime_types == ["audio/ogg"]


@pytest.mark.parametrize(
    "factory",
    [
        lambda: AISettings(endpoint="http://insecure.example.com"),
        lambda: AISettings(temperature=3.0),
        lambda: AISettings(max_attempts=0),
        lambda: LoggingSettings(level="LOUD"),
        lambda: LoggingSettings(format="xml"),
        lambda: Settings(app_env="moon"),
        lambda: Settings(port=70000),
    ],
)
def test_invalid_values_are_rejected(factory):
    with pytest.raises(ValidationError):
        factory()
