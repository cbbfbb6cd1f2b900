"""Unit tests for library settings."""

import pytest
from pydantic import ValidationError

from querypage.config import PAGE_SIZE_DEFAULT, Settings, get_settings

# Keep tests independent of a developer's .env file.
Settings.model_config["env_file"] = None


def test_defaults():
    settings = Settings()
    assert settings.default_page_size == PAGE_SIZE_DEFAULT == 12
    assert settings.max_page_size == 100


def test_reads_from_env_vars(monkeypatch):
    monkeypatch.setenv("QUERYPAGE_DEFAULT_PAGE_SIZE", "25")
    monkeypatch.setenv("QUERYPAGE_MAX_PAGE_SIZE", "50")
    settings = Settings()
    assert settings.default_page_size == 25
    assert settings.max_page_size == 50


def test_default_larger_than_max_is_rejected(monkeypatch):
    monkeypatch.setenv("QUERYPAGE_DEFAULT_PAGE_SIZE", "200")
    with pytest.raises(ValidationError, match="exceeds max_page_size"):
        Settings()


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(default_page_size=0)


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.default_page_size = 50


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
