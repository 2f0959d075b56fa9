"""
tests/test_config.py -- Settings resolution.

Covers:
  - TEMPLATES_RELOAD follows DEBUG unless set explicitly
  - Warning when reload is forced on outside debug mode
  - STATIC_PREFIX validation
  - get_settings() caching
"""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


def test_reload_follows_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without TEMPLATES_RELOAD, reload mirrors DEBUG."""
    assert Settings().templates_reload is False
    monkeypatch.setenv("DEBUG", "true")
    assert Settings().templates_reload is True


def test_explicit_reload_outside_debug_warns(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Forcing reload in production mode is allowed but logged."""
    monkeypatch.setenv("TEMPLATES_RELOAD", "true")
    with caplog.at_level(logging.WARNING, logger="minions.config"):
        settings = Settings()
    assert settings.templates_reload is True
    assert "TEMPLATES_RELOAD" in caplog.text


def test_static_prefix_normalized() -> None:
    """Trailing slashes are dropped from the static prefix."""
    assert Settings(static_prefix="/assets/").static_prefix == "/assets"


def test_static_prefix_must_be_absolute() -> None:
    """A relative static prefix is rejected."""
    with pytest.raises(ValidationError):
        Settings(static_prefix="assets")


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    """get_settings() returns one instance until the cache is cleared."""
    first = get_settings()
    assert get_settings() is first
    monkeypatch.setenv("TEMPLATES_DIR", "elsewhere")
    get_settings.cache_clear()
    assert get_settings().templates_dir == "elsewhere"
