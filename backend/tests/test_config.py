"""Settings: env-driven configuration."""

import pytest
from pydantic import ValidationError

from errorgate.config import Settings


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("SERVICE_NAME", "users-api")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.service_name == "users-api"
    assert settings.log_level == "debug"


def test_log_format_is_normalised():
    assert Settings(log_format="JSON").log_format == "json"


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(log_format="xml")
