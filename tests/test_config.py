"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from uipilot.config import AutomationConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("UIPILOT_RETRY_ATTEMPTS", "UIPILOT_TIME_FACTOR", "UIPILOT_ONLINE_DOMAINS", "UIPILOT_TEST_MODE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AutomationConfig()

    assert config.retry_attempts == 2
    assert config.landing_timeout == 60
    assert config.stay_signed_in_timeout == 5
    assert config.online_domains == ()
    assert config.test_mode is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("UIPILOT_RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("UIPILOT_TEST_MODE", "true")
    monkeypatch.setenv("UIPILOT_ONLINE_DOMAINS", '["dynamics.com", "crm.microsoftdynamics.de"]')

    config = AutomationConfig()

    assert config.retry_attempts == 5
    assert config.test_mode is True
    assert config.online_domains == ("dynamics.com", "crm.microsoftdynamics.de")


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("UIPILOT_TIME_FACTOR=2.5\n", encoding="utf-8")
    assert AutomationConfig().time_factor == 2.5


@pytest.mark.parametrize("field, value", [
    ("retry_attempts", -1),
    ("poll_interval", 0),
    ("time_factor", 0),
    ("landing_timeout", -5),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        AutomationConfig(**{field: value})


def test_settings_are_frozen():
    config = AutomationConfig()
    with pytest.raises(ValidationError):
        config.retry_attempts = 9


def test_think_time_scaled():
    config = AutomationConfig(think_time=1.0, time_factor=0.5)

    assert config.scaled_think_time() == 0.5
    assert config.scaled_think_time(4) == 2.0
