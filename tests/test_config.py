from __future__ import annotations

import pytest

from hazard_globe.config import (
    DEFAULT_ALLOWED_ORIGINS,
    DEFAULT_RELAY_URL,
    MIN_REFRESH_INTERVAL,
    Settings,
)


def test_from_env_defaults(monkeypatch):
    for name in (
        "OPENWEATHER_API_KEY",
        "WEATHERAPI_KEY",
        "STORM_RELAY_URL",
        "REFRESH_INTERVAL_SECONDS",
        "ALLOWED_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.weather_configured is False
    assert settings.storm_relay_url == DEFAULT_RELAY_URL
    assert settings.refresh_interval == 60.0
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("OPENWEATHER_API_KEY", "  ow-key ")
    monkeypatch.setenv("WEATHERAPI_KEY", "")
    monkeypatch.setenv("REFRESH_INTERVAL_SECONDS", "15")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://globe.example,https://staging.globe.example")

    settings = Settings.from_env()

    assert settings.openweather_api_key == "ow-key"
    assert settings.weatherapi_key is None
    assert settings.weather_configured is True
    assert settings.refresh_interval == 15.0
    assert settings.request_timeout == 10.0
    assert settings.allowed_origins == ["https://globe.example", "https://staging.globe.example"]


@pytest.mark.parametrize("raw", ["0", "-30", "0.001"])
def test_refresh_interval_has_floor(monkeypatch, raw):
    monkeypatch.setenv("REFRESH_INTERVAL_SECONDS", raw)

    assert Settings.from_env().refresh_interval == MIN_REFRESH_INTERVAL
