"""
Runtime configuration read from environment variables.

Every setting is optional. Missing weather credentials disable the weather
features instead of raising.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_RELAY_URL = "https://api.allorigins.win/raw?url={url}"

# Smallest accepted REFRESH_INTERVAL_SECONDS
MIN_REFRESH_INTERVAL = 5.0

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    """Application settings"""
    openweather_api_key: Optional[str] = None
    weatherapi_key: Optional[str] = None
    storm_relay_url: str = DEFAULT_RELAY_URL
    jma_storms_url: Optional[str] = None
    jtwc_storms_url: Optional[str] = None
    generic_storms_url: Optional[str] = None
    refresh_interval: float = 60.0
    request_timeout: float = 10.0
    weather_timeout: float = 8.0
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    @property
    def weather_configured(self) -> bool:
        """True when at least one weather provider credential is present"""
        return bool(self.openweather_api_key or self.weatherapi_key)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("ALLOWED_ORIGINS")
        return cls(
            openweather_api_key=_env_str("OPENWEATHER_API_KEY"),
            weatherapi_key=_env_str("WEATHERAPI_KEY"),
            storm_relay_url=_env_str("STORM_RELAY_URL") or DEFAULT_RELAY_URL,
            jma_storms_url=_env_str("JMA_STORMS_URL"),
            jtwc_storms_url=_env_str("JTWC_STORMS_URL"),
            generic_storms_url=_env_str("GENERIC_STORMS_URL"),
            refresh_interval=max(MIN_REFRESH_INTERVAL, _env_float("REFRESH_INTERVAL_SECONDS", 60.0)),
            request_timeout=_env_float("REQUEST_TIMEOUT_SECONDS", 10.0),
            allowed_origins=origins.split(",") if origins else list(DEFAULT_ALLOWED_ORIGINS),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get cached settings, reading the environment on first use"""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
