from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from hazard_globe.api.http import JsonClient
from hazard_globe.config import Settings

NOW = datetime(2024, 5, 25, 0, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)
HOUR_MS = 3600 * 1000
DAY_MS = 24 * HOUR_MS


def iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def dtg(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y%m%d%H")


def quake_feature(
    quake_id: str,
    mag,
    place="Somewhere",
    age: timedelta = timedelta(days=1),
    coords=(125.0, 10.0, 10.0),
    now_ms: int = NOW_MS,
) -> dict:
    return {
        "type": "Feature",
        "id": quake_id,
        "geometry": {"type": "Point", "coordinates": list(coords)},
        "properties": {
            "mag": mag,
            "place": place,
            "time": now_ms - int(age.total_seconds() * 1000),
            "url": f"https://earthquake.usgs.gov/earthquakes/eventpage/{quake_id}",
        },
    }


class RecordingHandler:
    """MockTransport handler that records requests and delegates to a routing function"""

    def __init__(self, route) -> None:
        self.route = route
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.route(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]


def make_client(handler) -> JsonClient:
    return JsonClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def now_ms() -> int:
    return NOW_MS


@pytest.fixture
def settings() -> Settings:
    # No relay so tests see the source URLs directly; no weather keys
    return Settings(storm_relay_url="", request_timeout=1.0, weather_timeout=1.0)


@pytest.fixture
def weather_settings() -> Settings:
    return Settings(
        openweather_api_key="ow-test",
        weatherapi_key="wa-test",
        storm_relay_url="",
        request_timeout=1.0,
        weather_timeout=1.0,
    )
