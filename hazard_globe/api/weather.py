"""
Weather lookups

OpenWeather is the primary provider and WeatherAPI.com the secondary one.
A provider without a credential is simply skipped; with no credential at all
every lookup returns None without touching the network.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config import Settings, get_settings
from ..processing.models import Forecast, ForecastEntry, Weather
from ..processing.tracks import parse_float
from .http import JsonClient, SourceError

logger = logging.getLogger(__name__)

FORECAST_LENGTH = 5


def ms_to_kmh(speed: Optional[float]) -> float:
    if speed is None:
        return 0.0
    return round(speed * 3.6, 1)


def _round_temp(value: Any) -> int:
    return int(round(float(value)))


class WeatherProvider:
    """Base class for keyed weather providers"""

    name = "provider"

    def __init__(self, client: JsonClient, api_key: str, timeout: float = 8.0):
        self.client = client
        self.api_key = api_key
        self.timeout = timeout

    async def current(self, lat: float, lon: float) -> Weather:
        raise NotImplementedError

    async def forecast(self, lat: float, lon: float) -> Forecast:
        raise NotImplementedError

    async def _get(self, url: str, params: Dict[str, Any]) -> Any:
        return await self.client.get_json(url, params=params, timeout=self.timeout)


class OpenWeatherProvider(WeatherProvider):
    name = "openweather"
    base_url = "https://api.openweathermap.org/data/2.5"

    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        return {"lat": lat, "lon": lon, "appid": self.api_key, "units": "metric"}

    async def current(self, lat: float, lon: float) -> Weather:
        data = await self._get(f"{self.base_url}/weather", self._params(lat, lon))
        try:
            return self.parse_current(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceError("unexpected current weather shape") from e

    async def forecast(self, lat: float, lon: float) -> Forecast:
        data = await self._get(f"{self.base_url}/forecast", self._params(lat, lon))
        try:
            return self.parse_forecast(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceError("unexpected forecast shape") from e

    @staticmethod
    def parse_current(data: Dict[str, Any]) -> Weather:
        main = data["main"]
        condition = (data.get("weather") or [{}])[0]
        wind = data.get("wind") or {}
        visibility = parse_float(data.get("visibility"))
        return Weather(
            temperature=_round_temp(main["temp"]),
            feels_like=_round_temp(main.get("feels_like", main["temp"])),
            humidity=parse_float(main.get("humidity")),
            pressure=parse_float(main.get("pressure")),
            wind_speed_kmh=ms_to_kmh(parse_float(wind.get("speed"))),
            wind_direction_deg=parse_float(wind.get("deg")),
            description=condition.get("description", ""),
            icon_code=condition.get("icon"),
            visibility_km=round(visibility / 1000, 1) if visibility is not None else None,
            cloudiness=parse_float((data.get("clouds") or {}).get("all")),
            city=data.get("name") or None,
            country=(data.get("sys") or {}).get("country"),
            provider=OpenWeatherProvider.name,
        )

    @staticmethod
    def parse_forecast(data: Dict[str, Any]) -> Forecast:
        entries: List[ForecastEntry] = []
        for item in data["list"][:FORECAST_LENGTH]:
            condition = (item.get("weather") or [{}])[0]
            entries.append(ForecastEntry(
                timestamp_ms=int(item["dt"]) * 1000,
                temperature=_round_temp(item["main"]["temp"]),
                description=condition.get("description", ""),
                icon_code=condition.get("icon"),
                wind_speed_kmh=ms_to_kmh(parse_float((item.get("wind") or {}).get("speed"))),
                humidity=parse_float(item["main"].get("humidity")),
            ))
        return tuple(entries)


class WeatherApiProvider(WeatherProvider):
    """WeatherAPI.com; reports wind in km/h already"""

    name = "weatherapi"
    base_url = "https://api.weatherapi.com/v1"

    def _params(self, lat: float, lon: float, **extra) -> Dict[str, Any]:
        return {"key": self.api_key, "q": f"{lat},{lon}", **extra}

    async def current(self, lat: float, lon: float) -> Weather:
        data = await self._get(f"{self.base_url}/current.json", self._params(lat, lon))
        try:
            return self.parse_current(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceError("unexpected current weather shape") from e

    async def forecast(self, lat: float, lon: float) -> Forecast:
        data = await self._get(
            f"{self.base_url}/forecast.json",
            self._params(lat, lon, days=FORECAST_LENGTH),
        )
        try:
            return self.parse_forecast(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceError("unexpected forecast shape") from e

    @staticmethod
    def parse_current(data: Dict[str, Any]) -> Weather:
        current = data["current"]
        location = data.get("location") or {}
        condition = current.get("condition") or {}
        wind = parse_float(current.get("wind_kph"))
        visibility = parse_float(current.get("vis_km"))
        return Weather(
            temperature=_round_temp(current["temp_c"]),
            feels_like=_round_temp(current.get("feelslike_c", current["temp_c"])),
            humidity=parse_float(current.get("humidity")),
            pressure=parse_float(current.get("pressure_mb")),
            wind_speed_kmh=round(wind, 1) if wind is not None else 0.0,
            wind_direction_deg=parse_float(current.get("wind_degree")),
            description=condition.get("text", "").lower(),
            icon_code=condition.get("icon"),
            visibility_km=round(visibility, 1) if visibility is not None else None,
            cloudiness=parse_float(current.get("cloud")),
            city=location.get("name") or None,
            country=location.get("country"),
            provider=WeatherApiProvider.name,
        )

    @staticmethod
    def parse_forecast(data: Dict[str, Any]) -> Forecast:
        entries: List[ForecastEntry] = []
        for item in data["forecast"]["forecastday"][:FORECAST_LENGTH]:
            day = item["day"]
            condition = day.get("condition") or {}
            wind = parse_float(day.get("maxwind_kph"))
            entries.append(ForecastEntry(
                timestamp_ms=int(item["date_epoch"]) * 1000,
                temperature=_round_temp(day["avgtemp_c"]),
                description=condition.get("text", "").lower(),
                icon_code=condition.get("icon"),
                wind_speed_kmh=round(wind, 1) if wind is not None else 0.0,
                humidity=parse_float(day.get("avghumidity")),
            ))
        return tuple(entries)


class WeatherService:
    """Current conditions and forecasts with provider fallback"""

    def __init__(
        self,
        client: JsonClient,
        settings: Optional[Settings] = None,
        providers: Optional[List[WeatherProvider]] = None,
    ):
        self.settings = settings or get_settings()
        if providers is None:
            providers = []
            timeout = self.settings.weather_timeout
            if self.settings.openweather_api_key:
                providers.append(OpenWeatherProvider(client, self.settings.openweather_api_key, timeout))
            if self.settings.weatherapi_key:
                providers.append(WeatherApiProvider(client, self.settings.weatherapi_key, timeout))
        self.providers = providers

    @property
    def configured(self) -> bool:
        return bool(self.providers)

    async def fetch_current(self, lat: float, lon: float) -> Optional[Weather]:
        """Current weather at a coordinate, or None if unconfigured or unavailable"""
        return await self._fetch_with_fallback("current", lat, lon)

    async def fetch_forecast(self, lat: float, lon: float) -> Optional[Forecast]:
        """Up to five forecast steps at a coordinate, or None if unconfigured or unavailable"""
        return await self._fetch_with_fallback("forecast", lat, lon)

    async def _fetch_with_fallback(self, method_name: str, lat: float, lon: float):
        if not self.providers:
            logger.debug("No weather credential configured; skipping weather lookup")
            return None

        for provider in self.providers:
            method = getattr(provider, method_name)
            try:
                return await method(lat, lon)
            except SourceError as e:
                logger.warning(f"Weather provider {provider.name} {method_name} failed: {e}")
            except Exception as e:
                logger.error(f"Weather provider {provider.name} {method_name} raised unexpectedly: {e}")
        return None
