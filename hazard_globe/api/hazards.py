"""
Hazard aggregation

The single entry point the globe calls: storms, earthquakes and low-pressure
areas fetched concurrently into one snapshot. Each branch already falls back
to a safe default, so load_all always resolves.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import replace
from typing import Awaitable, List, Optional, TypeVar

from ..config import Settings, get_settings
from ..processing.models import HazardSnapshot, LowPressureArea
from ..processing.quakes import fallback_quakes
from .earthquakes import QuakeFeed
from .http import JsonClient
from .storms import StormFeed
from .weather import WeatherService

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_MAGNITUDE = 4.5
DEFAULT_QUAKE_LIMIT = 50

# Standard sea-level pressure (hPa); readings below it deepen an area
STANDARD_PRESSURE_HPA = 1013.0
MIN_ENRICHED_INTENSITY = 0.3

# Monitored areas with their static intensity
LOW_PRESSURE_AREAS = (
    LowPressureArea(lat=12.5, lon=130.0, intensity=0.6, name="East of Samar"),
    LowPressureArea(lat=8.0, lon=128.5, intensity=0.4, name="East of Mindanao"),
    LowPressureArea(lat=15.0, lon=117.5, intensity=0.5, name="West Philippine Sea"),
)


def intensity_from_pressure(pressure_hpa: float) -> float:
    """Map a pressure deficit to [0.3, 1.0]; 20 hPa below standard saturates"""
    deficit = (STANDARD_PRESSURE_HPA - pressure_hpa) / 20.0
    return round(min(1.0, max(MIN_ENRICHED_INTENSITY, deficit)), 3)


class HazardService:
    """Composes the storm, earthquake and weather feeds"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[JsonClient] = None,
        storms: Optional[StormFeed] = None,
        quakes: Optional[QuakeFeed] = None,
        weather: Optional[WeatherService] = None,
        low_pressure_areas=LOW_PRESSURE_AREAS,
    ):
        self.settings = settings or get_settings()
        self.client = client or JsonClient()
        self.storms = storms or StormFeed(self.client, settings=self.settings)
        self.quakes = quakes or QuakeFeed(self.client, timeout=self.settings.request_timeout)
        self.weather = weather or WeatherService(self.client, settings=self.settings)
        self.low_pressure_areas = tuple(low_pressure_areas)

    async def load_all(
        self,
        now_ms: Optional[int] = None,
        min_magnitude: float = DEFAULT_MIN_MAGNITUDE,
        quake_limit: int = DEFAULT_QUAKE_LIMIT,
    ) -> HazardSnapshot:
        """
        Fetch every hazard layer concurrently.

        Args:
            now_ms: Fetch time in epoch milliseconds (defaults to the clock)
            min_magnitude: Earthquake magnitude floor
            quake_limit: Maximum number of earthquakes

        Returns:
            A new snapshot; layers that failed hold their safe defaults
        """
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

        storms, quakes, areas = await asyncio.gather(
            self._guard(self.storms.fetch_storms(now_ms=now_ms), [], "storms"),
            self._guard(
                self.quakes.fetch_quakes(min_magnitude, quake_limit, now_ms=now_ms),
                fallback_quakes(min_magnitude, quake_limit, now_ms),
                "earthquakes",
            ),
            self._guard(self.enrich_low_pressure_areas(), list(self.low_pressure_areas), "low pressure areas"),
        )

        logger.info(
            f"Hazard snapshot: {len(storms)} storms, {len(quakes)} quakes, "
            f"{len(areas)} low pressure areas"
        )
        return HazardSnapshot(
            storms=tuple(storms),
            quakes=tuple(quakes),
            low_pressure_areas=tuple(areas),
            fetched_at_ms=now_ms,
        )

    async def enrich_low_pressure_areas(self) -> List[LowPressureArea]:
        """Refresh each monitored area's intensity from live pressure readings"""
        if not self.weather.configured:
            return list(self.low_pressure_areas)
        return list(await asyncio.gather(*(self._enrich_area(a) for a in self.low_pressure_areas)))

    async def _enrich_area(self, area: LowPressureArea) -> LowPressureArea:
        try:
            weather = await self.weather.fetch_current(area.lat, area.lon)
        except Exception as e:
            logger.warning(f"Pressure lookup failed for {area.name}: {e}")
            return area

        if weather is None or weather.pressure is None or weather.pressure >= STANDARD_PRESSURE_HPA:
            return area
        return replace(area, intensity=intensity_from_pressure(weather.pressure), weather=weather)

    async def _guard(self, coro: Awaitable[T], default: T, label: str) -> T:
        try:
            return await coro
        except Exception as e:
            logger.error(f"Loading {label} failed: {e}")
            return default

    async def aclose(self) -> None:
        await self.client.aclose()


class HazardRefresher:
    """
    Re-runs load_all on a fixed interval and publishes the latest snapshot.

    Readers always see a complete snapshot: a refresh builds a new one and
    swaps the reference when it is done.
    """

    def __init__(self, service: HazardService, interval: Optional[float] = None):
        self.service = service
        self.interval = interval if interval is not None else service.settings.refresh_interval
        self.snapshot: Optional[HazardSnapshot] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> HazardSnapshot:
        snapshot = await self.service.load_all()
        self.snapshot = snapshot
        return snapshot

    async def latest(self) -> HazardSnapshot:
        """Most recent snapshot, loading one first if none exists yet"""
        if self.snapshot is None:
            return await self.refresh()
        return self.snapshot

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Hazard refresh failed: {e}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if not self.running:
            logger.info(f"Starting hazard refresh every {self.interval:.0f}s")
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
