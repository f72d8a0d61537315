"""
Canonical hazard records

Every record is immutable once built. A fetch cycle creates new instances and
the previous ones are discarded wholesale.
"""

from dataclasses import dataclass, asdict, field
from typing import Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class TrackPoint:
    """A single point in a storm's track"""
    lat: float
    lon: float
    intensity: int
    timestamp_ms: int


@dataclass(frozen=True)
class StormPosition:
    """Where a storm is now and how strong it is"""
    lat: float
    lon: float
    intensity: int = 0
    wind_speed_kmh: float = 0.0


@dataclass(frozen=True)
class Storm:
    """An active tropical cyclone normalized from any upstream source"""
    id: str
    international_name: str
    current_position: StormPosition
    path: Tuple[TrackPoint, ...]
    is_in_region: bool
    display_name: str
    distance_to_region_km: float
    is_approaching: bool
    local_name: Optional[str] = None
    source: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Quake:
    """A recent earthquake event"""
    id: str
    lat: float
    lon: float
    magnitude: float
    depth_km: int
    location: str
    time_ms: int
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Weather:
    """Current conditions at a coordinate, metric units"""
    temperature: int
    feels_like: int
    humidity: Optional[float]
    pressure: Optional[float]
    wind_speed_kmh: float
    wind_direction_deg: Optional[float]
    description: str
    icon_code: Optional[str]
    cloudiness: Optional[float]
    city: Optional[str]
    country: Optional[str]
    visibility_km: Optional[float] = None
    provider: str = "openweather"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ForecastEntry:
    """One step of a short-range forecast"""
    timestamp_ms: int
    temperature: int
    description: str
    icon_code: Optional[str]
    wind_speed_kmh: float
    humidity: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Forecast = Tuple[ForecastEntry, ...]


@dataclass(frozen=True)
class LowPressureArea:
    """A monitored low-pressure area, optionally enriched with live weather"""
    lat: float
    lon: float
    intensity: float
    name: Optional[str] = None
    weather: Optional[Weather] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HazardSnapshot:
    """Everything the globe needs for one refresh"""
    storms: Tuple[Storm, ...] = ()
    quakes: Tuple[Quake, ...] = ()
    low_pressure_areas: Tuple[LowPressureArea, ...] = ()
    fetched_at_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storms": [s.to_dict() for s in self.storms],
            "quakes": [q.to_dict() for q in self.quakes],
            "low_pressure_areas": [a.to_dict() for a in self.low_pressure_areas],
            "fetched_at_ms": self.fetched_at_ms,
            "counts": {
                "storms": len(self.storms),
                "quakes": len(self.quakes),
                "low_pressure_areas": len(self.low_pressure_areas),
            },
        }


@dataclass(frozen=True)
class UserReport:
    """
    A citizen incident report.

    Reports are stored by the browser; the backend only sees them when the
    view asks which reports sit near a picked location.
    """
    id: str
    timestamp: str
    name: str
    address: str
    issue_type: str
    provider: Optional[str] = None
    description: Optional[str] = None
    image_preview: Optional[str] = field(default=None, repr=False)
    lat: Optional[float] = None
    lon: Optional[float] = None
