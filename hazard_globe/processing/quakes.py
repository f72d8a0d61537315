"""
Earthquake feed normalization

Turns a USGS geojson summary feed into Quake records restricted to the last
seven days and a magnitude floor.
"""

import logging
import re
from typing import Any, List, Optional

from .models import Quake
from .tracks import DAY_MS, WINDOW_MS, parse_float

logger = logging.getLogger(__name__)

# "25km S of Example City" -> "Example City"
DISTANCE_PREFIX = re.compile(r"^\s*\d+(?:\.\d+)?\s*km\s+[NESW]+\s+of\s+", re.IGNORECASE)

# Shown when the feed is unreachable: (id, lat, lon, magnitude, depth_km, location, age in days)
FALLBACK_QUAKES = [
    ("fallback-tokyo", 35.6762, 139.6503, 7.2, 10, "Tokyo, Japan", 0.5),
    ("fallback-manila", 14.5995, 120.9842, 6.5, 15, "Manila, Philippines", 1.5),
    ("fallback-seoul", 37.5665, 126.9780, 6.1, 12, "Seoul, South Korea", 3.0),
    ("fallback-taipei", 25.0330, 121.5654, 5.8, 8, "Taipei, Taiwan", 4.5),
]


def strip_distance_prefix(place: str) -> str:
    """Drop a leading "<N>km <DIR> of " from a USGS place label"""
    return DISTANCE_PREFIX.sub("", place).strip()


def _coordinate_label(lat: float, lon: float) -> str:
    return f"{lat:.2f}°N, {lon:.2f}°E"


def normalize_feature(feature: Any, index: int, min_magnitude: float, now_ms: int) -> Optional[Quake]:
    """
    Convert one geojson feature, or None when it is out of range.

    Raises on malformed features; callers drop those.
    """
    lon, lat, depth = feature["geometry"]["coordinates"][:3]
    lat = float(lat)
    lon = float(lon)
    props = feature.get("properties") or {}

    magnitude = parse_float(props.get("mag"))
    if magnitude is None or magnitude < min_magnitude:
        return None

    time_ms = int(props["time"])
    if time_ms < now_ms - WINDOW_MS:
        return None

    place = props.get("place")
    location = strip_distance_prefix(place) if isinstance(place, str) and place.strip() else ""

    return Quake(
        id=str(feature.get("id") or f"eq-{index}"),
        lat=lat,
        lon=lon,
        magnitude=magnitude,
        depth_km=int(round(abs(float(depth or 0.0)))),
        location=location or _coordinate_label(lat, lon),
        time_ms=time_ms,
        url=props.get("url"),
    )


def normalize_quakes(payload: Any, min_magnitude: float, limit: int, now_ms: int) -> List[Quake]:
    """
    Normalize a USGS summary feed.

    Args:
        payload: Decoded geojson FeatureCollection
        min_magnitude: Magnitude floor
        limit: Maximum number of quakes returned
        now_ms: Fetch time in epoch milliseconds

    Returns:
        Quakes from the last 7 days at or above the floor, strongest first

    Raises:
        ValueError: if the payload has no feature list
    """
    features = payload.get("features") if isinstance(payload, dict) else None
    if not isinstance(features, list):
        raise ValueError("earthquake feed has no features")

    quakes = []
    for index, feature in enumerate(features):
        try:
            quake = normalize_feature(feature, index, min_magnitude, now_ms)
        except Exception as e:
            logger.debug(f"Dropping earthquake feature {index}: {e}")
            continue
        if quake is not None:
            quakes.append(quake)

    quakes.sort(key=lambda q: q.magnitude, reverse=True)
    return quakes[:max(0, limit)]


def fallback_quakes(min_magnitude: float, limit: int, now_ms: int) -> List[Quake]:
    """Fixed illustrative quakes, timed relative to now so they stay inside the window"""
    quakes = [
        Quake(
            id=quake_id,
            lat=lat,
            lon=lon,
            magnitude=magnitude,
            depth_km=depth,
            location=location,
            time_ms=int(now_ms - age_days * DAY_MS),
        )
        for quake_id, lat, lon, magnitude, depth, location, age_days in FALLBACK_QUAKES
        if magnitude >= min_magnitude
    ]
    quakes.sort(key=lambda q: q.magnitude, reverse=True)
    return quakes[:max(0, limit)]
