"""
Track utilities

Timestamp decoding, trailing-window filtering and placeholder track synthesis
shared by every storm parser.
"""

import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from .models import StormPosition, TrackPoint

DAY_MS = 24 * 3600 * 1000
WINDOW_MS = 7 * DAY_MS

KTS_TO_KMH = 1.852

# Synthetic tracks start this far from the current position; WPac storms
# mostly travel west-northwest, so the origin sits to the east-southeast.
SYNTHETIC_POINTS = 7
SYNTHETIC_LAT_OFFSET = -3.0
SYNTHETIC_LON_OFFSET = 6.0

# Positions closer than this (degrees) count as the same point
POSITION_TOLERANCE = 0.01

# Forms older datetime.fromisoformat rejects: basic "20240525T000000",
# fractions other than 3 or 6 digits, and "+0000" offsets
_BASIC_ISO = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})")
_FRACTION = re.compile(r"\.(\d+)")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def knots_to_kmh(knots: Optional[float]) -> Optional[float]:
    if knots is None:
        return None
    return round(knots * KTS_TO_KMH, 1)


def wind_to_category(wind_kts: Optional[float]) -> int:
    """Convert wind speed to a Saffir-Simpson category; depressions and storms are 0"""
    if wind_kts is None or wind_kts < 64:
        return 0
    if wind_kts < 83:
        return 1
    if wind_kts < 96:
        return 2
    if wind_kts < 113:
        return 3
    if wind_kts < 137:
        return 4
    return 5


def parse_float(value: Any) -> Optional[float]:
    """Safely parse a finite float"""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(result):
        return None
    return result


def _normalize_iso(text: str) -> str:
    text = _BASIC_ISO.sub(r"\1-\2-\3T\4:\5:\6", text)
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text)
    if "T" in text:
        text = _COMPACT_OFFSET.sub(r"\1:\2", text)
    return text


def parse_timestamp_ms(value: Any) -> Optional[int]:
    """
    Decode a timestamp into epoch milliseconds.

    Accepts epoch milliseconds, epoch seconds (numbers or digit strings) and
    ISO 8601 strings. Naive ISO times are taken as UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        if not np.isfinite(number):
            return None
        # Anything past 1e11 is already milliseconds (year 5138 in seconds)
        return int(number if abs(number) >= 1e11 else number * 1000)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return parse_timestamp_ms(int(text))
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _normalize_iso(text.replace(" ", "T", 1))
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def parse_dtg_ms(value: Any) -> Optional[int]:
    """Decode a YYYYMMDDHH date-time group (UTC) into epoch milliseconds"""
    text = str(value).strip() if value is not None else ""
    if len(text) != 10 or not text.isdigit():
        return None
    try:
        dt = datetime.strptime(text, "%Y%m%d%H").replace(tzinfo=timezone.utc)
    except ValueError:
        return None
    return int(dt.timestamp() * 1000)


def within_window(points: Sequence[TrackPoint], now_ms: int) -> List[TrackPoint]:
    """Keep points from the trailing 7 days, oldest first"""
    cutoff = now_ms - WINDOW_MS
    kept = [p for p in points if p.timestamp_ms >= cutoff]
    return sorted(kept, key=lambda p: p.timestamp_ms)


def synthesize_track(position: StormPosition, now_ms: int) -> List[TrackPoint]:
    """
    Build a placeholder track for a storm reported without one.

    Seven daily points ending now, moving in a straight line onto the current
    position. Intensity ramps up to the current intensity so older points are
    weaker.
    """
    n = SYNTHETIC_POINTS
    lats = np.linspace(position.lat + SYNTHETIC_LAT_OFFSET, position.lat, n)
    lons = np.linspace(position.lon + SYNTHETIC_LON_OFFSET, position.lon, n)
    intensities = np.linspace(max(0, position.intensity - (n - 1) // 2), position.intensity, n)
    times = [now_ms - (n - 1 - i) * DAY_MS for i in range(n)]

    track = [
        TrackPoint(
            lat=round(float(lat), 4),
            lon=round(float(lon), 4),
            intensity=int(round(float(intensity))),
            timestamp_ms=int(ts),
        )
        for lat, lon, intensity, ts in zip(lats, lons, intensities, times)
    ]
    # Pin the final point exactly on the current position
    track[-1] = TrackPoint(position.lat, position.lon, position.intensity, times[-1])
    return track


def same_position(point: TrackPoint, position: StormPosition) -> bool:
    return (
        abs(point.lat - position.lat) <= POSITION_TOLERANCE
        and abs(point.lon - position.lon) <= POSITION_TOLERANCE
    )


def finalize_path(
    raw_points: Optional[Sequence[TrackPoint]],
    position: StormPosition,
    now_ms: int,
) -> Tuple[TrackPoint, ...]:
    """
    Turn whatever track a source gave us into a renderable path.

    Args:
        raw_points: Decoded track points, or None when the source had no track
        position: Current storm position
        now_ms: Fetch time in epoch milliseconds

    Returns:
        Ascending path inside the trailing window whose last point is the
        current position
    """
    if raw_points is None:
        return tuple(synthesize_track(position, now_ms))

    path = within_window(raw_points, now_ms)
    if not path or not same_position(path[-1], position):
        last_ts = path[-1].timestamp_ms if path else now_ms
        path.append(TrackPoint(position.lat, position.lon, position.intensity, max(now_ms, last_ts)))
    return tuple(path)
