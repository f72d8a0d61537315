"""
Storm Source Parsers

Each upstream typhoon feed speaks its own JSON dialect. A parser turns one
dialect into canonical Storm records. Parsers are total: a payload they cannot
read yields an empty list and a record they cannot read is dropped, so one bad
storm never blanks the whole batch.

Shapes are decoded by trying each known variant in order and giving up on the
first miss rather than guessing further.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .geo import distance_to_region_km, is_approaching, is_in_region
from .models import Storm, StormPosition, TrackPoint
from .names import format_display_name, local_name
from .tracks import (
    KTS_TO_KMH,
    finalize_path,
    knots_to_kmh,
    parse_dtg_ms,
    parse_float,
    parse_timestamp_ms,
    wind_to_category,
)

logger = logging.getLogger(__name__)

# Keys a feed may use for its storm array, in priority order
RECORD_KEYS = ("storms", "activeStorms", "active", "data")

TRACK_KEYS = ("path", "track", "forecast")


# ============================================================================
# Shape decoding
# ============================================================================

def locate_records(payload: Any) -> List[Any]:
    """
    Find the storm array in a feed payload.

    Tries, in order: a list at the root, the keys in RECORD_KEYS (holding a
    list, a nested feed object, or storms keyed by id), then the values of
    the root object.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []

    for key in RECORD_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            if any(k in value for k in RECORD_KEYS):
                return locate_records(value)
            # Storms keyed by id under a known key
            return [v for v in value.values() if isinstance(v, dict)]

    return [value for value in payload.values() if isinstance(value, dict)]


def first_of(record: Dict[str, Any], keys: Iterable[str]) -> Any:
    """Value of the first key present (and not None) in a record"""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def decode_lat_lon(value: Any) -> Optional[Tuple[float, float]]:
    """
    Decode a coordinate given as {lat, lon}, {latitude, longitude} or [lat, lon].

    Longitudes past 180 are wrapped into [-180, 180].
    """
    if isinstance(value, dict):
        lat = parse_float(first_of(value, ("lat", "latitude")))
        lon = parse_float(first_of(value, ("lon", "lng", "longitude")))
    elif isinstance(value, (list, tuple)) and len(value) >= 2:
        lat = parse_float(value[0])
        lon = parse_float(value[1])
    else:
        return None

    if lat is None or lon is None:
        return None
    if lon > 180.0:
        lon -= 360.0
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return lat, lon


def tidy_name(value: Any) -> Optional[str]:
    """Trim a storm name; SHOUTED names become "Mawar" / "Kong-rey" style"""
    if not isinstance(value, str):
        return None
    name = " ".join(value.split())
    if not name:
        return None
    if name.isupper():
        name = " ".join(word.capitalize() for word in name.split(" "))
    return name


def build_storm(
    storm_id: str,
    name: str,
    position: StormPosition,
    path: Tuple[TrackPoint, ...],
    source: str,
) -> Storm:
    """Derive the region fields and labels for a decoded storm"""
    in_region = is_in_region(position.lat, position.lon)
    distance = distance_to_region_km(position.lat, position.lon)
    local = local_name(name)
    return Storm(
        id=storm_id,
        international_name=name,
        local_name=local,
        current_position=position,
        path=path,
        is_in_region=in_region,
        display_name=format_display_name(name, local, in_region),
        distance_to_region_km=distance,
        is_approaching=is_approaching(distance),
        source=source,
    )


# ============================================================================
# Parsers
# ============================================================================

class StormParser:
    """
    Base parser for the canonical-ish "generic tracker" dialect.

    Subclasses override the key lists and the decode_* hooks for their feed.
    """

    source_tag = "generic"
    id_keys = ("id",)
    name_keys = ("name", "internationalName", "stormName")
    position_keys = ("currentPosition", "position", "current", "location")
    point_time_keys = ("timestamp", "timestampMs", "time", "datetime")

    def parse(self, payload: Any, now_ms: int) -> List[Storm]:
        """
        Parse a raw payload into storms.

        Args:
            payload: Decoded JSON from the feed
            now_ms: Fetch time in epoch milliseconds

        Returns:
            Storms for every record that could be read; never raises
        """
        try:
            records = locate_records(payload)
        except Exception as e:
            logger.warning(f"{self.source_tag}: unreadable payload: {e}")
            return []

        storms = []
        for index, record in enumerate(records):
            try:
                storm = self.parse_record(record, index, now_ms)
            except Exception as e:
                logger.debug(f"{self.source_tag}: dropping record {index}: {e}")
                continue
            if storm is not None:
                storms.append(storm)
        return storms

    def parse_record(self, record: Any, index: int, now_ms: int) -> Optional[Storm]:
        if not isinstance(record, dict):
            return None

        name = self.decode_name(record)
        if not name:
            return None

        track = self.decode_track(record)
        position = self.decode_position(record)
        if position is None:
            if not track:
                return None
            latest = max(track, key=lambda p: p.timestamp_ms)
            position = StormPosition(latest.lat, latest.lon, latest.intensity, 0.0)

        storm_id = first_of(record, self.id_keys)
        if storm_id is None or str(storm_id).strip() == "":
            storm_id = f"{self.source_tag}-{index}-{now_ms}"

        path = finalize_path(track, position, now_ms)
        return build_storm(str(storm_id), name, position, path, self.source_tag)

    # Hooks --------------------------------------------------------------

    def decode_name(self, record: Dict[str, Any]) -> Optional[str]:
        return tidy_name(first_of(record, self.name_keys))

    def decode_wind_kmh(self, record: Dict[str, Any]) -> Optional[float]:
        kmh = parse_float(first_of(record, ("windSpeedKmh", "windSpeed", "wind_kph")))
        if kmh is not None:
            return max(0.0, kmh)
        return knots_to_kmh(parse_float(first_of(record, ("windKts", "wind_kt"))))

    def decode_intensity(self, record: Dict[str, Any], wind_kmh: Optional[float]) -> int:
        category = parse_float(record.get("intensity"))
        if category is not None:
            return max(0, int(round(category)))
        if wind_kmh is None:
            return 0
        return wind_to_category(wind_kmh / KTS_TO_KMH)

    def decode_position(self, record: Dict[str, Any]) -> Optional[StormPosition]:
        coords = None
        for key in self.position_keys:
            if key in record:
                coords = decode_lat_lon(record[key])
                break
        if coords is None:
            coords = decode_lat_lon(record)
        if coords is None:
            return None

        wind_kmh = self.decode_wind_kmh(record)
        return StormPosition(
            lat=coords[0],
            lon=coords[1],
            intensity=self.decode_intensity(record, wind_kmh),
            wind_speed_kmh=wind_kmh or 0.0,
        )

    def decode_point_time(self, raw: Dict[str, Any]) -> Optional[int]:
        return parse_timestamp_ms(first_of(raw, self.point_time_keys))

    def decode_track_point(self, raw: Any) -> Optional[TrackPoint]:
        # Bare [lat, lon] fixes carry no time and cannot be windowed
        if not isinstance(raw, dict):
            return None
        coords = decode_lat_lon(raw["position"] if "position" in raw else raw)
        if coords is None:
            return None
        timestamp = self.decode_point_time(raw)
        if timestamp is None:
            return None
        intensity = self.decode_intensity(raw, self.decode_wind_kmh(raw))
        return TrackPoint(coords[0], coords[1], intensity, timestamp)

    def decode_track(self, record: Dict[str, Any]) -> Optional[List[TrackPoint]]:
        """
        Decode the storm's track.

        Returns None when the record has no track at all (so a placeholder is
        synthesized) and a possibly empty list otherwise.
        """
        raw_track = None
        for key in TRACK_KEYS:
            if isinstance(record.get(key), list):
                raw_track = record[key]
                break
        if raw_track is None:
            return None

        points = []
        for raw in raw_track:
            point = self.decode_track_point(raw)
            if point is not None:
                points.append(point)
        return points


class GenericParser(StormParser):
    """Aggregator feeds already close to the canonical shape"""


class JmaParser(StormParser):
    """
    RSMC Tokyo (JMA) style records.

    Names may be nested per language ({"en": "MAWAR"}), positions are
    [lat, lon] pairs, winds are in knots and times are ISO 8601.
    """

    source_tag = "jma"
    id_keys = ("typhoonNumber", "tcNumber", "id")
    name_keys = ("name", "typhoonName", "nameEn")
    position_keys = ("position", "center", "currentPosition")
    point_time_keys = ("validtime", "time", "datetime")

    def decode_name(self, record: Dict[str, Any]) -> Optional[str]:
        value = first_of(record, self.name_keys)
        if isinstance(value, dict):
            value = first_of(value, ("en", "english", "international"))
        return tidy_name(value)

    def decode_wind_kmh(self, record: Dict[str, Any]) -> Optional[float]:
        wind = first_of(record, ("maximumWind", "maxWind", "wind"))
        if isinstance(wind, dict):
            kmh = parse_float(wind.get("kmh"))
            if kmh is not None:
                return max(0.0, kmh)
            wind = wind.get("kt")
        knots = parse_float(wind)
        return knots_to_kmh(max(0.0, knots)) if knots is not None else None

    def decode_intensity(self, record: Dict[str, Any], wind_kmh: Optional[float]) -> int:
        if wind_kmh is None:
            return 0
        return wind_to_category(wind_kmh / KTS_TO_KMH)


class JtwcParser(StormParser):
    """
    JTWC style records.

    Flat lat/lon on the record, "intensity" is the maximum sustained wind in
    knots, and track fixes carry a YYYYMMDDHH date-time group.
    """

    source_tag = "jtwc"
    id_keys = ("stormId", "atcfId", "id")
    name_keys = ("stormName", "name")
    position_keys = ("position",)
    point_time_keys = ("dtg", "time", "timestamp")

    def decode_wind_kmh(self, record: Dict[str, Any]) -> Optional[float]:
        knots = parse_float(first_of(record, ("intensity", "wind", "vmax")))
        return knots_to_kmh(max(0.0, knots)) if knots is not None else None

    def decode_intensity(self, record: Dict[str, Any], wind_kmh: Optional[float]) -> int:
        if wind_kmh is None:
            return 0
        return wind_to_category(wind_kmh / KTS_TO_KMH)

    def decode_point_time(self, raw: Dict[str, Any]) -> Optional[int]:
        value = first_of(raw, self.point_time_keys)
        return parse_dtg_ms(value) or parse_timestamp_ms(value)


PARSERS = {
    "jma": JmaParser(),
    "jtwc": JtwcParser(),
    "generic": GenericParser(),
}
