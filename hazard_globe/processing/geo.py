"""
Geographic helpers

Great-circle distance and membership in the Philippine Area of
Responsibility (PAR) bounding box used to flag storms of local interest.
"""

import math
from typing import Iterable, List

from .models import UserReport

EARTH_RADIUS_KM = 6371.0

# PAR bounding box (degrees)
REGION_LAT_MIN = 5.0
REGION_LAT_MAX = 25.0
REGION_LON_MIN = 115.0
REGION_LON_MAX = 135.0

# Storms closer than this to the box are flagged as approaching
APPROACH_THRESHOLD_KM = 2000.0


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in kilometres
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push a slightly past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def is_in_region(lat: float, lon: float) -> bool:
    """True if the point lies inside the PAR bounding box (edges included)"""
    return REGION_LAT_MIN <= lat <= REGION_LAT_MAX and REGION_LON_MIN <= lon <= REGION_LON_MAX


def distance_to_region_km(lat: float, lon: float) -> float:
    """
    Distance from a point to the nearest edge of the PAR box.

    Returns 0 when the point is already inside.
    """
    if is_in_region(lat, lon):
        return 0.0
    nearest_lat = max(REGION_LAT_MIN, min(REGION_LAT_MAX, lat))
    nearest_lon = max(REGION_LON_MIN, min(REGION_LON_MAX, lon))
    return haversine_distance_km(lat, lon, nearest_lat, nearest_lon)


def is_approaching(distance_km: float) -> bool:
    return distance_km < APPROACH_THRESHOLD_KM


def reports_near(
    reports: Iterable[UserReport],
    lat: float,
    lon: float,
    radius_deg: float = 0.1,
) -> List[UserReport]:
    """
    Reports pinned within a small lat/lon square around a location.

    Args:
        reports: Candidate reports
        lat, lon: Picked location in degrees
        radius_deg: Half-width of the square in degrees

    Returns:
        Reports whose pin lies inside the square; reports without a pin are skipped
    """
    nearby = []
    for report in reports:
        if report.lat is None or report.lon is None:
            continue
        if abs(report.lat - lat) <= radius_deg and abs(report.lon - lon) <= radius_deg:
            nearby.append(report)
    return nearby
