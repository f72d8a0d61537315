"""
Hazard Globe Processing Module

Pure normalization of upstream hazard data: geography, names, storm tracks
and earthquake feeds. Nothing in here touches the network.
"""

from .geo import (
    haversine_distance_km,
    is_in_region,
    distance_to_region_km,
    reports_near,
)
from .names import local_name, international_name, display_name
from .quakes import normalize_quakes, fallback_quakes
from .storm_parsers import PARSERS, GenericParser, JmaParser, JtwcParser

__all__ = [
    "haversine_distance_km",
    "is_in_region",
    "distance_to_region_km",
    "reports_near",
    "local_name",
    "international_name",
    "display_name",
    "normalize_quakes",
    "fallback_quakes",
    "PARSERS",
    "GenericParser",
    "JmaParser",
    "JtwcParser",
]
