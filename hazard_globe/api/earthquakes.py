"""
USGS earthquake feed

Unlike storms, earthquakes above M4.5 happen every week, so an empty answer
would look like a bug. When the feed fails we serve a small illustrative set.
"""

import logging
import time
from typing import List, Optional

from ..processing.models import Quake
from ..processing.quakes import fallback_quakes, normalize_quakes
from .http import JsonClient, SourceError

logger = logging.getLogger(__name__)

USGS_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/{feed}_week.geojson"

# USGS publishes weekly summaries for these magnitude floors only
FEED_BUCKETS = [(4.5, "4.5"), (2.5, "2.5"), (1.0, "1.0")]

DEFAULT_TIMEOUT = 10.0


def feed_for_magnitude(min_magnitude: float) -> str:
    """Pick the narrowest summary feed that still contains every quake >= min_magnitude"""
    for floor, name in FEED_BUCKETS:
        if min_magnitude >= floor:
            return name
    return "all"


class QuakeFeed:
    """Fetches and normalizes recent earthquakes"""

    def __init__(self, client: JsonClient, timeout: float = DEFAULT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def fetch_quakes(
        self,
        min_magnitude: float = 4.5,
        limit: int = 50,
        now_ms: Optional[int] = None,
    ) -> List[Quake]:
        """
        Get quakes from the last 7 days, strongest first.

        Args:
            min_magnitude: Magnitude floor
            limit: Maximum number of quakes
            now_ms: Fetch time in epoch milliseconds (defaults to the clock)

        Returns:
            Normalized quakes, or the fallback set if the feed is unusable
        """
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        url = USGS_FEED_URL.format(feed=feed_for_magnitude(min_magnitude))

        try:
            payload = await self.client.get_json(url, timeout=self.timeout)
            quakes = normalize_quakes(payload, min_magnitude, limit, now_ms)
        except (SourceError, ValueError) as e:
            logger.warning(f"Earthquake feed unavailable ({e}); serving fallback quakes")
            return fallback_quakes(min_magnitude, limit, now_ms)
        except Exception as e:
            logger.error(f"Earthquake feed failed unexpectedly: {e}")
            return fallback_quakes(min_magnitude, limit, now_ms)

        logger.info(f"Loaded {len(quakes)} earthquakes (M{min_magnitude}+)")
        return quakes
