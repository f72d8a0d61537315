"""
Active Storm Feed

Queries the typhoon sources in a fixed priority order and keeps the first one
that yields at least one storm. No deduplication happens across sources.

An empty list is a normal answer: most of the year there is no active storm.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence
from urllib.parse import quote

from ..config import Settings, get_settings
from ..processing.models import Storm
from ..processing.storm_parsers import PARSERS, StormParser
from .http import JsonClient, SourceError

logger = logging.getLogger(__name__)

# Default endpoints, most authoritative first
JMA_STORMS_URL = "https://www.jma.go.jp/bosai/typhoon/data/targetTc.json"
JTWC_STORMS_URL = "https://www.metoc.navy.mil/jtwc/products/active-storms.json"
GENERIC_STORMS_URL = "https://api.knackwx.com/atcf/v2"


@dataclass(frozen=True)
class StormSource:
    """One entry of the source chain"""
    name: str
    url: str
    parser: StormParser
    timeout: float = 10.0
    via_relay: bool = False


def default_sources(settings: Settings) -> List[StormSource]:
    """Build the source chain, applying any URL overrides from settings"""
    timeout = settings.request_timeout
    return [
        StormSource("jma", settings.jma_storms_url or JMA_STORMS_URL, PARSERS["jma"], timeout, via_relay=True),
        StormSource("jtwc", settings.jtwc_storms_url or JTWC_STORMS_URL, PARSERS["jtwc"], timeout, via_relay=True),
        StormSource("generic", settings.generic_storms_url or GENERIC_STORMS_URL, PARSERS["generic"], timeout),
    ]


def relay_url(template: str, url: str) -> str:
    """Route a URL through the CORS relay template (contains "{url}")"""
    return template.replace("{url}", quote(url, safe=""))


class StormFeed:
    """Fetches active storms through the source chain"""

    def __init__(
        self,
        client: JsonClient,
        sources: Optional[Sequence[StormSource]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client
        self.sources = list(sources) if sources is not None else default_sources(self.settings)

    def _source_url(self, source: StormSource) -> str:
        if source.via_relay and self.settings.storm_relay_url:
            return relay_url(self.settings.storm_relay_url, source.url)
        return source.url

    async def _try_source(self, source: StormSource, now_ms: int) -> List[Storm]:
        payload = await self.client.get_json(self._source_url(source), timeout=source.timeout)
        return source.parser.parse(payload, now_ms)

    async def fetch_storms(self, now_ms: Optional[int] = None) -> List[Storm]:
        """
        Get active storms from the first source that has any.

        Args:
            now_ms: Fetch time in epoch milliseconds (defaults to the clock)

        Returns:
            Storms from the winning source, or [] when every source fails or is empty
        """
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

        for source in self.sources:
            try:
                storms = await self._try_source(source, now_ms)
            except SourceError as e:
                logger.warning(f"Storm source {source.name} failed: {e}")
                continue
            except Exception as e:
                logger.error(f"Storm source {source.name} raised unexpectedly: {e}")
                continue

            if storms:
                logger.info(f"Storm source {source.name} returned {len(storms)} storms")
                return storms
            logger.info(f"Storm source {source.name} has no active storms")

        logger.info("No storm source returned data; reporting no active storms")
        return []
