"""
Upstream JSON fetching

A thin wrapper over httpx.AsyncClient that enforces a per-call timeout and
folds every transient failure into SourceError.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "hazard-globe/0.3 (+https://earthquake.usgs.gov)"


class SourceError(RuntimeError):
    """An upstream source timed out, failed, or returned unusable data"""


class JsonClient:
    """Fetches JSON documents from upstream APIs"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: float = 10.0,
    ) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Endpoint to fetch
            params: Query parameters
            timeout: Seconds before this call alone is cancelled

        Returns:
            Decoded JSON

        Raises:
            SourceError: on timeout, network error, non-2xx status or bad JSON
        """
        try:
            response = await asyncio.wait_for(
                self._client.get(url, params=params, timeout=timeout),
                timeout=timeout,
            )
            response.raise_for_status()
            return response.json()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise SourceError(f"timed out after {timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise SourceError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceError(f"request failed: {e.__class__.__name__}") from e
        except ValueError as e:
            raise SourceError("invalid JSON") from e

    async def aclose(self) -> None:
        await self._client.aclose()
