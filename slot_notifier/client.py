"""
HTTP access to the slot-query API.

Запрос ближайших свободных слотов для одной локации. Тело ответа
возвращается как есть, разбор выполняет parser.
"""

from __future__ import annotations

import logging

import httpx

from .config import ApiConfig
from .errors import FetchError

logger = logging.getLogger(__name__)


def create_http_client() -> httpx.AsyncClient:
    """Shared client for fetch and push; no timeout is imposed on requests."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(None),
        headers={"User-Agent": "global-entry-slot-notifier"},
    )


class SlotsClient:
    """Fetches the soonest available slots for a single location."""

    def __init__(self, http: httpx.AsyncClient, api: ApiConfig, location_id: str) -> None:
        self._http = http
        self.url = api.url
        self.params = {
            "orderBy": "soonest",
            "limit": str(api.limit),
            "locationId": location_id,
            "minimum": "1",
        }

    async def fetch(self) -> bytes:
        """Return the raw response body; raises FetchError on transport or HTTP errors."""
        try:
            response = await self._http.get(self.url, params=self.params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Failed to get appointment slots for location {self.params['locationId']}: "
                f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                f"Failed to get appointment slots for location {self.params['locationId']}: {e!r}"
            ) from e
        logger.debug("Fetched %s bytes from %s", len(response.content), response.url)
        return response.content


__all__ = ["SlotsClient", "create_http_client"]
