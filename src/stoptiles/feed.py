"""Pull client for stop snapshots over HTTP."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import aiohttp
from pydantic import ValidationError

from stoptiles._constants import USER_AGENT
from stoptiles.config import StopTilesConfig
from stoptiles.exceptions import StopFeedError
from stoptiles.models.stop import Stop

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapBounds:
    """Visible map rectangle in degrees."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def as_params(self) -> dict[str, str]:
        return {
            "minLat": str(self.min_lat),
            "maxLat": str(self.max_lat),
            "minLon": str(self.min_lon),
            "maxLon": str(self.max_lon),
        }


def parse_stops(payload: Any) -> list[Stop]:
    """Parse a feed body into stops, skipping malformed entries.

    Accepts either a JSON list of stops or an object carrying them under
    ``pokestops``.
    """
    if isinstance(payload, dict):
        payload = payload.get("pokestops")
    if not isinstance(payload, list):
        return []

    stops: list[Stop] = []
    for entry in payload:
        if not isinstance(entry, dict):
            _logger.debug("Skipping non-object feed entry: %r", entry)
            continue
        try:
            stops.append(Stop.model_validate(entry))
        except ValidationError:
            _logger.debug("Skipping malformed stop id=%r", entry.get("id"), exc_info=True)
    return stops


class StopFeedClient:
    """Async client fetching complete stop snapshots.

    Usage::

        async with StopFeedClient(config) as feed:
            stops = await feed.fetch_stops(bounds)
            layer.sync(stops)
    """

    def __init__(
        self,
        config: StopTilesConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session

    async def __aenter__(self) -> StopFeedClient:
        if self._http_session is None:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
            self._http_session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        session = self._http_session
        if session is not None and not self._external_session:
            self._http_session = None
            await session.close()

    async def fetch_stops(self, bounds: MapBounds) -> list[Stop]:
        """Fetch every stop inside *bounds*.

        Raises
        ------
        StopFeedError
            On network failure, non-200 status or a body that is not JSON.
        """
        if self._http_session is None:
            raise StopFeedError("Feed client is not open; use 'async with'", url=self._config.feed_url)

        url = self._config.feed_url
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        _logger.debug("GET %s bounds=%s", url, bounds)

        try:
            async with self._http_session.get(url, params=bounds.as_params(), headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise StopFeedError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except StopFeedError:
            raise
        except aiohttp.ClientError as exc:
            raise StopFeedError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StopFeedError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        stops = parse_stops(body)
        _logger.debug("Feed returned %d stops", len(stops))
        return stops
