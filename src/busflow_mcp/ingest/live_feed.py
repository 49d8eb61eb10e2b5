"""Live vehicle feed client."""

import logging
from typing import Any, Dict, List, Optional

import aiohttp
from google.transit import gtfs_realtime_pb2

logger = logging.getLogger(__name__)

USER_AGENT = "BusFlowTracker/0.1"


def parse_gtfs_realtime(data: bytes) -> List[Dict[str, Any]]:
    """
    Convert a GTFS-Realtime VehiclePositions feed into live feed records.

    Each vehicle entity carrying a position becomes
    ``{"properties": {"b", "r", "line"}, "geometry": {"coordinates": [lng, lat]}}``.
    Validation is left to the tracker.
    """
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(data)

    records = []
    for entity in feed.entity:
        if not entity.HasField('vehicle'):
            continue
        vehicle = entity.vehicle
        if not vehicle.HasField('position'):
            continue

        records.append({
            "properties": {
                "b": vehicle.vehicle.id if vehicle.vehicle.id else entity.id,
                "r": vehicle.trip.route_id if vehicle.HasField('trip') else None,
                "line": vehicle.vehicle.label if vehicle.vehicle.label else None,
            },
            "geometry": {
                "type": "Point",
                "coordinates": [vehicle.position.longitude, vehicle.position.latitude],
            },
        })
    return records


class LiveFeedClient:
    """Fetches one snapshot batch per call; yields None when the fetch fails."""

    def __init__(
        self,
        url: str,
        feed_format: str = "json",
        timeout_s: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.feed_format = feed_format
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None

    async def open(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owns_session = True

    async def close(self):
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch_batch(self) -> Optional[List[Dict[str, Any]]]:
        """Fetch the current batch of vehicle records."""
        if not self._session:
            await self.open()

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            async with self._session.get(self.url, timeout=timeout) as response:
                if response.status == 204:
                    logger.warning("Live feed returned No Content (204)")
                    return []
                response.raise_for_status()

                if self.feed_format == "gtfs-rt":
                    return parse_gtfs_realtime(await response.read())

                data = await response.json(content_type=None)
        except Exception as e:
            logger.error(f"Error fetching {self.url}: {e}")
            return None

        if not isinstance(data, list):
            logger.error(f"Expected a list from the live feed, received {type(data).__name__}")
            return None

        logger.debug(f"Received {len(data)} vehicle records")
        return data
