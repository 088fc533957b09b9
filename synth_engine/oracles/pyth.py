"""Pyth Network price oracle service."""
from __future__ import annotations

import logging
import ssl
from collections.abc import Iterable
from typing import Any

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import InvalidPrice
from ..fixed_point import FEED_DECIMALS
from ..models import PriceReading

logger = logging.getLogger(__name__)


def normalize_price(price_raw: int, expo: int) -> int:
    """Rescale a Pyth ``price * 10^expo`` answer to 8-decimal fixed point.

    Examples:
        (350000000, -8) → 350000000
        (3500, -3) → 350000000
    """
    shift = expo + FEED_DECIMALS
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10 ** (-shift)


def _bare_id(feed_id: str) -> str:
    return feed_id.lower().removeprefix("0x")


def parse_price_item(item: dict[str, Any]) -> tuple[str, PriceReading]:
    """Parse one entry of the Hermes ``parsed`` array."""
    feed_id = str(item.get("id", ""))
    price_data = item.get("price", {})
    price_raw = int(price_data.get("price", 0))
    expo = int(price_data.get("expo", 0))
    publish_time = int(price_data.get("publish_time", 0))
    return feed_id, PriceReading(
        price=normalize_price(price_raw, expo), updated_at=publish_time
    )


class PythOracle:
    """Serve cached Pyth Network prices; ``refresh`` pulls new ones from Hermes."""

    def __init__(self, config: PythConfig, feed_ids: Iterable[str] = ()) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout_seconds
        self.feed_ids = list(dict.fromkeys(feed_ids))
        self._cache: dict[str, PriceReading] = {}

    def latest_price(self, feed_id: str) -> PriceReading:
        try:
            return self._cache[feed_id]
        except KeyError:
            raise InvalidPrice(f"No Pyth price cached for feed '{feed_id}'") from None

    async def refresh(self, feed_ids: Iterable[str] | None = None) -> dict[str, PriceReading]:
        """Fetch current prices from Pyth Network into the cache.

        Errors are logged and leave the cache untouched; readings that are
        then too old are rejected by the engine's staleness check.

        Args:
            feed_ids: Optional feeds to fetch. If None, fetches all configured
                      feeds.
        """
        readings: dict[str, PriceReading] = {}

        ids = list(dict.fromkeys(feed_ids)) if feed_ids is not None else self.feed_ids
        if not ids:
            return readings

        # Hermes answers with bare lowercase hex ids.
        wanted = {_bare_id(fid): fid for fid in ids}

        query_params = "&".join([f"ids[]={fid}" for fid in ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return readings

                    data = await response.json()

                    for item in data.get("parsed", []):
                        feed_id, reading = parse_price_item(item)
                        requested = wanted.get(_bare_id(feed_id))
                        if requested is None:
                            logger.debug("Ignoring unrequested Pyth feed %s", feed_id)
                            continue
                        readings[requested] = reading

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return readings

        self._cache.update(readings)
        logger.info("Fetched %d prices from Pyth Network", len(readings))
        for feed_id, reading in sorted(readings.items()):
            logger.debug("  %s: %d @ %d", feed_id, reading.price, reading.updated_at)

        return readings
