"""Oracle staleness guard — fail closed on old or unusable prices.

If a feed stops updating, every operation that values collateral through it
raises ``StalePrice``. The engine freezes rather than guess a price.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import InvalidPrice, StalePrice
from ..interfaces.price_oracle import PriceOracle
from ..models import PriceReading

logger = logging.getLogger(__name__)

DEFAULT_PRICE_TIMEOUT = 3 * 60 * 60


def checked_price(
    oracle: PriceOracle,
    feed_id: str,
    clock: Callable[[], float],
    timeout: int = DEFAULT_PRICE_TIMEOUT,
) -> PriceReading:
    """Return the latest reading for ``feed_id`` or raise.

    Raises:
        StalePrice: the reading is older than ``timeout`` seconds.
        InvalidPrice: the price is not positive or is timestamped in the future.
    """
    reading = oracle.latest_price(feed_id)
    now = clock()
    age = now - reading.updated_at

    if age > timeout:
        logger.warning("Stale price for feed %s (age %.0fs)", feed_id, age)
        raise StalePrice(feed_id, reading.updated_at, age)
    if age < 0:
        raise InvalidPrice(
            f"Price for feed '{feed_id}' is timestamped in the future ({reading.updated_at})"
        )
    if reading.price <= 0:
        raise InvalidPrice(f"Price for feed '{feed_id}' is not positive: {reading.price}")

    logger.debug("Price for feed %s: %d (age %.0fs)", feed_id, reading.price, age)
    return reading
