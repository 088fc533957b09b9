"""Static price oracle — prices set explicitly, for simulation and tests."""
from __future__ import annotations

import time
from collections.abc import Callable, Mapping

from ..errors import InvalidPrice
from ..models import PriceReading


class StaticPriceOracle:
    """Oracle whose readings are pushed in by the caller."""

    def __init__(
        self,
        prices: Mapping[str, int] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self._readings: dict[str, PriceReading] = {}
        for feed_id, price in (prices or {}).items():
            self.set_price(feed_id, price)

    def set_price(self, feed_id: str, price: int, updated_at: int | None = None) -> None:
        """Record a new 8-decimal price, timestamped now unless given."""
        if updated_at is None:
            updated_at = int(self._clock())
        self._readings[feed_id] = PriceReading(price=price, updated_at=updated_at)

    def latest_price(self, feed_id: str) -> PriceReading:
        try:
            return self._readings[feed_id]
        except KeyError:
            raise InvalidPrice(f"No price for feed '{feed_id}'") from None
