"""Price oracle implementations and the staleness guard."""
from .pyth import PythOracle
from .staleness import DEFAULT_PRICE_TIMEOUT, checked_price
from .static import StaticPriceOracle

__all__ = ["DEFAULT_PRICE_TIMEOUT", "PythOracle", "StaticPriceOracle", "checked_price"]
