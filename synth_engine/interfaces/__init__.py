"""Protocol interfaces for the engine's external collaborators."""
from .custody import AssetCustody
from .liability_token import LiabilityToken
from .price_oracle import PriceOracle
from .transactional import Transactional

__all__ = ["AssetCustody", "LiabilityToken", "PriceOracle", "Transactional"]
