"""Immutable collateral asset registry — asset id → price feed id."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from .errors import AssetNotAllowed, RegistryError


class AssetRegistry:
    """Fixed set of collateral assets, populated once at construction.

    Iteration order is the registration order, which keeps collateral
    valuation deterministic.
    """

    def __init__(self, assets: Sequence[str], price_feeds: Sequence[str]) -> None:
        if len(assets) != len(price_feeds):
            raise RegistryError(
                f"Assets and price feeds must have the same length "
                f"({len(assets)} != {len(price_feeds)})"
            )
        if not assets:
            raise RegistryError("At least one collateral asset must be registered")

        feeds: dict[str, str] = {}
        for asset, feed in zip(assets, price_feeds):
            if asset in feeds:
                raise RegistryError(f"Asset '{asset}' registered twice")
            if not feed:
                raise RegistryError(f"Asset '{asset}' has no price feed")
            feeds[asset] = feed

        self._feeds = MappingProxyType(feeds)
        self._assets = tuple(feeds)

    @classmethod
    def from_mapping(cls, feeds: Mapping[str, str]) -> AssetRegistry:
        return cls(list(feeds.keys()), list(feeds.values()))

    @property
    def assets(self) -> tuple[str, ...]:
        return self._assets

    def price_feed_of(self, asset: str) -> str:
        """Return the feed id for ``asset``; unknown assets raise ``AssetNotAllowed``."""
        try:
            return self._feeds[asset]
        except KeyError:
            raise AssetNotAllowed(asset) from None

    def require(self, asset: str) -> None:
        if asset not in self._feeds:
            raise AssetNotAllowed(asset)

    def __contains__(self, asset: object) -> bool:
        return asset in self._feeds

    def __iter__(self):
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetRegistry({dict(self._feeds)!r})"
