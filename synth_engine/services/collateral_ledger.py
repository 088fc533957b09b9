"""Collateral ledger — per-user deposits, custody transfers and USD valuation."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .. import fixed_point
from ..errors import EngineError, InsufficientCollateral, InvalidAmount, TransferFailed
from ..interfaces.custody import AssetCustody
from ..interfaces.price_oracle import PriceOracle
from ..models import CollateralDeposited, CollateralRedeemed
from ..oracles.staleness import DEFAULT_PRICE_TIMEOUT, checked_price
from ..registry import AssetRegistry
from ..store import LedgerStore

logger = logging.getLogger(__name__)


class CollateralLedger:
    """Deposited-collateral accounting for one engine.

    ``deposit`` and ``redeem`` are ledger transitions: they must run inside a
    transaction opened on the shared :class:`LedgerStore`, which the
    :class:`RiskEngine` does for every public operation.
    """

    def __init__(
        self,
        store: LedgerStore,
        registry: AssetRegistry,
        oracle: PriceOracle,
        custody: AssetCustody,
        address: str,
        clock: Callable[[], float] = time.time,
        price_timeout: int = DEFAULT_PRICE_TIMEOUT,
    ) -> None:
        self._store = store
        self._registry = registry
        self._oracle = oracle
        self._custody = custody
        self._address = address
        self._clock = clock
        self._price_timeout = price_timeout

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def deposit(self, user: str, asset: str, amount: int) -> None:
        _require_positive(amount)
        self._registry.require(asset)

        self._store.set_position(user, asset, self._store.position(user, asset) + amount)
        self._store.emit(CollateralDeposited(user=user, asset=asset, amount=amount))

        self._custody_call(
            self._custody.transfer_from,
            asset, self._address, user, self._address, amount,
        )
        logger.debug("Deposited %d %s for %s", amount, asset, user)

    def redeem(self, asset: str, amount: int, redeemed_from: str, redeemed_to: str) -> None:
        _require_positive(amount)
        self._registry.require(asset)

        balance = self._store.position(redeemed_from, asset)
        if balance < amount:
            raise InsufficientCollateral(redeemed_from, asset, balance, amount)

        self._store.set_position(redeemed_from, asset, balance - amount)
        self._store.emit(
            CollateralRedeemed(
                redeemed_from=redeemed_from,
                redeemed_to=redeemed_to,
                asset=asset,
                amount=amount,
            )
        )

        self._custody_call(
            self._custody.transfer, asset, self._address, redeemed_to, amount
        )
        logger.debug(
            "Redeemed %d %s from %s to %s", amount, asset, redeemed_from, redeemed_to
        )

    def _custody_call(self, call: Callable[..., bool], asset: str, *args) -> None:
        try:
            ok = call(asset, *args)
        except EngineError:
            raise
        except Exception as e:
            raise TransferFailed(f"Custody transfer of '{asset}' failed: {e}") from e
        if not ok:
            raise TransferFailed(f"Custody transfer of '{asset}' was not performed")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def account_collateral_value_usd(self, user: str) -> int:
        """Sum the USD value (18 decimals) of every registered asset ``user`` holds."""
        total = 0
        for asset in self._registry.assets:
            total += self.usd_value(asset, self._store.position(user, asset))
        return total

    def usd_value(self, asset: str, amount: int) -> int:
        return fixed_point.usd_value(self._price(asset), amount)

    def token_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        return fixed_point.token_amount_from_usd(self._price(asset), usd_amount)

    def collateral_balance_of_user(self, asset: str, user: str) -> int:
        return self._store.position(user, asset)

    def registered_assets(self) -> tuple[str, ...]:
        return self._registry.assets

    def price_feed_of(self, asset: str) -> str:
        return self._registry.price_feed_of(asset)

    def _price(self, asset: str) -> int:
        feed_id = self._registry.price_feed_of(asset)
        return checked_price(self._oracle, feed_id, self._clock, self._price_timeout).price


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmount(amount)
