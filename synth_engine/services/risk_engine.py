"""Risk engine — liability accounting, health factors and liquidation.

Every public mutating method runs as one transaction on the shared
:class:`LedgerStore`: either all ledger writes and collaborator calls
succeed, or the ledger (and any transactional collaborator) is restored.
"""
from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from .. import fixed_point
from ..config import RiskConfig
from ..errors import (
    EngineError,
    HealthFactorBroken,
    HealthFactorNotImproved,
    HealthFactorOk,
    InsufficientDebt,
    InvalidAmount,
    MintFailed,
    TransferFailed,
)
from ..interfaces.custody import AssetCustody
from ..interfaces.liability_token import LiabilityToken
from ..interfaces.price_oracle import PriceOracle
from ..models import AccountInformation
from ..registry import AssetRegistry
from ..store import EventListener, LedgerStore
from .collateral_ledger import CollateralLedger

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _atomic(method: F) -> F:
    """Run a public operation inside a single non-reentrant store transaction."""

    @functools.wraps(method)
    def wrapper(self: RiskEngine, *args: Any, **kwargs: Any) -> Any:
        try:
            with self._store.atomic(self._participants):
                result = method(self, *args, **kwargs)
        except Exception as e:
            logger.warning(
                "%s rolled back: %s: %s", method.__name__, type(e).__name__, e
            )
            raise
        logger.info("%s committed %s", method.__name__, args)
        return result

    return wrapper  # type: ignore[return-value]


class RiskEngine:
    """Public entry point of the engine: collateral, liability and liquidation."""

    def __init__(
        self,
        registry: AssetRegistry,
        oracle: PriceOracle,
        custody: AssetCustody,
        token: LiabilityToken,
        risk: RiskConfig | None = None,
        address: str = "engine",
        clock: Callable[[], float] = time.time,
        store: LedgerStore | None = None,
    ) -> None:
        risk = risk or RiskConfig()
        self.address = address
        self._risk = risk
        self._token = token
        self._store = store or LedgerStore()
        self._ledger = CollateralLedger(
            self._store,
            registry,
            oracle,
            custody,
            address,
            clock=clock,
            price_timeout=risk.price_timeout_seconds,
        )
        self._participants = (custody, token)

    @property
    def ledger(self) -> CollateralLedger:
        return self._ledger

    @property
    def store(self) -> LedgerStore:
        return self._store

    def subscribe(self, listener: EventListener) -> None:
        """Receive deposit/redeem events of committed transactions."""
        self._store.subscribe(listener)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @_atomic
    def deposit_collateral(self, user: str, asset: str, amount: int) -> None:
        self._ledger.deposit(user, asset, amount)

    @_atomic
    def redeem_collateral(self, user: str, asset: str, amount: int) -> None:
        self._ledger.redeem(asset, amount, user, user)
        self._revert_if_health_factor_is_broken(user)

    @_atomic
    def mint(self, user: str, amount: int) -> None:
        self._mint(user, amount)

    @_atomic
    def burn(self, amount: int, on_behalf_of: str, payer: str) -> None:
        self._burn(amount, on_behalf_of, payer)

    @_atomic
    def deposit_and_mint(
        self, user: str, asset: str, amount_collateral: int, amount_liability: int
    ) -> None:
        self._ledger.deposit(user, asset, amount_collateral)
        self._mint(user, amount_liability)

    @_atomic
    def redeem_for_burn(
        self, user: str, asset: str, amount_collateral: int, amount_liability: int
    ) -> None:
        self._burn(amount_liability, user, user)
        self._ledger.redeem(asset, amount_collateral, user, user)
        self._revert_if_health_factor_is_broken(user)

    @_atomic
    def liquidate(self, caller: str, asset: str, target_user: str, debt_to_cover: int) -> int:
        """Cover ``debt_to_cover`` of an unhealthy user's debt for bonus collateral.

        Returns the amount of ``asset`` seized and sent to ``caller``.
        """
        if debt_to_cover <= 0:
            raise InvalidAmount(debt_to_cover)

        starting = self.health_factor(target_user)
        if starting >= self._risk.min_health_factor:
            raise HealthFactorOk(target_user, starting)

        token_amount = self._ledger.token_amount_from_usd(asset, debt_to_cover)
        seized = fixed_point.with_bonus(
            token_amount, self._risk.liquidation_bonus, self._risk.liquidation_precision
        )
        self._ledger.redeem(asset, seized, target_user, caller)
        self._burn(debt_to_cover, target_user, caller)

        ending = self.health_factor(target_user)
        if ending <= starting:
            raise HealthFactorNotImproved(target_user, starting, ending)

        self._revert_if_health_factor_is_broken(caller)
        logger.info(
            "Liquidated %s: covered %d debt, seized %d %s for %s",
            target_user, debt_to_cover, seized, asset, caller,
        )
        return seized

    # ------------------------------------------------------------------
    # Internal transitions
    # ------------------------------------------------------------------

    def _mint(self, user: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount(amount)

        self._store.set_minted(user, self._store.minted(user) + amount)
        self._revert_if_health_factor_is_broken(user)

        try:
            issued = self._token.issue(user, amount, sender=self.address)
        except EngineError:
            raise
        except Exception as e:
            raise MintFailed(f"Liability token refused to issue {amount}: {e}") from e
        if not issued:
            raise MintFailed(f"Liability token did not issue {amount} to '{user}'")

    def _burn(self, amount: int, on_behalf_of: str, payer: str) -> None:
        if amount <= 0:
            raise InvalidAmount(amount)

        minted = self._store.minted(on_behalf_of)
        if minted < amount:
            raise InsufficientDebt(on_behalf_of, minted, amount)
        self._store.set_minted(on_behalf_of, minted - amount)

        try:
            pulled = self._token.transfer_from(self.address, payer, self.address, amount)
            if not pulled:
                raise TransferFailed(f"Could not pull {amount} liability tokens from '{payer}'")
            self._token.destroy(amount, sender=self.address)
        except EngineError:
            raise
        except Exception as e:
            raise TransferFailed(f"Liability token burn of {amount} failed: {e}") from e

    def _revert_if_health_factor_is_broken(self, user: str) -> None:
        factor = self.health_factor(user)
        if factor < self._risk.min_health_factor:
            raise HealthFactorBroken(user, factor)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def health_factor(self, user: str) -> int:
        info = self.account_information(user)
        return self.calculate_health_factor(info.total_minted, info.collateral_value_usd)

    def calculate_health_factor(self, total_minted: int, collateral_value_usd: int) -> int:
        return fixed_point.calc_health_factor(
            total_minted,
            collateral_value_usd,
            self._risk.liquidation_threshold,
            self._risk.liquidation_precision,
        )

    def account_information(self, user: str) -> AccountInformation:
        return AccountInformation(
            total_minted=self._store.minted(user),
            collateral_value_usd=self._ledger.account_collateral_value_usd(user),
        )

    def account_collateral_value_usd(self, user: str) -> int:
        return self._ledger.account_collateral_value_usd(user)

    def usd_value(self, asset: str, amount: int) -> int:
        return self._ledger.usd_value(asset, amount)

    def token_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        return self._ledger.token_amount_from_usd(asset, usd_amount)

    def collateral_balance_of_user(self, asset: str, user: str) -> int:
        return self._ledger.collateral_balance_of_user(asset, user)

    def minted(self, user: str) -> int:
        return self._store.minted(user)

    def registered_assets(self) -> tuple[str, ...]:
        return self._ledger.registered_assets()

    def price_feed_of(self, asset: str) -> str:
        return self._ledger.price_feed_of(asset)

    @property
    def liquidation_threshold(self) -> int:
        return self._risk.liquidation_threshold

    @property
    def liquidation_precision(self) -> int:
        return self._risk.liquidation_precision

    @property
    def liquidation_bonus(self) -> int:
        return self._risk.liquidation_bonus

    @property
    def min_health_factor(self) -> int:
        return self._risk.min_health_factor

    @property
    def precision(self) -> int:
        return fixed_point.PRECISION

    @property
    def additional_feed_precision(self) -> int:
        return fixed_point.ADDITIONAL_FEED_PRECISION
