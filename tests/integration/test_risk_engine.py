"""Integration tests for minting, burning and health factors."""
from __future__ import annotations

import pytest

from synth_engine.errors import (
    HealthFactorBroken,
    InsufficientDebt,
    InvalidAmount,
    StalePrice,
    TransferFailed,
)
from synth_engine.fixed_point import HEALTH_FACTOR_MAX
from synth_engine.models import AccountInformation
from synth_engine.oracles import StaticPriceOracle
from synth_engine.services import RiskEngine
from synth_engine.tokens import InMemoryCustody, LiabilityToken
from tests.conftest import ENGINE, ETH_FEED, WAD, FakeClock


@pytest.fixture()
def alice(engine: RiskEngine, fund) -> str:
    """Alice has 10 WETH ($30,000) deposited and nothing minted."""
    fund("alice", "WETH", 10 * WAD)
    engine.deposit_collateral("alice", "WETH", 10 * WAD)
    return "alice"


class TestHealthFactor:
    def test_no_debt_is_max(self, engine: RiskEngine, alice: str) -> None:
        assert engine.health_factor(alice) == HEALTH_FACTOR_MAX

    def test_no_debt_no_collateral_is_max(self, engine: RiskEngine) -> None:
        assert engine.health_factor("nobody") == HEALTH_FACTOR_MAX

    def test_two_at_7500_minted(self, engine: RiskEngine, alice: str) -> None:
        engine.mint(alice, 7500 * WAD)
        assert engine.health_factor(alice) == 2 * WAD

    def test_account_information(self, engine: RiskEngine, alice: str) -> None:
        engine.mint(alice, 100 * WAD)
        assert engine.account_information(alice) == AccountInformation(
            total_minted=100 * WAD, collateral_value_usd=30000 * WAD
        )

    def test_calculate_health_factor(self, engine: RiskEngine) -> None:
        assert engine.calculate_health_factor(100 * WAD, 1000 * WAD) == 5 * WAD
        assert engine.calculate_health_factor(0, 0) == HEALTH_FACTOR_MAX

    def test_policy_constants(self, engine: RiskEngine) -> None:
        assert engine.liquidation_threshold == 50
        assert engine.liquidation_precision == 100
        assert engine.liquidation_bonus == 10
        assert engine.min_health_factor == WAD
        assert engine.precision == WAD
        assert engine.additional_feed_precision == 10**10

    def test_price_drop_makes_position_unhealthy(
        self, engine: RiskEngine, oracle: StaticPriceOracle, alice: str
    ) -> None:
        engine.mint(alice, 15000 * WAD)
        oracle.set_price(ETH_FEED, 2000 * 10**8)
        assert engine.health_factor(alice) < engine.min_health_factor


class TestMint:
    def test_mint_exactly_at_minimum_succeeds(
        self, engine: RiskEngine, token: LiabilityToken, alice: str
    ) -> None:
        engine.mint(alice, 15000 * WAD)
        assert engine.health_factor(alice) == WAD
        assert engine.minted(alice) == 15000 * WAD
        assert token.balance_of(alice) == 15000 * WAD

    def test_mint_below_minimum_fails(
        self, engine: RiskEngine, token: LiabilityToken, alice: str
    ) -> None:
        with pytest.raises(HealthFactorBroken) as exc_info:
            engine.mint(alice, 15100 * WAD)
        # 15000 / 15100 of 1e18
        assert exc_info.value.health_factor == 15000 * WAD * WAD // (15100 * WAD)
        assert engine.minted(alice) == 0
        assert token.balance_of(alice) == 0

    def test_failed_mint_keeps_previous_debt(self, engine: RiskEngine, alice: str) -> None:
        engine.mint(alice, 10000 * WAD)
        with pytest.raises(HealthFactorBroken):
            engine.mint(alice, 5001 * WAD)
        assert engine.minted(alice) == 10000 * WAD

    def test_mint_without_collateral_fails(self, engine: RiskEngine) -> None:
        with pytest.raises(HealthFactorBroken) as exc_info:
            engine.mint("bob", 1)
        assert exc_info.value.health_factor == 0
        assert engine.minted("bob") == 0

    def test_zero_amount_rejected(self, engine: RiskEngine, alice: str) -> None:
        with pytest.raises(InvalidAmount):
            engine.mint(alice, 0)

    def test_stale_price_blocks_minting(
        self, engine: RiskEngine, clock: FakeClock, alice: str
    ) -> None:
        clock.advance(3 * 60 * 60 + 1)
        with pytest.raises(StalePrice):
            engine.mint(alice, WAD)
        assert engine.minted(alice) == 0


class TestBurn:
    def test_burn_reduces_debt_and_supply(
        self, engine: RiskEngine, token: LiabilityToken, alice: str, approve_burn
    ) -> None:
        engine.mint(alice, 1000 * WAD)
        approve_burn(alice, 400 * WAD)
        engine.burn(400 * WAD, alice, alice)

        assert engine.minted(alice) == 600 * WAD
        assert token.balance_of(alice) == 600 * WAD
        assert token.balance_of(ENGINE) == 0
        assert token.total_supply == 600 * WAD

    def test_burn_more_than_minted(
        self, engine: RiskEngine, alice: str, approve_burn
    ) -> None:
        engine.mint(alice, 100 * WAD)
        approve_burn(alice, 200 * WAD)
        with pytest.raises(InsufficientDebt):
            engine.burn(101 * WAD, alice, alice)
        assert engine.minted(alice) == 100 * WAD

    def test_burn_without_allowance_fails(
        self, engine: RiskEngine, token: LiabilityToken, alice: str
    ) -> None:
        engine.mint(alice, 100 * WAD)
        with pytest.raises(TransferFailed):
            engine.burn(50 * WAD, alice, alice)
        assert engine.minted(alice) == 100 * WAD
        assert token.balance_of(alice) == 100 * WAD

    def test_zero_amount_rejected(self, engine: RiskEngine, alice: str) -> None:
        with pytest.raises(InvalidAmount):
            engine.burn(0, alice, alice)

    def test_third_party_can_repay(
        self, engine: RiskEngine, token: LiabilityToken, alice: str, approve_burn
    ) -> None:
        engine.mint(alice, 100 * WAD)
        token.transfer(alice, "carol", 100 * WAD)
        approve_burn("carol", 100 * WAD)
        engine.burn(100 * WAD, alice, "carol")
        assert engine.minted(alice) == 0
        assert token.balance_of("carol") == 0

    def test_burn_allowed_while_unhealthy(
        self,
        engine: RiskEngine,
        oracle: StaticPriceOracle,
        alice: str,
        approve_burn,
    ) -> None:
        engine.mint(alice, 15000 * WAD)
        oracle.set_price(ETH_FEED, 2000 * 10**8)
        approve_burn(alice, 1000 * WAD)
        engine.burn(1000 * WAD, alice, alice)
        assert engine.minted(alice) == 14000 * WAD


class TestDepositAndMint:
    def test_success(
        self, engine: RiskEngine, custody: InMemoryCustody, token: LiabilityToken, fund
    ) -> None:
        fund("bob", "WETH", 10 * WAD)
        engine.deposit_and_mint("bob", "WETH", 10 * WAD, 7500 * WAD)
        assert engine.collateral_balance_of_user("WETH", "bob") == 10 * WAD
        assert engine.health_factor("bob") == 2 * WAD
        assert token.balance_of("bob") == 7500 * WAD
        assert custody.balance_of("WETH", ENGINE) == 10 * WAD

    def test_broken_health_factor_rolls_back_deposit(
        self, engine: RiskEngine, custody: InMemoryCustody, token: LiabilityToken, fund
    ) -> None:
        events: list = []
        engine.subscribe(events.append)
        fund("bob", "WETH", 10 * WAD)

        with pytest.raises(HealthFactorBroken):
            engine.deposit_and_mint("bob", "WETH", 10 * WAD, 15100 * WAD)

        assert engine.collateral_balance_of_user("WETH", "bob") == 0
        assert engine.minted("bob") == 0
        assert custody.balance_of("WETH", "bob") == 10 * WAD
        assert custody.balance_of("WETH", ENGINE) == 0
        assert token.balance_of("bob") == 0
        assert events == []


class TestRedeemCollateral:
    def test_redeem_that_breaks_health_factor_fails(
        self, engine: RiskEngine, custody: InMemoryCustody, alice: str
    ) -> None:
        engine.mint(alice, 7500 * WAD)
        # 5 WETH left would give exactly 1.0; 5.000...1 removed would break it
        with pytest.raises(HealthFactorBroken):
            engine.redeem_collateral(alice, "WETH", 5 * WAD + 1)
        assert engine.collateral_balance_of_user("WETH", alice) == 10 * WAD
        assert custody.balance_of("WETH", alice) == 0

    def test_redeem_down_to_minimum(self, engine: RiskEngine, alice: str) -> None:
        engine.mint(alice, 7500 * WAD)
        engine.redeem_collateral(alice, "WETH", 5 * WAD)
        assert engine.health_factor(alice) == WAD


class TestRedeemForBurn:
    def test_success(
        self,
        engine: RiskEngine,
        custody: InMemoryCustody,
        token: LiabilityToken,
        alice: str,
        approve_burn,
    ) -> None:
        engine.mint(alice, 7500 * WAD)
        approve_burn(alice, 7500 * WAD)
        engine.redeem_for_burn(alice, "WETH", 10 * WAD, 7500 * WAD)

        assert engine.minted(alice) == 0
        assert engine.collateral_balance_of_user("WETH", alice) == 0
        assert custody.balance_of("WETH", alice) == 10 * WAD
        assert token.balance_of(alice) == 0

    def test_partial_burn_then_excess_redeem_rolls_back(
        self,
        engine: RiskEngine,
        custody: InMemoryCustody,
        token: LiabilityToken,
        alice: str,
        approve_burn,
    ) -> None:
        engine.mint(alice, 7500 * WAD)
        approve_burn(alice, 1000 * WAD)

        with pytest.raises(HealthFactorBroken):
            engine.redeem_for_burn(alice, "WETH", 9 * WAD, 1000 * WAD)

        assert engine.minted(alice) == 7500 * WAD
        assert engine.collateral_balance_of_user("WETH", alice) == 10 * WAD
        assert token.balance_of(alice) == 7500 * WAD
        assert token.allowance(alice, ENGINE) == 1000 * WAD
        assert custody.balance_of("WETH", alice) == 0
