"""Engine exception hierarchy — every failure is terminal for its transaction."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InvalidAmount(EngineError):
    """Amount must be strictly greater than zero."""

    def __init__(self, amount: int) -> None:
        super().__init__(f"Amount must be more than zero, got {amount}")
        self.amount = amount


class AssetNotAllowed(EngineError):
    """Asset is not part of the engine's registry."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"Asset '{asset}' is not registered")
        self.asset = asset


class RegistryError(EngineError):
    """Asset registry could not be built."""


# ---------------------------------------------------------------------------
# Insufficient balance
# ---------------------------------------------------------------------------


class InsufficientCollateral(EngineError):
    def __init__(self, user: str, asset: str, balance: int, amount: int) -> None:
        super().__init__(
            f"User '{user}' has {balance} of '{asset}' deposited, cannot remove {amount}"
        )
        self.user = user
        self.asset = asset
        self.balance = balance
        self.amount = amount


class InsufficientDebt(EngineError):
    def __init__(self, user: str, minted: int, amount: int) -> None:
        super().__init__(f"User '{user}' has {minted} minted, cannot burn {amount}")
        self.user = user
        self.minted = minted
        self.amount = amount


# ---------------------------------------------------------------------------
# Collaborator failure
# ---------------------------------------------------------------------------


class TransferFailed(EngineError):
    """Custody or liability-token transfer did not succeed."""


class MintFailed(EngineError):
    """Liability token refused to issue."""


# ---------------------------------------------------------------------------
# Risk policy
# ---------------------------------------------------------------------------


class HealthFactorBroken(EngineError):
    def __init__(self, user: str, health_factor: int) -> None:
        super().__init__(f"Health factor of '{user}' is broken: {health_factor}")
        self.user = user
        self.health_factor = health_factor


class HealthFactorOk(EngineError):
    def __init__(self, user: str, health_factor: int) -> None:
        super().__init__(
            f"Health factor of '{user}' is {health_factor}, position cannot be liquidated"
        )
        self.user = user
        self.health_factor = health_factor


class HealthFactorNotImproved(EngineError):
    def __init__(self, user: str, starting: int, ending: int) -> None:
        super().__init__(
            f"Liquidation did not improve health factor of '{user}': {starting} -> {ending}"
        )
        self.user = user
        self.starting = starting
        self.ending = ending


# ---------------------------------------------------------------------------
# Oracle
# ---------------------------------------------------------------------------


class StalePrice(EngineError):
    """Price reading is older than the staleness window."""

    def __init__(self, feed_id: str, updated_at: int, age: float) -> None:
        super().__init__(
            f"Price for feed '{feed_id}' is stale: updated at {updated_at} ({age:.0f}s ago)"
        )
        self.feed_id = feed_id
        self.updated_at = updated_at
        self.age = age


class InvalidPrice(EngineError):
    """Price reading is missing or unusable."""


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class ReentrancyError(EngineError):
    """A mutating operation was invoked while another one is in progress."""
