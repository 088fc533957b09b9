"""In-memory custody over every registered collateral asset."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .ledger import TokenLedger


class InMemoryCustody:
    """One :class:`TokenLedger` per collateral asset."""

    def __init__(self, assets: Iterable[str]) -> None:
        self._ledgers = {asset: TokenLedger(asset) for asset in assets}

    def ledger(self, asset: str) -> TokenLedger:
        try:
            return self._ledgers[asset]
        except KeyError:
            raise KeyError(f"Custody does not hold asset '{asset}'") from None

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        return self.ledger(asset).transfer(sender, recipient, amount)

    def transfer_from(
        self, asset: str, spender: str, sender: str, recipient: str, amount: int
    ) -> bool:
        return self.ledger(asset).transfer_from(spender, sender, recipient, amount)

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> bool:
        return self.ledger(asset).approve(owner, spender, amount)

    def balance_of(self, asset: str, account: str) -> int:
        return self.ledger(asset).balance_of(account)

    def mint(self, asset: str, to: str, amount: int) -> None:
        """Faucet used to fund simulated users."""
        self.ledger(asset).mint(to, amount)

    def snapshot(self) -> dict[str, Any]:
        return {asset: ledger.snapshot() for asset, ledger in self._ledgers.items()}

    def restore(self, state: dict[str, Any]) -> None:
        for asset, ledger_state in state.items():
            self._ledgers[asset].restore(ledger_state)
