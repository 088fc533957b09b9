"""Fungible token ledger with balances and allowances."""
from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Base class for token ledger failures."""


class InsufficientBalance(TokenError):
    def __init__(self, account: str, balance: int, amount: int) -> None:
        super().__init__(f"'{account}' holds {balance}, cannot move {amount}")
        self.account = account
        self.balance = balance
        self.amount = amount


class InsufficientAllowance(TokenError):
    def __init__(self, owner: str, spender: str, allowance: int, amount: int) -> None:
        super().__init__(
            f"'{spender}' may spend {allowance} of '{owner}', cannot move {amount}"
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.amount = amount


class InvalidRecipient(TokenError):
    pass


class TokenLedger:
    """Balances of a single token; amounts are non-negative integers."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self._undo: list[tuple[str, Any, int]] = []
        self._window = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError("Allowance cannot be negative")
        self._set_allowance((owner, spender), amount)
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool:
        allowed = self.allowance(sender, spender)
        if allowed < amount:
            raise InsufficientAllowance(sender, spender, allowed, amount)
        self._move(sender, recipient, amount)
        self._set_allowance((sender, spender), allowed - amount)
        return True

    def mint(self, to: str, amount: int) -> None:
        if not to:
            raise InvalidRecipient("Cannot mint to an empty address")
        if amount < 0:
            raise ValueError("Mint amount cannot be negative")
        self._set_balance(to, self.balance_of(to) + amount)
        self._set_supply(self._total_supply + amount)

    def burn(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(account, balance, amount)
        self._set_balance(account, balance - amount)
        self._set_supply(self._total_supply - amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if not recipient:
            raise InvalidRecipient("Cannot transfer to an empty address")
        if amount < 0:
            raise ValueError("Transfer amount cannot be negative")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(sender, balance, amount)
        self._set_balance(sender, balance - amount)
        self._set_balance(recipient, self.balance_of(recipient) + amount)
        logger.debug("%s: %s -> %s %d", self.symbol, sender, recipient, amount)

    def _set_balance(self, account: str, amount: int) -> None:
        self._undo.append(("balance", account, self.balance_of(account)))
        self._balances[account] = amount

    def _set_allowance(self, key: tuple[str, str], amount: int) -> None:
        self._undo.append(("allowance", key, self._allowances.get(key, 0)))
        self._allowances[key] = amount

    def _set_supply(self, amount: int) -> None:
        self._undo.append(("supply", None, self._total_supply))
        self._total_supply = amount

    # Transactional

    def snapshot(self) -> int:
        """Open a new undo window and return its marker.

        Only writes made after this call are recorded, so the cost of a
        snapshot does not depend on the number of holders.
        """
        self._undo = []
        self._window += 1
        return self._window

    def restore(self, state: int) -> None:
        if state != self._window:
            raise ValueError(f"{self.symbol}: snapshot {state} is no longer restorable")
        for kind, key, previous in reversed(self._undo):
            if kind == "balance":
                self._balances[key] = previous
            elif kind == "allowance":
                self._allowances[key] = previous
            else:
                self._total_supply = previous
        self._undo = []
