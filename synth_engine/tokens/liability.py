"""Liability token — USD-pegged, mintable and burnable only by its owner."""
from __future__ import annotations

from .ledger import InsufficientBalance, InvalidRecipient, TokenError, TokenLedger


class NotTokenOwner(TokenError):
    pass


class LiabilityToken(TokenLedger):
    """Token ledger whose supply is controlled exclusively by ``owner``.

    The owner (the engine) issues tokens to users and destroys tokens it
    holds itself.
    """

    def __init__(self, owner: str, symbol: str = "USDX") -> None:
        super().__init__(symbol)
        self.owner = owner

    def issue(self, to: str, amount: int, *, sender: str) -> bool:
        self._require_owner(sender)
        if not to:
            raise InvalidRecipient("Cannot issue to an empty address")
        if amount <= 0:
            raise TokenError(f"Issue amount must be more than zero, got {amount}")
        self.mint(to, amount)
        return True

    def destroy(self, amount: int, *, sender: str) -> None:
        self._require_owner(sender)
        if amount <= 0:
            raise TokenError(f"Destroy amount must be more than zero, got {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(sender, balance, amount)
        self.burn(sender, amount)

    def _require_owner(self, sender: str) -> None:
        if sender != self.owner:
            raise NotTokenOwner(f"'{sender}' is not the owner of {self.symbol}")
