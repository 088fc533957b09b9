"""Liability token protocol — the USD-pegged token minted by the engine."""
from typing import Protocol


class LiabilityToken(Protocol):
    """Abstract interface for the owner-gated liability token."""

    def issue(self, to: str, amount: int, *, sender: str) -> bool: ...

    def destroy(self, amount: int, *, sender: str) -> None: ...

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool: ...

    def balance_of(self, account: str) -> int: ...
