"""Asset custody protocol — transfers of registered collateral assets."""
from typing import Protocol


class AssetCustody(Protocol):
    """Abstract interface over the collateral asset ledgers.

    Both transfer calls report success as a boolean; ``False`` means nothing
    moved.
    """

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(
        self, asset: str, spender: str, sender: str, recipient: str, amount: int
    ) -> bool: ...

    def balance_of(self, asset: str, account: str) -> int: ...
