"""In-memory token collaborators: fungible ledger, liability token, custody."""
from .custody import InMemoryCustody
from .ledger import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidRecipient,
    TokenError,
    TokenLedger,
)
from .liability import LiabilityToken, NotTokenOwner

__all__ = [
    "InMemoryCustody",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidRecipient",
    "LiabilityToken",
    "NotTokenOwner",
    "TokenError",
    "TokenLedger",
]
