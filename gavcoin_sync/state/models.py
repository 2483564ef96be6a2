"""Action request variants."""

from enum import Enum


class ActionKind(str, Enum):
    """User-initiated action dialog that is currently open."""
    NONE = "none"
    BUY_IN = "BuyIn"
    REFUND = "Refund"
    TRANSFER = "Transfer"
