"""
Model enumerations.
"""

from enum import StrEnum


class MemberStatus(StrEnum):
    """Member account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class TreePosition(StrEnum):
    """Position of a tree node under its parent."""

    ROOT = "root"
    LEFT = "left"
    RIGHT = "right"


class Leg(StrEnum):
    """One of the two child subtrees of a tree node."""

    LEFT = "left"
    RIGHT = "right"


class WalletType(StrEnum):
    """Wallet kinds held by every member."""

    MAIN = "main"  # Deposits in, purchases out
    COMMISSION = "commission"  # Pairing payouts in, withdrawals out


class TransactionType(StrEnum):
    """Ledger transaction kinds."""

    DEPOSIT = "deposit"
    PURCHASE = "purchase"
    COMMISSION = "commission"
    WITHDRAWAL = "withdrawal"
