"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from mlm_core.models.base import Base
from mlm_core.models.enums import (
    Leg,
    MemberStatus,
    TransactionType,
    TreePosition,
    WalletType,
)
from mlm_core.models.member import Member
from mlm_core.models.package import Package
from mlm_core.models.transaction import Transaction
from mlm_core.models.tree_node import TreeNode
from mlm_core.models.wallet import Wallet

__all__ = [
    # Base
    "Base",
    # Enums
    "Leg",
    "MemberStatus",
    "TransactionType",
    "TreePosition",
    "WalletType",
    # Models
    "Member",
    "Package",
    "Transaction",
    "TreeNode",
    "Wallet",
]
