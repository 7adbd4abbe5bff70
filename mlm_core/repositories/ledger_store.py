"""
Ledger store.

Narrow persistence interface consumed by the placement engine and the
commission engine. Every save flushes inside the caller's unit of work;
commit and retry belong to the caller.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import WalletType
from mlm_core.models.member import Member
from mlm_core.models.package import Package
from mlm_core.models.transaction import Transaction
from mlm_core.models.tree_node import TreeNode
from mlm_core.models.wallet import Wallet
from mlm_core.repositories.member_repository import MemberRepository
from mlm_core.repositories.package_repository import PackageRepository
from mlm_core.repositories.transaction_repository import TransactionRepository
from mlm_core.repositories.tree_node_repository import TreeNodeRepository
from mlm_core.repositories.wallet_repository import WalletRepository


class LedgerStore:
    """Member, tree, wallet, transaction and package persistence."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize ledger store.

        Args:
            session: Async database session
        """
        self.session = session
        self.members = MemberRepository(session)
        self.tree_nodes = TreeNodeRepository(session)
        self.wallets = WalletRepository(session)
        self.transactions = TransactionRepository(session)
        self.packages = PackageRepository(session)

    async def get_member(self, member_id: int) -> Member | None:
        """Get member (reloaded) or None."""
        return await self.members.get_fresh(member_id)

    async def get_tree_node(self, member_id: int) -> TreeNode | None:
        """Get member's tree node (reloaded, unlocked) or None."""
        return await self.tree_nodes.get_by_member_id(member_id)

    async def get_tree_node_for_update(self, member_id: int) -> TreeNode | None:
        """Get member's tree node fresh for mutation or None."""
        return await self.tree_nodes.get_by_member_id_for_update(member_id)

    async def get_package(self, package_id: int) -> Package | None:
        """Get package or None."""
        return await self.packages.get_by_id(package_id)

    async def get_wallet(
        self, member_id: int, wallet_type: WalletType | str
    ) -> Wallet | None:
        """Get member's wallet of given type (reloaded, unlocked) or None."""
        return await self.wallets.get_wallet(member_id, wallet_type)

    async def get_wallet_for_update(
        self, member_id: int, wallet_type: WalletType | str
    ) -> Wallet | None:
        """Get member's wallet fresh for a balance change or None."""
        return await self.wallets.get_wallet_for_update(member_id, wallet_type)

    async def save_tree_node(self, node: TreeNode) -> TreeNode:
        """Flush tree node (version-checked on update)."""
        return await self.tree_nodes.save(node)

    async def save_wallet(self, wallet: Wallet) -> Wallet:
        """Flush wallet (version-checked on update)."""
        return await self.wallets.save(wallet)

    async def append_transaction(self, record: Transaction) -> Transaction:
        """Append ledger record."""
        return await self.transactions.append(record)
