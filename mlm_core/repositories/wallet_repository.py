"""
Wallet repository.

Data access layer for Wallet model.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import WalletType
from mlm_core.models.wallet import Wallet
from mlm_core.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Wallet repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wallet repository."""
        super().__init__(Wallet, session)

    async def get_wallet(
        self, member_id: int, wallet_type: WalletType | str
    ) -> Wallet | None:
        """
        Get member's wallet of given type.

        Args:
            member_id: Owner ID
            wallet_type: main / commission

        Returns:
            Wallet or None
        """
        return await self.get_fresh_by(
            member_id=member_id, wallet_type=str(wallet_type)
        )

    async def get_wallet_for_update(
        self, member_id: int, wallet_type: WalletType | str
    ) -> Wallet | None:
        """
        Get member's wallet fresh for a balance change.

        Args:
            member_id: Owner ID
            wallet_type: main / commission

        Returns:
            Wallet or None
        """
        return await self.get_for_update(
            member_id=member_id, wallet_type=str(wallet_type)
        )

    async def get_member_wallets(self, member_id: int) -> list[Wallet]:
        """Get both wallets of a member."""
        return await self.find_by(member_id=member_id)

    async def create_member_wallets(self, member_id: int) -> list[Wallet]:
        """
        Create main and commission wallets with zero balance.

        Args:
            member_id: Owner ID

        Returns:
            Created wallets
        """
        wallets = [
            Wallet(
                member_id=member_id,
                wallet_type=wallet_type.value,
                balance=Decimal("0"),
            )
            for wallet_type in (WalletType.MAIN, WalletType.COMMISSION)
        ]
        self.session.add_all(wallets)
        await self.session.flush()
        return wallets
