"""
Transaction repository.

Data access layer for the append-only Transaction ledger.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import TransactionType, WalletType
from mlm_core.models.transaction import Transaction
from mlm_core.repositories.base import BaseRepository
from mlm_core.utils.validation import quantize_money


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def append(self, record: Transaction) -> Transaction:
        """
        Append ledger record.

        Args:
            record: New transaction

        Returns:
            Persisted transaction
        """
        self.session.add(record)
        await self.session.flush()
        return record

    async def find_history(
        self,
        member_id: int,
        wallet_type: WalletType | str | None = None,
        transaction_type: TransactionType | str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """
        Get member's transactions filtered, newest first.

        Args:
            member_id: Wallet owner
            wallet_type: Optional wallet filter
            transaction_type: Optional type filter
            start: Optional inclusive lower bound on timestamp
            end: Optional inclusive upper bound on timestamp
            limit: Page size
            offset: Records to skip

        Returns:
            Tuple of (transactions, total matching)
        """
        conditions = [Transaction.member_id == member_id]
        if wallet_type is not None:
            conditions.append(Transaction.wallet_type == str(wallet_type))
        if transaction_type is not None:
            conditions.append(Transaction.type == str(transaction_type))
        if start is not None:
            conditions.append(Transaction.timestamp >= start)
        if end is not None:
            conditions.append(Transaction.timestamp <= end)

        count_stmt = select(func.count(Transaction.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Transaction)
            .where(*conditions)
            .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_totals(
        self, member_id: int, transaction_type: TransactionType | str
    ) -> tuple[Decimal, int]:
        """
        Sum and count of a member's transactions of one type.

        Optimized to avoid fetching records - uses SQL aggregation.

        Args:
            member_id: Wallet owner
            transaction_type: Transaction type

        Returns:
            Tuple of (total amount, record count)
        """
        stmt = (
            select(
                func.coalesce(func.sum(Transaction.amount), Decimal("0")),
                func.count(Transaction.id),
            )
            .where(
                Transaction.member_id == member_id,
                Transaction.type == str(transaction_type),
            )
        )
        row = (await self.session.execute(stmt)).one()
        return quantize_money(Decimal(str(row[0]))), row[1]
