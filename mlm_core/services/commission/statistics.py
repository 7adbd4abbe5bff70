"""
Commission statistics service.

Read-only queries over leg volumes and commission ledger records.
"""

from collections import defaultdict
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import TransactionType
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id

RECENT_COMMISSIONS_LIMIT = 10


class CommissionStatisticsService(BaseService):
    """Leg volume and commission reporting."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize statistics service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    @service_boundary
    async def get_leg_volumes(self, member_id: int) -> ServiceResult:
        """
        Get current unpaired leg volumes.

        Args:
            member_id: Member ID

        Returns:
            ServiceResult with {"left": Decimal, "right": Decimal}
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        node = await self.store.get_tree_node(member_id)
        if node is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not in tree")

        return ServiceResult.ok(
            {"left": node.left_leg_volume, "right": node.right_leg_volume}
        )

    @service_boundary
    async def get_commission_history(
        self, member_id: int, limit: int = 50, offset: int = 0
    ) -> ServiceResult:
        """
        Get commission credits, newest first.

        Args:
            member_id: Member ID
            limit: Page size
            offset: Records to skip

        Returns:
            ServiceResult with {"history": list[dict], "total": int}
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        records, total = await self.store.transactions.find_history(
            member_id,
            transaction_type=TransactionType.COMMISSION,
            limit=limit,
            offset=offset,
        )

        history = [
            {
                "id": record.id,
                "amount": record.amount,
                "timestamp": record.timestamp,
                "description": record.description,
                "balance_before": record.balance_before,
                "balance_after": record.balance_after,
                "related_member_id": record.related_member_id,
            }
            for record in records
        ]

        return ServiceResult.ok({"history": history, "total": total})

    @service_boundary
    async def get_commission_summary(self, member_id: int) -> ServiceResult:
        """
        Summarize commission earnings.

        Args:
            member_id: Member ID

        Returns:
            ServiceResult with total earned, count, monthly breakdown
            (oldest month first), current leg volumes and recent credits
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        total, count = await self.store.transactions.get_totals(
            member_id, TransactionType.COMMISSION
        )

        records, _ = await self.store.transactions.find_history(
            member_id,
            transaction_type=TransactionType.COMMISSION,
            limit=max(count, 1),
        )

        monthly: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for record in records:
            monthly[record.timestamp.strftime("%Y-%m")] += record.amount

        node = await self.store.get_tree_node(member_id)
        leg_volumes = (
            {"left": node.left_leg_volume, "right": node.right_leg_volume}
            if node is not None
            else {"left": Decimal("0"), "right": Decimal("0")}
        )

        return ServiceResult.ok(
            {
                "total_commissions": total,
                "commissions_count": count,
                "monthly_breakdown": [
                    {"month": month, "amount": monthly[month]}
                    for month in sorted(monthly)
                ],
                "leg_volumes": leg_volumes,
                "recent_commissions": [
                    {
                        "id": record.id,
                        "amount": record.amount,
                        "timestamp": record.timestamp,
                        "description": record.description,
                        "related_member_id": record.related_member_id,
                    }
                    for record in records[:RECENT_COMMISSIONS_LIMIT]
                ],
            }
        )
