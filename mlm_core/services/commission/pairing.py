"""
Pairing & commission calculator.

Pays a percentage of the weaker leg and consumes that volume from both
legs.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.config.business_constants import COMMISSION_RATE_DIVISOR
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.utils.db_decorators import retry_on_stale_data
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id, quantize_money


@dataclass(frozen=True)
class PairingResult:
    """Outcome of one pairing."""

    commission: Decimal
    paired_volume: Decimal


def calculate_commission(poolable: Decimal, commission_rate: Decimal) -> Decimal:
    """
    Commission for a paired volume.

    Args:
        poolable: Paired volume (weaker leg)
        commission_rate: Whole-number percentage (10 = 10%)

    Returns:
        Commission rounded to money scale
    """
    if poolable <= 0:
        return Decimal("0")
    return quantize_money(poolable * commission_rate / COMMISSION_RATE_DIVISOR)


class PairingCalculator(BaseService):
    """Binary pairing over a member's accumulated leg volumes."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize pairing calculator.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    @service_boundary
    @retry_on_stale_data
    async def pair(self, member_id: int, package_id: int) -> ServiceResult:
        """
        Pair member's legs and commit.

        Args:
            member_id: Member whose legs to pair
            package_id: Package providing the commission rate

        Returns:
            ServiceResult with PairingResult as data
        """
        return await self.pair_in_session(member_id, package_id)

    async def pair_in_session(
        self, member_id: int, package_id: int
    ) -> ServiceResult:
        """
        Pair member's legs inside the caller's unit of work.

        The node is read fresh and written back under its version check, so
        two concurrent pairings cannot both consume the same volume.

        Returns:
            ServiceResult with PairingResult as data
        """
        if not is_valid_id(member_id) or not is_valid_id(package_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid ID")

        node = await self.store.get_tree_node_for_update(member_id)
        if node is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not in tree")

        package = await self.store.get_package(package_id)
        if package is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Package not found")

        poolable = node.poolable_volume
        if poolable <= 0:
            return ServiceResult.ok(
                PairingResult(commission=Decimal("0"), paired_volume=Decimal("0"))
            )

        commission = calculate_commission(poolable, package.commission_rate)

        node.left_leg_volume = node.left_leg_volume - poolable
        node.right_leg_volume = node.right_leg_volume - poolable
        await self.store.save_tree_node(node)

        self.logger.info(
            "Legs paired",
            extra={
                "member_id": member_id,
                "package_id": package_id,
                "paired_volume": str(poolable),
                "commission": str(commission),
                "left_remaining": str(node.left_leg_volume),
                "right_remaining": str(node.right_leg_volume),
            },
        )

        return ServiceResult.ok(
            PairingResult(commission=commission, paired_volume=poolable)
        )
