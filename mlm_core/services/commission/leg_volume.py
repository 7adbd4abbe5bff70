"""
Leg volume accumulator.

Attributes a downline purchase to the correct leg of one ancestor.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import Leg
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.genealogy.traversal import find_leg
from mlm_core.utils.db_decorators import retry_on_stale_data
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id, validate_positive_amount


class LegVolumeAccumulator(BaseService):
    """Increments an ancestor's left or right leg volume."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize accumulator.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    @service_boundary
    @retry_on_stale_data
    async def apply_purchase(
        self,
        ancestor_id: int,
        amount: Decimal,
        purchasing_member_id: int,
    ) -> ServiceResult:
        """
        Credit purchase amount to the ancestor leg holding the purchaser.

        Runs as its own unit of work: the ancestor node is re-read fresh on
        every attempt and the increment is committed under its version
        check.

        Args:
            ancestor_id: Member whose leg volume to increase
            amount: Purchase amount (positive)
            purchasing_member_id: Member who made the purchase

        Returns:
            ServiceResult with the credited Leg as data
        """
        return await self.apply_in_session(ancestor_id, amount, purchasing_member_id)

    async def apply_in_session(
        self,
        ancestor_id: int,
        amount: Decimal,
        purchasing_member_id: int,
    ) -> ServiceResult:
        """
        Credit purchase amount inside the caller's unit of work.

        Flushes but does not commit.

        Returns:
            ServiceResult with the credited Leg as data
        """
        if not is_valid_id(ancestor_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")
        if not is_valid_id(purchasing_member_id):
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Invalid purchase member ID"
            )

        volume = validate_positive_amount(amount)
        if volume is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Purchase amount must be positive"
            )

        ancestor_node = await self.store.get_tree_node_for_update(ancestor_id)
        if ancestor_node is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not in tree")

        if not await self.store.tree_nodes.is_placed(purchasing_member_id):
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND, "Purchase member not in tree"
            )

        leg = await find_leg(
            self.store.tree_nodes,
            ancestor_node.left_child_id,
            ancestor_node.right_child_id,
            purchasing_member_id,
        )
        if leg is None:
            return ServiceResult.fail(
                ErrorCode.NOT_IN_DOWNLINE, "Purchase member not in downline"
            )

        if leg == Leg.LEFT:
            ancestor_node.left_leg_volume = ancestor_node.left_leg_volume + volume
        else:
            ancestor_node.right_leg_volume = ancestor_node.right_leg_volume + volume

        await self.store.save_tree_node(ancestor_node)

        self.logger.debug(
            "Leg volume updated",
            extra={
                "member_id": ancestor_id,
                "purchase_member_id": purchasing_member_id,
                "leg": leg.value,
                "amount": str(volume),
            },
        )

        return ServiceResult.ok(leg)
