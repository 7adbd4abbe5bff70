"""
Tree placement engine.

Places members into the binary genealogy tree. Owns every write to the
structural fields of TreeNode (left_child_id / right_child_id).
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import Leg, TreePosition
from mlm_core.models.tree_node import TreeNode
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.genealogy.traversal import OpenSlot, find_open_slot
from mlm_core.utils.db_decorators import run_in_transaction
from mlm_core.utils.exceptions import PLACEMENT_CONFLICTS, ErrorCode
from mlm_core.utils.validation import is_valid_id, parse_leg


class TreePlacementEngine(BaseService):
    """
    Binary tree placement with left-fill spillover.

    Without an explicit position the sponsor's own slots are tried first
    (left, then right); when both are taken the same breadth-first search
    continues through the sponsor's subtree. The resulting tree parent is
    stored in TreeNode.sponsor_id and may differ from the recruiter.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize placement engine.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    @service_boundary
    async def place(
        self,
        member_id: int,
        sponsor_id: int,
        explicit_position: Leg | str | None = None,
    ) -> ServiceResult:
        """
        Place member under sponsor and commit.

        A concurrent registration that claims the same slot makes the flush
        fail (parent version or unique slot constraint); the placement is
        then recomputed from fresh tree state.

        Args:
            member_id: Member to place
            sponsor_id: Sponsor to place under
            explicit_position: Optional "left" / "right" slot on the sponsor

        Returns:
            ServiceResult with the created TreeNode as data
        """
        return await run_in_transaction(
            self.session,
            lambda: self.place_in_session(member_id, sponsor_id, explicit_position),
            operation="tree_placement",
            retry_on=PLACEMENT_CONFLICTS,
        )

    @service_boundary
    async def place_root(self, member_id: int) -> ServiceResult:
        """
        Create a root node for a member without a sponsor and commit.

        Args:
            member_id: Member to place

        Returns:
            ServiceResult with the created TreeNode as data
        """
        return await run_in_transaction(
            self.session,
            lambda: self.place_root_in_session(member_id),
            operation="tree_root_placement",
            retry_on=PLACEMENT_CONFLICTS,
        )

    async def place_in_session(
        self,
        member_id: int,
        sponsor_id: int,
        explicit_position: Leg | str | None = None,
    ) -> ServiceResult:
        """
        Place member under sponsor inside the caller's unit of work.

        Flushes but does not commit.

        Args:
            member_id: Member to place
            sponsor_id: Sponsor to place under
            explicit_position: Optional "left" / "right" slot on the sponsor

        Returns:
            ServiceResult with the created TreeNode as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")
        if not is_valid_id(sponsor_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid sponsor ID")

        leg: Leg | None = None
        if explicit_position is not None:
            leg = parse_leg(explicit_position)
            if leg is None:
                return ServiceResult.fail(
                    ErrorCode.INVALID_INPUT,
                    "Position must be 'left' or 'right'",
                )

        precheck = await self._check_member(member_id)
        if precheck is not None:
            return precheck

        sponsor = await self.store.get_member(sponsor_id)
        if sponsor is None:
            return ServiceResult.fail(ErrorCode.SPONSOR_NOT_FOUND, "Sponsor not found")

        sponsor_node = await self.store.get_tree_node_for_update(sponsor_id)
        if sponsor_node is None:
            return ServiceResult.fail(
                ErrorCode.SPONSOR_NOT_PLACED, "Sponsor not in tree"
            )

        if leg is not None:
            if sponsor_node.child_id(leg) is not None:
                return ServiceResult.fail(
                    ErrorCode.POSITION_OCCUPIED,
                    f"{leg.value.capitalize()} position already occupied",
                )
            parent = sponsor_node
        else:
            claimed = await self._claim_open_slot(sponsor_id)
            if claimed is None:
                return ServiceResult.fail(
                    ErrorCode.NO_POSITION_AVAILABLE,
                    "Could not find available position",
                )
            parent, leg = claimed

        node = await self._attach(member_id, parent, leg)

        self.logger.info(
            "Member placed in tree",
            extra={
                "member_id": member_id,
                "sponsor_id": sponsor_id,
                "tree_parent_id": parent.member_id,
                "position": leg.value,
                "depth": node.depth,
                "spillover": parent.member_id != sponsor_id,
            },
        )

        return ServiceResult.ok(node)

    async def place_root_in_session(self, member_id: int) -> ServiceResult:
        """
        Create a root node inside the caller's unit of work.

        Args:
            member_id: Member to place

        Returns:
            ServiceResult with the created TreeNode as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        precheck = await self._check_member(member_id)
        if precheck is not None:
            return precheck

        node = TreeNode(
            member_id=member_id,
            sponsor_id=None,
            position=TreePosition.ROOT.value,
            depth=0,
            left_leg_volume=Decimal("0"),
            right_leg_volume=Decimal("0"),
        )
        await self.store.save_tree_node(node)

        self.logger.info("Root node created", extra={"member_id": member_id})

        return ServiceResult.ok(node)

    async def _check_member(self, member_id: int) -> ServiceResult | None:
        """Reject unknown or already placed members."""
        member = await self.store.get_member(member_id)
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        if await self.store.tree_nodes.is_placed(member_id):
            return ServiceResult.fail(
                ErrorCode.ALREADY_PLACED, "Member already in tree"
            )

        return None

    async def _claim_open_slot(
        self, sponsor_id: int
    ) -> tuple[TreeNode, Leg] | None:
        """
        Find open slot and load its parent for update.

        If the slot was filled between the search and the locked read, the
        search runs again against the now-current structure.
        """
        while True:
            slot: OpenSlot | None = await find_open_slot(
                self.store.tree_nodes, sponsor_id
            )
            if slot is None:
                return None

            parent = await self.store.get_tree_node_for_update(slot.parent_id)
            if parent is None:
                return None
            if parent.child_id(slot.leg) is None:
                return parent, slot.leg

            self.logger.debug(
                "Slot claimed concurrently, searching again",
                extra={"parent_id": slot.parent_id, "position": slot.leg.value},
            )

    async def _attach(
        self, member_id: int, parent: TreeNode, leg: Leg
    ) -> TreeNode:
        """Create node under parent and link parent's child slot."""
        node = TreeNode(
            member_id=member_id,
            sponsor_id=parent.member_id,
            position=leg.value,
            depth=parent.depth + 1,
            left_leg_volume=Decimal("0"),
            right_leg_volume=Decimal("0"),
        )
        await self.store.save_tree_node(node)

        if leg == Leg.LEFT:
            parent.left_child_id = member_id
        else:
            parent.right_child_id = member_id
        await self.store.save_tree_node(parent)

        return node
