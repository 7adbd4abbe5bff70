"""
Genealogy query service.

Read-only views of the placement tree: downline, upline and a tree view
with member details.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.member import Member
from mlm_core.models.tree_node import TreeNode
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.genealogy.traversal import collect_downline, iter_upline
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id


@dataclass(frozen=True)
class MemberSummary:
    """Public member fields shown in tree views."""

    id: int
    username: str
    status: str
    active_package_id: int | None


@dataclass(frozen=True)
class TreeNodeView:
    """Tree node with its member's public fields."""

    member_id: int
    sponsor_id: int | None
    left_child_id: int | None
    right_child_id: int | None
    position: str
    depth: int
    left_leg_volume: Decimal
    right_leg_volume: Decimal
    member: MemberSummary | None

    @classmethod
    def build(cls, node: TreeNode, member: Member | None) -> "TreeNodeView":
        return cls(
            member_id=node.member_id,
            sponsor_id=node.sponsor_id,
            left_child_id=node.left_child_id,
            right_child_id=node.right_child_id,
            position=node.position,
            depth=node.depth,
            left_leg_volume=node.left_leg_volume,
            right_leg_volume=node.right_leg_volume,
            member=_summarize(member),
        )


@dataclass(frozen=True)
class UplineEntry:
    """Ancestor with its placement."""

    id: int
    username: str
    status: str
    active_package_id: int | None
    position: str
    depth: int


def _summarize(member: Member | None) -> MemberSummary | None:
    if member is None:
        return None
    return MemberSummary(
        id=member.id,
        username=member.username,
        status=member.status,
        active_package_id=member.active_package_id,
    )


class GenealogyService(BaseService):
    """Genealogy tree queries."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize genealogy service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    async def _check_placed(self, member_id: int) -> ServiceResult | None:
        """Reject malformed, unknown or unplaced members."""
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")
        if await self.store.get_member(member_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")
        if not await self.store.tree_nodes.is_placed(member_id):
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not in tree")
        return None

    async def _views(self, entries: list[tuple[int, int]]) -> list[TreeNodeView]:
        """Load nodes and members for BFS entries, keeping BFS order."""
        member_ids = [member_id for member_id, _ in entries]
        nodes = await self.store.tree_nodes.get_nodes(member_ids)
        members = await self.store.members.get_many(member_ids)
        return [
            TreeNodeView.build(nodes[member_id], members.get(member_id))
            for member_id in member_ids
            if member_id in nodes
        ]

    @service_boundary
    async def get_downline(
        self, member_id: int, max_depth: int | None = None
    ) -> ServiceResult:
        """
        Get descendants in breadth-first order.

        Args:
            member_id: Subtree root (not included)
            max_depth: Optional limit on levels below member_id

        Returns:
            ServiceResult with list[TreeNodeView]
        """
        failure = await self._check_placed(member_id)
        if failure is not None:
            return failure

        entries = await collect_downline(
            self.store.tree_nodes, member_id, max_depth=max_depth
        )
        return ServiceResult.ok(await self._views(entries))

    @service_boundary
    async def get_upline(self, member_id: int) -> ServiceResult:
        """
        Get ancestors from tree parent to root.

        Args:
            member_id: Member ID

        Returns:
            ServiceResult with list[UplineEntry]
        """
        failure = await self._check_placed(member_id)
        if failure is not None:
            return failure

        upline: list[UplineEntry] = []
        async for ancestor_id in iter_upline(self.store.tree_nodes, member_id):
            sponsor = await self.store.get_member(ancestor_id)
            if sponsor is None:
                break
            node = await self.store.get_tree_node(ancestor_id)
            if node is None:
                break
            upline.append(
                UplineEntry(
                    id=sponsor.id,
                    username=sponsor.username,
                    status=sponsor.status,
                    active_package_id=sponsor.active_package_id,
                    position=node.position,
                    depth=node.depth,
                )
            )

        return ServiceResult.ok(upline)

    @service_boundary
    async def get_tree(
        self, member_id: int, max_depth: int | None = None
    ) -> ServiceResult:
        """
        Get subtree including its root, with member details.

        Args:
            member_id: Subtree root
            max_depth: Optional limit on levels below member_id

        Returns:
            ServiceResult with list[TreeNodeView], root first
        """
        failure = await self._check_placed(member_id)
        if failure is not None:
            return failure

        entries = await collect_downline(
            self.store.tree_nodes, member_id, max_depth=max_depth, include_self=True
        )
        return ServiceResult.ok(await self._views(entries))
