"""
Tree node repository.

Data access layer for TreeNode model.

Traversal helpers read plain columns rather than entities so every hop of
a tree walk sees committed structure, not a stale identity-map copy.
"""

from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.tree_node import TreeNode
from mlm_core.repositories.base import BaseRepository


class NodeLinks(NamedTuple):
    """Structural columns of one tree node."""

    member_id: int
    sponsor_id: int | None
    left_child_id: int | None
    right_child_id: int | None
    depth: int


class TreeNodeRepository(BaseRepository[TreeNode]):
    """Tree node repository with traversal queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize tree node repository."""
        super().__init__(TreeNode, session)

    async def get_by_member_id(self, member_id: int) -> TreeNode | None:
        """
        Get node of a member.

        Args:
            member_id: Member ID

        Returns:
            TreeNode or None if member not placed
        """
        return await self.get_fresh_by(member_id=member_id)

    async def get_by_member_id_for_update(
        self, member_id: int
    ) -> TreeNode | None:
        """
        Get node of a member fresh for a volume or structure change.

        Args:
            member_id: Member ID

        Returns:
            TreeNode or None
        """
        return await self.get_for_update(member_id=member_id)

    async def get_links(self, member_id: int) -> NodeLinks | None:
        """
        Read structural columns of a member's node.

        Args:
            member_id: Member ID

        Returns:
            NodeLinks or None if member not placed
        """
        stmt = select(
            TreeNode.member_id,
            TreeNode.sponsor_id,
            TreeNode.left_child_id,
            TreeNode.right_child_id,
            TreeNode.depth,
        ).where(TreeNode.member_id == member_id)
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return NodeLinks(*row)

    async def get_parent_id(self, member_id: int) -> int | None:
        """
        Get tree parent of a member.

        Args:
            member_id: Member ID

        Returns:
            Parent member ID or None for a root / unplaced member
        """
        stmt = select(TreeNode.sponsor_id).where(TreeNode.member_id == member_id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def is_placed(self, member_id: int) -> bool:
        """Check whether member already has a node."""
        return await self.exists(member_id=member_id)

    async def get_nodes(self, member_ids: list[int]) -> dict[int, TreeNode]:
        """
        Load several nodes in one query.

        Args:
            member_ids: Member IDs

        Returns:
            Mapping member ID -> TreeNode
        """
        if not member_ids:
            return {}
        stmt = (
            select(TreeNode)
            .where(TreeNode.member_id.in_(member_ids))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {node.member_id: node for node in result.scalars().all()}
