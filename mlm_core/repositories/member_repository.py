"""
Member repository.

Data access layer for Member model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.member import Member
from mlm_core.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Member repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize member repository."""
        super().__init__(Member, session)

    async def get_fresh(self, member_id: int) -> Member | None:
        """
        Get member reloaded from the database.

        Args:
            member_id: Member ID

        Returns:
            Member or None
        """
        stmt = (
            select(Member)
            .where(Member.id == member_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Member | None:
        """
        Get member by username.

        Args:
            username: Login name

        Returns:
            Member or None
        """
        return await self.get_by(username=username)

    async def get_active_package_id(self, member_id: int) -> int | None:
        """
        Get member's active package ID without loading the entity.

        Args:
            member_id: Member ID

        Returns:
            Package ID or None
        """
        stmt = select(Member.active_package_id).where(Member.id == member_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, member_ids: list[int]) -> dict[int, Member]:
        """
        Load several members in one query.

        Args:
            member_ids: Member IDs

        Returns:
            Mapping member ID -> Member
        """
        if not member_ids:
            return {}
        stmt = (
            select(Member)
            .where(Member.id.in_(member_ids))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {member.id: member for member in result.scalars().all()}
