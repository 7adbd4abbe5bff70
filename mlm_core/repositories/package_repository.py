"""
Package repository.

Data access layer for Package model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.package import Package
from mlm_core.repositories.base import BaseRepository


class PackageRepository(BaseRepository[Package]):
    """Package repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize package repository."""
        super().__init__(Package, session)

    async def get_active_packages(self) -> list[Package]:
        """
        Get packages available for purchase.

        Returns:
            Active packages ordered by ID
        """
        return await self.find_by(is_active=True)

    async def get_by_name(self, name: str) -> Package | None:
        """Get package by unique name."""
        return await self.get_by(name=name)
