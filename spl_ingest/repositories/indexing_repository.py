"""Repositories for substances and the pharmacologic class graph."""

from typing import Optional, Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest.database.models import (
    IdentifiedSubstance,
    PharmacologicClass,
    PharmacologicClassHierarchy,
)
from spl_ingest.repositories.base_repository import BaseRepository


class IdentifiedSubstanceRepository(BaseRepository[IdentifiedSubstance]):
    """Substance lookups across sections and documents."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, IdentifiedSubstance)

    async def find_by_identifier(self, value: str, system: Optional[str]) -> Optional[IdentifiedSubstance]:
        """Any substance carrying the identifier, regardless of owning section."""
        query = (
            select(IdentifiedSubstance)
            .where(
                IdentifiedSubstance.identifier_value == value,
                IdentifiedSubstance.identifier_system == system,
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class PharmacologicClassRepository(BaseRepository[PharmacologicClass]):
    """Class lookups and hierarchy traversal."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PharmacologicClass)

    async def ancestor_ids(self, class_id: UUID) -> Set[UUID]:
        """All classes reachable from class_id by following parent edges.

        Args:
            class_id: Starting class (not included unless it is on a cycle)

        Returns:
            Set of ancestor class ids
        """
        ancestors: Set[UUID] = set()
        frontier = {class_id}
        while frontier:
            query = select(PharmacologicClassHierarchy.parent_class_id).where(
                PharmacologicClassHierarchy.child_class_id.in_(frontier)
            )
            result = await self.session.execute(query)
            parents = set(result.scalars().all()) - ancestors
            ancestors |= parents
            frontier = parents
        return ancestors

    async def would_create_cycle(self, child_class_id: UUID, parent_class_id: UUID) -> bool:
        """True if adding child -> parent closes a loop in the hierarchy."""
        if child_class_id == parent_class_id:
            return True
        return child_class_id in await self.ancestor_ids(parent_class_id)
