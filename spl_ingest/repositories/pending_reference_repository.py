"""Repository for the pending forward-reference ledger."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest.database.models import PendingReference
from spl_ingest.repositories.base_repository import BaseRepository
from spl_ingest.schemas.enums import ReferenceKind


class PendingReferenceRepository(BaseRepository[PendingReference]):
    """Open and resolved forward references."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PendingReference)

    async def list_open(
        self,
        kind: Optional[ReferenceKind] = None,
        target_key: Optional[str] = None,
    ) -> List[PendingReference]:
        """Unresolved references, optionally narrowed to a kind and target.

        Args:
            kind: Reference kind filter
            target_key: Target natural key filter

        Returns:
            Open references, oldest first
        """
        query = select(PendingReference).where(PendingReference.resolved_at.is_(None))
        if kind is not None:
            query = query.where(PendingReference.reference_kind == kind.value)
        if target_key is not None:
            query = query.where(PendingReference.target_key == target_key)
        result = await self.session.execute(query.order_by(PendingReference.created_at))
        return list(result.scalars().all())

    async def mark_resolved(self, reference: PendingReference) -> None:
        reference.resolved_at = datetime.now(timezone.utc)
        await self.session.flush()
