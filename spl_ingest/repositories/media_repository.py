"""Repository for media assets."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest.database.models import MediaAsset
from spl_ingest.repositories.base_repository import BaseRepository


class MediaAssetRepository(BaseRepository[MediaAsset]):
    """Media asset lookups scoped to a document."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, MediaAsset)

    async def find_in_document(self, document_id: UUID, media_token: str) -> Optional[MediaAsset]:
        """Resolve a media token against every section of a document.

        Args:
            document_id: Document scope
            media_token: Value of the asset's ID attribute

        Returns:
            The asset if one is registered, None otherwise
        """
        query = (
            select(MediaAsset)
            .where(MediaAsset.document_id == document_id, MediaAsset.media_token == media_token)
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
