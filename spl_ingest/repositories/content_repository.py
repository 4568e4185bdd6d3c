"""Repository for content blocks and their ordered children."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest.database.models import ContentBlock
from spl_ingest.repositories.base_repository import BaseRepository


class ContentBlockRepository(BaseRepository[ContentBlock]):
    """Content block access with ordered tree reads."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContentBlock)

    async def children(
        self,
        section_id: UUID,
        parent_block_id: Optional[UUID],
    ) -> List[ContentBlock]:
        """Blocks directly under a parent, in sequence order."""
        query = (
            select(ContentBlock)
            .where(
                ContentBlock.section_id == section_id,
                ContentBlock.parent_block_id == parent_block_id,
            )
            .order_by(ContentBlock.sequence_number, ContentBlock.created_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def load_tree(
        self,
        section_id: UUID,
        parent_block_id: Optional[UUID] = None,
    ) -> List[Dict[str, Any]]:
        """Read a section's content tree as nested dictionaries.

        Args:
            section_id: Owning section
            parent_block_id: Subtree root, None for the whole section

        Returns:
            List of {"id", "block_type", "sequence_number", "content_text",
            "children"} dictionaries
        """
        tree = []
        for block in await self.children(section_id, parent_block_id):
            tree.append({
                "id": block.id,
                "block_type": block.block_type,
                "sequence_number": block.sequence_number,
                "content_text": block.content_text,
                "children": await self.load_tree(section_id, block.id),
            })
        return tree
