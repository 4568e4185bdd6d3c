"""Idempotent persistence façade used by every ingestion service."""

from collections import Counter
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest.database.models import (
    ContentBlock,
    IdentifiedSubstance,
    MediaAsset,
    PendingReference,
    PharmacologicClass,
)
from spl_ingest.repositories.base_repository import BaseRepository
from spl_ingest.repositories.content_repository import ContentBlockRepository
from spl_ingest.repositories.indexing_repository import (
    IdentifiedSubstanceRepository,
    PharmacologicClassRepository,
)
from spl_ingest.repositories.media_repository import MediaAssetRepository
from spl_ingest.repositories.pending_reference_repository import PendingReferenceRepository
from spl_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)

ModelType = TypeVar("ModelType")

_SPECIALIZED_REPOSITORIES: Dict[type, Type[BaseRepository]] = {
    ContentBlock: ContentBlockRepository,
    IdentifiedSubstance: IdentifiedSubstanceRepository,
    MediaAsset: MediaAssetRepository,
    PendingReference: PendingReferenceRepository,
    PharmacologicClass: PharmacologicClassRepository,
}


class NaturalKeyStore:
    """Find-by-natural-key or insert, for every ingestion entity.

    One store wraps one session. It keeps a per-entity count of rows it
    inserted, which lets callers tell a first pass from a repeated one.

    Attributes:
        session: SQLAlchemy async session
        created: Rows inserted through this store, keyed by model name
    """

    def __init__(self, session: AsyncSession):
        """Initialize the store.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session
        self.created: Counter = Counter()
        self._repositories: Dict[type, BaseRepository] = {}

    def repository(self, model: Type[ModelType]) -> BaseRepository[ModelType]:
        """Repository for a model, created on first use."""
        repo = self._repositories.get(model)
        if repo is None:
            repo_cls = _SPECIALIZED_REPOSITORIES.get(model)
            repo = repo_cls(self.session) if repo_cls else BaseRepository(self.session, model)
            self._repositories[model] = repo
        return repo

    @property
    def content_blocks(self) -> ContentBlockRepository:
        return self.repository(ContentBlock)

    @property
    def media_assets(self) -> MediaAssetRepository:
        return self.repository(MediaAsset)

    @property
    def substances(self) -> IdentifiedSubstanceRepository:
        return self.repository(IdentifiedSubstance)

    @property
    def classes(self) -> PharmacologicClassRepository:
        return self.repository(PharmacologicClass)

    @property
    def pending_references(self) -> PendingReferenceRepository:
        return self.repository(PendingReference)

    async def find(self, model: Type[ModelType], **key: Any) -> Optional[ModelType]:
        """Find a record by natural key."""
        return await self.repository(model).find_by_natural_key(**key)

    async def insert(self, model: Type[ModelType], **fields: Any) -> ModelType:
        """Insert a record unconditionally."""
        instance = await self.repository(model).insert(**fields)
        self.created[model.__name__] += 1
        return instance

    async def get_or_create(
        self,
        model: Type[ModelType],
        defaults: Optional[Dict[str, Any]] = None,
        **key: Any,
    ) -> Tuple[ModelType, bool]:
        """Return the record for a natural key, inserting it on a miss.

        Args:
            model: Entity model class
            defaults: Non-key fields used only when inserting
            **key: Natural key columns and values

        Returns:
            Tuple of (record, created)
        """
        instance, created = await self.repository(model).get_or_create(defaults=defaults, **key)
        if created:
            self.created[model.__name__] += 1
            LOGGER.debug(f"Created {model.__name__}", extra={"record_id": str(instance.id)})
        return instance, created

    async def count(self, model: type, **filters: Any) -> int:
        return await self.repository(model).count(filters or None)

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
