"""Repository layer."""

from spl_ingest.repositories.base_repository import BaseRepository
from spl_ingest.repositories.natural_key_store import NaturalKeyStore

__all__ = ["BaseRepository", "NaturalKeyStore"]
