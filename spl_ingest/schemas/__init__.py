"""Value types shared across the ingestion services."""

from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import (
    BlockKind,
    CellKind,
    ConceptKind,
    NameUse,
    ReferenceKind,
    RowGroup,
    SubjectKind,
)
from spl_ingest.schemas.parse_result import ParseResult

__all__ = [
    "BlockKind",
    "CellKind",
    "ConceptKind",
    "IngestionContext",
    "NameUse",
    "ParseResult",
    "ReferenceKind",
    "RowGroup",
    "SubjectKind",
]
