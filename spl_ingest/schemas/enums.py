"""Closed vocabularies stored in string columns."""

from enum import Enum


class BlockKind(str, Enum):
    """Kind of a content block within a section's text."""

    PARAGRAPH = "Paragraph"
    LIST = "List"
    TABLE = "Table"
    EXCERPT = "Excerpt"
    HIGHLIGHT = "Highlight"
    RENDERED_MEDIA = "RenderMultimedia"
    GENERIC = "Generic"

    @property
    def is_container(self) -> bool:
        """Lists and tables own their children through dedicated records."""
        return self in (BlockKind.LIST, BlockKind.TABLE)


class RowGroup(str, Enum):
    HEADER = "Header"
    BODY = "Body"
    FOOTER = "Footer"


class CellKind(str, Enum):
    HEADER = "Header"
    DATA = "Data"


class SubjectKind(str, Enum):
    ACTIVE_MOIETY = "ActiveMoiety"
    PHARMACOLOGIC_CLASS = "PharmacologicClass"


class ConceptKind(str, Enum):
    ABSTRACT = "Abstract"
    APPLICATION = "Application"


class NameUse(str, Enum):
    PREFERRED = "L"
    ALTERNATE = "A"


class ReferenceKind(str, Enum):
    """Forward references kept in the pending reference ledger."""

    PRODUCT_CONCEPT_EQUIVALENCE = "ProductConceptEquivalence"
    CONTRIBUTING_FACTOR = "ContributingFactor"
