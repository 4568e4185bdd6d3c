"""Database module for SQLAlchemy models."""

from spl_ingest.database.base import Base
from spl_ingest.database.models import (
    BillingUnitIndex,
    ClinicalTrialLink,
    ContentBlock,
    ContributingFactor,
    Document,
    HighlightSpan,
    IdentifiedSubstance,
    InteractionConsequence,
    InteractionIssue,
    ListItem,
    ListRecord,
    MediaAsset,
    MediaLink,
    PendingReference,
    PharmacologicClass,
    PharmacologicClassHierarchy,
    PharmacologicClassLink,
    PharmacologicClassName,
    ProductConcept,
    ProductConceptEquivalence,
    Section,
    SectionHierarchy,
    StructuredBody,
    TableCell,
    TableColumn,
    TableRecord,
    TableRow,
)

__all__ = [
    "Base",
    "BillingUnitIndex",
    "ClinicalTrialLink",
    "ContentBlock",
    "ContributingFactor",
    "Document",
    "HighlightSpan",
    "IdentifiedSubstance",
    "InteractionConsequence",
    "InteractionIssue",
    "ListItem",
    "ListRecord",
    "MediaAsset",
    "MediaLink",
    "PendingReference",
    "PharmacologicClass",
    "PharmacologicClassHierarchy",
    "PharmacologicClassLink",
    "PharmacologicClassName",
    "ProductConcept",
    "ProductConceptEquivalence",
    "Section",
    "SectionHierarchy",
    "StructuredBody",
    "TableCell",
    "TableColumn",
    "TableRecord",
    "TableRow",
]
