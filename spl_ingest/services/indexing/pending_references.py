"""Ledger of forward references whose target has not been ingested yet.

Application product concepts can name an abstract concept that arrives in a
later document, and interaction issues can name a contributing substance that
is indexed elsewhere. Such references are recorded here and resolved as soon
as the target is inserted, or by an explicit sweep.
"""

from typing import Optional
from uuid import UUID

from spl_ingest.database.models import (
    ContributingFactor,
    IdentifiedSubstance,
    PendingReference,
    ProductConcept,
    ProductConceptEquivalence,
)
from spl_ingest.repositories.natural_key_store import NaturalKeyStore
from spl_ingest.schemas.enums import ConceptKind, ReferenceKind
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class PendingReferenceService:
    """Records and resolves pending references."""

    async def record(
        self,
        store: NaturalKeyStore,
        kind: ReferenceKind,
        source_id: UUID,
        target_key: str,
        target_system: Optional[str] = None,
        payload_code: Optional[str] = None,
        payload_system: Optional[str] = None,
    ) -> ParseResult:
        """Add a reference to the ledger (idempotent).

        Args:
            store: Natural-key store
            kind: Reference kind
            source_id: Record holding the reference
            target_key: Natural key of the missing target
            target_system: Code system of the target key, if any
            payload_code: Extra code carried onto the resolved link
            payload_system: Code system of payload_code

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        _, created = await store.get_or_create(
            PendingReference,
            defaults={
                "target_system": target_system,
                "payload_code": payload_code,
                "payload_system": payload_system,
            },
            reference_kind=kind.value,
            source_id=source_id,
            target_key=target_key,
        )
        if created:
            result.record_created(PendingReference.__name__)
            LOGGER.info(
                "Recorded pending reference",
                extra={"reference_kind": kind.value, "source_id": str(source_id), "target_key": target_key},
            )
        return result

    async def resolve_for_product_concept(self, store: NaturalKeyStore, concept: ProductConcept) -> ParseResult:
        """Resolve equivalences waiting for a newly inserted abstract concept."""
        result = ParseResult()
        if concept.concept_kind != ConceptKind.ABSTRACT.value:
            return result

        open_refs = await store.pending_references.list_open(
            ReferenceKind.PRODUCT_CONCEPT_EQUIVALENCE, concept.concept_code
        )
        for reference in open_refs:
            result.merge_from(await self._link_equivalence(store, reference, concept))
        return result

    async def resolve_for_substance(self, store: NaturalKeyStore, substance: IdentifiedSubstance) -> ParseResult:
        """Resolve contributing factors waiting for a newly inserted substance."""
        result = ParseResult()
        open_refs = await store.pending_references.list_open(
            ReferenceKind.CONTRIBUTING_FACTOR, substance.identifier_value
        )
        for reference in open_refs:
            if reference.target_system != substance.identifier_system:
                continue
            result.merge_from(await self._link_factor(store, reference, substance))
        return result

    async def resolve_all(self, store: NaturalKeyStore) -> ParseResult:
        """Re-attempt every open reference.

        Args:
            store: Natural-key store

        Returns:
            ParseResult with created link counts
        """
        result = ParseResult()
        resolved = 0

        for reference in await store.pending_references.list_open():
            if reference.reference_kind == ReferenceKind.PRODUCT_CONCEPT_EQUIVALENCE.value:
                concept = await store.find(
                    ProductConcept,
                    concept_code=reference.target_key,
                    concept_kind=ConceptKind.ABSTRACT.value,
                )
                if concept is not None:
                    result.merge_from(await self._link_equivalence(store, reference, concept))
                    resolved += 1
            elif reference.reference_kind == ReferenceKind.CONTRIBUTING_FACTOR.value:
                substance = await store.substances.find_by_identifier(
                    reference.target_key, reference.target_system
                )
                if substance is not None:
                    result.merge_from(await self._link_factor(store, reference, substance))
                    resolved += 1

        LOGGER.info("Pending reference sweep completed", extra={"resolved": resolved})
        return result

    async def _link_equivalence(
        self,
        store: NaturalKeyStore,
        reference: PendingReference,
        abstract_concept: ProductConcept,
    ) -> ParseResult:
        result = ParseResult()
        _, created = await store.get_or_create(
            ProductConceptEquivalence,
            defaults={
                "equivalence_code": reference.payload_code,
                "equivalence_system": reference.payload_system,
            },
            application_concept_id=reference.source_id,
            abstract_concept_id=abstract_concept.id,
        )
        if created:
            result.record_created(ProductConceptEquivalence.__name__)
        await store.pending_references.mark_resolved(reference)
        return result

    async def _link_factor(
        self,
        store: NaturalKeyStore,
        reference: PendingReference,
        substance: IdentifiedSubstance,
    ) -> ParseResult:
        result = ParseResult()
        _, created = await store.get_or_create(
            ContributingFactor,
            issue_id=reference.source_id,
            factor_substance_id=substance.id,
        )
        if created:
            result.record_created(ContributingFactor.__name__)
        await store.pending_references.mark_resolved(reference)
        return result
