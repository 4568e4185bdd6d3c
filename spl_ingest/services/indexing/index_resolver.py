"""Entry point for cross-document index resolution of one section."""

from typing import Optional

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.ancillary_link_resolver import AncillaryLinkResolver
from spl_ingest.services.indexing.interaction_resolver import InteractionResolver
from spl_ingest.services.indexing.pending_references import PendingReferenceService
from spl_ingest.services.indexing.pharmacologic_class_resolver import PharmacologicClassResolver
from spl_ingest.services.indexing.product_concept_resolver import ProductConceptResolver
from spl_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class IndexResolver:
    """Runs the index resolvers that apply to a section.

    Substance and class indexing and clinical trial links apply to every
    section. Billing units and product concepts apply only to the indexing
    section (48779-3) of their document type, interactions to every section
    of an interaction indexing document.

    Attributes:
        pending: Pending reference ledger shared by the resolvers
    """

    def __init__(self, pending: Optional[PendingReferenceService] = None):
        self.pending = pending or PendingReferenceService()
        self.class_resolver = PharmacologicClassResolver(self.pending)
        self.concept_resolver = ProductConceptResolver(self.pending)
        self.interaction_resolver = InteractionResolver(self.pending)
        self.ancillary_resolver = AncillaryLinkResolver(self.pending)

    async def resolve(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Resolve the indexing content of one section.

        Args:
            section_el: Section element
            ctx: Context with document and section set

        Returns:
            Aggregated ParseResult; an error result when context is missing
        """
        if ctx.section is None or ctx.document is None:
            return ParseResult.failure("No current section or document available for index resolution")

        ctx.progress("Processing indexing elements...")
        result = ParseResult()

        result.merge_from(await self.class_resolver.resolve(section_el, ctx))

        indexing_section = ctx.section_code == c.INDEXING_SECTION_CODE
        if ctx.document_code == c.BILLING_UNIT_DOCUMENT_CODE and indexing_section:
            result.merge_from(await self.ancillary_resolver.resolve_billing_units(section_el, ctx))

        if ctx.document_code == c.PRODUCT_CONCEPT_DOCUMENT_CODE and indexing_section:
            result.merge_from(await self.concept_resolver.resolve(section_el, ctx))

        if ctx.document_code == c.INTERACTION_DOCUMENT_CODE:
            result.merge_from(await self.interaction_resolver.resolve(section_el, ctx))

        result.merge_from(await self.ancillary_resolver.resolve_clinical_trials(section_el, ctx))

        if result.total_created:
            LOGGER.info(
                "Indexing elements created",
                extra=ctx.log_extra(records_created=result.total_created),
            )
        ctx.progress(f"Processed {result.total_created} indexing records")
        return result

    async def resolve_pending_references(self, ctx: IngestionContext) -> ParseResult:
        """Sweep the pending reference ledger."""
        return await self.pending.resolve_all(ctx.store)
