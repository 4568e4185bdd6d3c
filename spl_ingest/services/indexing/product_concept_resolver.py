"""Product concept indexing: abstract and application concepts."""

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import ProductConcept, ProductConceptEquivalence
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import ConceptKind, ReferenceKind
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.base_resolver import BaseResolver
from spl_ingest.utils.xml_helpers import attr, spl_element, spl_elements


class ProductConceptResolver(BaseResolver):
    """Creates product concepts and their application-to-abstract equivalences.

    An application concept may reference an abstract concept from a document
    that has not been ingested yet. The miss is recorded in the pending
    reference ledger and resolved when the abstract concept arrives.
    """

    async def resolve(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Index every subject/manufacturedProduct/manufacturedProduct.

        Args:
            section_el: Product concept indexing section
            ctx: Context with section set

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        path = (c.SUBJECT, c.MANUFACTURED_PRODUCT, c.MANUFACTURED_PRODUCT)
        for product_el in spl_elements(section_el, *path):
            await self._guard(
                result, ctx, "product concept",
                lambda product_el=product_el: self._resolve_concept(product_el, ctx),
            )
        return result

    async def _resolve_concept(self, product_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        result = ParseResult()
        code_el = spl_element(product_el, c.CODE)
        concept_code = attr(code_el, "code")
        if concept_code is None:
            self._warn(result, ctx, "Product concept without a code skipped")
            return result

        equivalent_el = spl_element(product_el, c.AS_EQUIVALENT_ENTITY)
        concept_kind = ConceptKind.APPLICATION if equivalent_el is not None else ConceptKind.ABSTRACT
        form_el = spl_element(product_el, c.FORM_CODE) if concept_kind is ConceptKind.ABSTRACT else None

        concept, created = await ctx.store.get_or_create(
            ProductConcept,
            defaults={
                "section_id": ctx.section.id,
                "concept_system": attr(code_el, "codeSystem"),
                "concept_kind": concept_kind.value,
                "form_code": attr(form_el, "code"),
                "form_code_system": attr(form_el, "codeSystem"),
                "form_display_name": attr(form_el, "displayName"),
            },
            concept_code=concept_code,
        )
        if created:
            result.record_created(ProductConcept.__name__)
            if ctx.options.resolve_pending_on_insert:
                result.merge_from(await self.pending.resolve_for_product_concept(ctx.store, concept))

        if concept_kind is ConceptKind.APPLICATION:
            result.merge_from(await self._link_abstract(equivalent_el, concept, ctx))

        return result

    async def _link_abstract(
        self,
        equivalent_el: etree._Element,
        concept: ProductConcept,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        equivalence_code_el = spl_element(equivalent_el, c.CODE)
        abstract_code = attr(spl_element(equivalent_el, c.DEFINING_MATERIAL_KIND, c.CODE), "code")
        if abstract_code is None:
            self._warn(result, ctx, f"Application concept {concept.concept_code} has no abstract concept code")
            return result

        abstract = await ctx.store.find(
            ProductConcept,
            concept_code=abstract_code,
            concept_kind=ConceptKind.ABSTRACT.value,
        )
        if abstract is None:
            self._warn(
                result, ctx,
                f"Application concept {concept.concept_code} references abstract concept "
                f"{abstract_code} that is not ingested yet",
            )
            result.merge_from(await self.pending.record(
                ctx.store,
                ReferenceKind.PRODUCT_CONCEPT_EQUIVALENCE,
                source_id=concept.id,
                target_key=abstract_code,
                payload_code=attr(equivalence_code_el, "code"),
                payload_system=attr(equivalence_code_el, "codeSystem"),
            ))
            return result

        _, created = await ctx.store.get_or_create(
            ProductConceptEquivalence,
            defaults={
                "equivalence_code": attr(equivalence_code_el, "code"),
                "equivalence_system": attr(equivalence_code_el, "codeSystem"),
            },
            application_concept_id=concept.id,
            abstract_concept_id=abstract.id,
        )
        if created:
            result.record_created(ProductConceptEquivalence.__name__)
        return result
