"""Clinical trial links and billing unit indexes."""

from typing import Optional

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import BillingUnitIndex, ClinicalTrialLink
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.base_resolver import BaseResolver
from spl_ingest.utils.xml_helpers import attr, spl_element, spl_elements, xsi_type

NCT_ID_PATH = (c.SUBJECT2, c.SUBSTANCE_ADMINISTRATION, c.COMPONENT_OF, c.PROTOCOL, c.ID)


class AncillaryLinkResolver(BaseResolver):
    """Validated identifier links that hang directly off a section."""

    async def resolve_clinical_trials(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Link ClinicalTrials.gov protocol ids of a section.

        Ids must use the NCT root OID and an NCT######## extension; anything
        else is skipped with a warning.

        Args:
            section_el: Section element
            ctx: Context with section set

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        for id_el in spl_elements(section_el, *NCT_ID_PATH):
            nct_number = attr(id_el, "extension")
            root = attr(id_el, "root")
            if nct_number is None or root != c.NCT_ROOT_OID:
                self._warn(result, ctx, "Protocol id is not a ClinicalTrials.gov id, skipped")
                continue
            if not c.NCT_PATTERN.match(nct_number):
                self._warn(result, ctx, f"NCT number '{nct_number}' has an invalid format, skipped")
                continue

            await self._guard(
                result, ctx, f"clinical trial link {nct_number}",
                lambda nct_number=nct_number, root=root: self._link_trial(nct_number, root, ctx),
            )
        return result

    async def resolve_billing_units(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Index NCPDP billing units of packaged products.

        Args:
            section_el: Billing unit indexing section
            ctx: Context with section set

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        path = (c.SUBJECT, c.MANUFACTURED_PRODUCT, c.MANUFACTURED_PRODUCT)
        for product_el in spl_elements(section_el, *path):
            ndc_el = spl_element(product_el, c.AS_CONTENT, c.CONTAINER_PACKAGED_PRODUCT, c.CODE)
            package_ndc = attr(ndc_el, "code")
            if package_ndc is None:
                self._warn(result, ctx, "Billing unit entry without a package NDC skipped")
                continue
            if not c.NDC_PATTERN.match(package_ndc):
                self._warn(result, ctx, f"Package NDC '{package_ndc}' has an invalid format, skipped")
                continue

            value_el = self._billing_unit_value(product_el)
            billing_unit_code = attr(value_el, "code")
            if billing_unit_code is None:
                self._warn(result, ctx, f"No valid NCPDP billing unit for NDC {package_ndc}, skipped")
                continue

            await self._guard(
                result, ctx, f"billing unit for NDC {package_ndc}",
                lambda ndc_el=ndc_el, value_el=value_el: self._index_billing_unit(ndc_el, value_el, ctx),
            )
        return result

    def _billing_unit_value(self, product_el: etree._Element) -> Optional[etree._Element]:
        for characteristic_el in spl_elements(product_el, c.SUBJECT_OF, c.CHARACTERISTIC):
            if attr(spl_element(characteristic_el, c.CODE), "code") != c.BILLING_UNIT_CHARACTERISTIC:
                continue
            value_el = spl_element(characteristic_el, c.VALUE)
            if xsi_type(value_el) in c.CODED_VALUE_TYPES:
                return value_el
        return None

    async def _link_trial(self, nct_number: str, root: str, ctx: IngestionContext) -> ParseResult:
        result = ParseResult()
        _, created = await ctx.store.get_or_create(
            ClinicalTrialLink,
            defaults={"nct_root_oid": root},
            section_id=ctx.section.id,
            nct_number=nct_number,
        )
        if created:
            result.record_created(ClinicalTrialLink.__name__)
        return result

    async def _index_billing_unit(
        self,
        ndc_el: etree._Element,
        value_el: etree._Element,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        _, created = await ctx.store.get_or_create(
            BillingUnitIndex,
            defaults={
                "package_ndc_system": attr(ndc_el, "codeSystem"),
                "billing_unit_code": attr(value_el, "code"),
                "billing_unit_system": attr(value_el, "codeSystem"),
            },
            section_id=ctx.section.id,
            package_ndc=attr(ndc_el, "code"),
        )
        if created:
            result.record_created(BillingUnitIndex.__name__)
        return result
