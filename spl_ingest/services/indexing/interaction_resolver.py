"""Drug interaction indexing: issue, contributing factor and consequence chains."""

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import ContributingFactor, InteractionConsequence, InteractionIssue
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import ReferenceKind
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.base_resolver import BaseResolver
from spl_ingest.utils.xml_helpers import attr, spl_element, spl_elements

FACTOR_CODE_PATH = (
    c.SUBJECT,
    c.SUBSTANCE_ADMINISTRATION_CRITERION,
    c.CONSUMABLE,
    c.ADMINISTRABLE_MATERIAL,
    c.ADMINISTRABLE_MATERIAL_KIND,
    c.CODE,
)


class InteractionResolver(BaseResolver):
    """Creates interaction issues with their factors and consequences.

    Contributing factors are looked up among identified substances by
    identifier and system. A factor whose substance is not indexed yet goes
    to the pending reference ledger.
    """

    async def resolve(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Index every substanceAdministration/subjectOf/issue.

        Args:
            section_el: Interaction indexing section
            ctx: Context with section set

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        for issue_el in spl_elements(section_el, c.SUBSTANCE_ADMINISTRATION, c.SUBJECT_OF, c.ISSUE):
            await self._guard(
                result, ctx, "interaction issue",
                lambda issue_el=issue_el: self._resolve_issue(issue_el, ctx),
            )
        return result

    async def _resolve_issue(self, issue_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        result = ParseResult()
        code_el = spl_element(issue_el, c.CODE)
        interaction_code = attr(code_el, "code")
        if interaction_code is None:
            self._warn(result, ctx, "Interaction issue without a code skipped")
            return result

        issue, created = await ctx.store.get_or_create(
            InteractionIssue,
            defaults={
                "interaction_system": attr(code_el, "codeSystem"),
                "display_name": attr(code_el, "displayName"),
            },
            section_id=ctx.section.id,
            interaction_code=interaction_code,
        )
        if created:
            result.record_created(InteractionIssue.__name__)

        for factor_el in spl_elements(issue_el, *FACTOR_CODE_PATH):
            result.merge_from(await self._add_factor(factor_el, issue, ctx))

        for consequence_el in spl_elements(issue_el, c.RISK, c.CONSEQUENCE_OBSERVATION):
            result.merge_from(await self._add_consequence(consequence_el, issue, ctx))

        return result

    async def _add_factor(
        self,
        factor_el: etree._Element,
        issue: InteractionIssue,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        identifier = attr(factor_el, "code")
        system = attr(factor_el, "codeSystem")
        if identifier is None:
            self._warn(result, ctx, f"Contributing factor of issue {issue.interaction_code} has no code")
            return result

        substance = await ctx.store.substances.find_by_identifier(identifier, system)
        if substance is None:
            self._warn(
                result, ctx,
                f"No identified substance {identifier} for contributing factor of issue {issue.interaction_code}",
            )
            result.merge_from(await self.pending.record(
                ctx.store,
                ReferenceKind.CONTRIBUTING_FACTOR,
                source_id=issue.id,
                target_key=identifier,
                target_system=system,
            ))
            return result

        _, created = await ctx.store.get_or_create(
            ContributingFactor,
            issue_id=issue.id,
            factor_substance_id=substance.id,
        )
        if created:
            result.record_created(ContributingFactor.__name__)
        return result

    async def _add_consequence(
        self,
        consequence_el: etree._Element,
        issue: InteractionIssue,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        type_el = spl_element(consequence_el, c.CODE)
        value_el = spl_element(consequence_el, c.VALUE)
        value_code = attr(value_el, "code")
        if value_code is None:
            self._warn(result, ctx, f"Consequence of issue {issue.interaction_code} has no value code")
            return result

        _, created = await ctx.store.get_or_create(
            InteractionConsequence,
            defaults={
                "consequence_type_code": attr(type_el, "code"),
                "consequence_type_system": attr(type_el, "codeSystem"),
                "consequence_type_display": attr(type_el, "displayName"),
                "consequence_value_system": attr(value_el, "codeSystem"),
                "consequence_value_display": attr(value_el, "displayName"),
            },
            issue_id=issue.id,
            consequence_value_code=value_code,
        )
        if created:
            result.record_created(InteractionConsequence.__name__)
        return result
