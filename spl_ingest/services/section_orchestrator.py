"""Per-section ingestion: section record, media, content tree, nested sections, indexing."""

import uuid
from typing import Awaitable, Callable, Optional

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.core.exceptions import ContextError, MarkupError
from spl_ingest.database.models import Section, SectionHierarchy
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.content.content_tree_builder import ContentTreeBuilder
from spl_ingest.services.content.highlight_builder import HighlightBuilder
from spl_ingest.services.indexing.index_resolver import IndexResolver
from spl_ingest.services.media.media_linker import MediaLinker
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import attr, spl_element, spl_elements, text_content

LOGGER = get_logger(__name__)


def normalize_guid(value: Optional[str]) -> str:
    """Canonical lowercase form of a GUID attribute.

    Raises:
        MarkupError: If the value is missing or not a GUID
    """
    if value is None:
        raise MarkupError("Missing GUID (id/@root)")
    try:
        return str(uuid.UUID(value))
    except ValueError as e:
        raise MarkupError(f"Invalid GUID '{value}'", original_error=e)


class SectionOrchestrator:
    """Runs the ingestion steps for one section and, recursively, its children.

    Steps run in a fixed order: persist the section, register its media,
    build its content tree, process nested sections, then resolve indexing.
    A failing step is recorded on the result and the remaining steps still
    run. A section that cannot be persisted aborts on its own; its siblings
    are unaffected.
    """

    def __init__(
        self,
        content_builder: Optional[ContentTreeBuilder] = None,
        index_resolver: Optional[IndexResolver] = None,
        media_linker: Optional[MediaLinker] = None,
        highlight_builder: Optional[HighlightBuilder] = None,
    ):
        self.media_linker = media_linker or MediaLinker()
        self.highlight_builder = highlight_builder or HighlightBuilder()
        self.content_builder = content_builder or ContentTreeBuilder(
            highlight_builder=self.highlight_builder,
            media_linker=self.media_linker,
        )
        self.index_resolver = index_resolver or IndexResolver()

    async def process(
        self,
        section_el: etree._Element,
        ctx: IngestionContext,
        parent_section: Optional[Section] = None,
        sequence_number: Optional[int] = None,
    ) -> ParseResult:
        """Ingest one section element.

        Args:
            section_el: The section element
            ctx: Context with document and structured body set
            parent_section: Enclosing section for nested sections
            sequence_number: Position of this section among its siblings

        Returns:
            Aggregated ParseResult; never raises
        """
        if ctx.document is None or ctx.structured_body is None:
            return ParseResult.failure("No document or structured body available for section parsing")
        if ctx.depth > ctx.options.max_section_depth:
            return ParseResult.failure(f"Section nesting deeper than {ctx.options.max_section_depth} levels")

        result = ParseResult()
        try:
            section = await self._get_or_create_section(section_el, ctx, result)
            if parent_section is not None:
                await self._link_to_parent(parent_section, section, sequence_number or 1, ctx, result)
        except (MarkupError, ContextError) as e:
            LOGGER.error(f"Section skipped: {str(e)}", extra=ctx.log_extra())
            result.add_error(f"Section skipped: {str(e)}")
            return result
        except Exception as e:
            LOGGER.error(f"Error creating section: {str(e)}", exc_info=True, extra=ctx.log_extra())
            result.add_error(f"Error creating section: {str(e)}")
            return result

        section_ctx = ctx.for_section(section)
        result.sections_processed += 1
        section_ctx.progress(f"Processing section {section.section_code or section.section_guid}")

        await self._run_step(
            result, section_ctx, "media registration",
            lambda: self.media_linker.register_assets(section_el, section_ctx),
        )
        await self._run_step(
            result, section_ctx, "content tree",
            lambda: self.content_builder.build_section(section_el, section_ctx),
        )
        await self._run_step(
            result, section_ctx, "section highlights",
            lambda: self.highlight_builder.build(section_el, section_ctx),
        )

        child_ctx = section_ctx.for_child_section()
        for position, child_el in enumerate(spl_elements(section_el, c.COMPONENT, c.SECTION), start=1):
            result.merge_from(await self.process(child_el, child_ctx, parent_section=section, sequence_number=position))

        await self._run_step(
            result, section_ctx, "index resolution",
            lambda: self.index_resolver.resolve(section_el, section_ctx),
        )

        return result

    async def _run_step(
        self,
        result: ParseResult,
        ctx: IngestionContext,
        step: str,
        operation: Callable[[], Awaitable[ParseResult]],
    ) -> None:
        try:
            result.merge_from(await operation())
        except Exception as e:
            LOGGER.error(
                f"Section step '{step}' failed: {str(e)}",
                exc_info=True,
                extra=ctx.log_extra(step=step),
            )
            result.add_error(f"Section step '{step}' failed: {str(e)}")

    async def _get_or_create_section(
        self,
        section_el: etree._Element,
        ctx: IngestionContext,
        result: ParseResult,
    ) -> Section:
        section_guid = normalize_guid(attr(spl_element(section_el, c.ID), "root"))
        code_el = spl_element(section_el, c.CODE)

        section, created = await ctx.store.get_or_create(
            Section,
            defaults={
                "document_id": ctx.document.id,
                "section_link_id": attr(section_el, "ID"),
                "section_code": attr(code_el, "code"),
                "code_system": attr(code_el, "codeSystem"),
                "display_name": attr(code_el, "displayName"),
                "title": text_content(spl_element(section_el, c.TITLE)),
                "effective_time": attr(spl_element(section_el, c.EFFECTIVE_TIME), "value"),
            },
            structured_body_id=ctx.structured_body.id,
            section_guid=section_guid,
        )
        if created:
            result.record_created(Section.__name__)
        return section

    async def _link_to_parent(
        self,
        parent: Section,
        child: Section,
        sequence_number: int,
        ctx: IngestionContext,
        result: ParseResult,
    ) -> None:
        _, created = await ctx.store.get_or_create(
            SectionHierarchy,
            defaults={"sequence_number": sequence_number},
            parent_section_id=parent.id,
            child_section_id=child.id,
        )
        if created:
            result.record_created(SectionHierarchy.__name__)
