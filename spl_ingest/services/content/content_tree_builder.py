"""Reconstructs the ordered content-block tree of a section."""

from typing import Iterable, List, Optional, Tuple

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.core.exceptions import ContextError
from spl_ingest.database.models import ContentBlock
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import BlockKind
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.content.block_classifier import classify_block, content_hash
from spl_ingest.services.content.highlight_builder import HighlightBuilder
from spl_ingest.services.content.list_builder import ListBuilder
from spl_ingest.services.content.table_builder import TableBuilder
from spl_ingest.services.media.media_linker import MediaLinker
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import attr, child_elements, inner_markup, spl_descendants, spl_elements

LOGGER = get_logger(__name__)


def collect_blocks(nodes: Iterable[etree._Element]) -> List[Tuple[etree._Element, BlockKind]]:
    """Content blocks among the given nodes, in document order.

    Generic wrappers are not blocks themselves; their block descendants are
    promoted to the wrapper's level.
    """
    blocks = []
    for node in nodes:
        kind = classify_block(node)
        if kind is BlockKind.GENERIC:
            blocks.extend(collect_blocks(child_elements(node)))
        else:
            blocks.append((node, kind))
    return blocks


class ContentTreeBuilder:
    """Builds ContentBlock records for a section, idempotently.

    Each sibling level keeps a 1-based sequence counter that restarts for every
    parent. Highlights are collected through their excerpt and never take a
    sequence number. Every other block consumes its number even when
    processing it fails, so numbering stays stable across runs.

    Attributes:
        list_builder: Builds list items under list blocks
        table_builder: Builds columns, rows and cells under table blocks
        highlight_builder: Collects excerpt highlights
        media_linker: Resolves renderMultimedia references
    """

    def __init__(
        self,
        list_builder: Optional[ListBuilder] = None,
        table_builder: Optional[TableBuilder] = None,
        highlight_builder: Optional[HighlightBuilder] = None,
        media_linker: Optional[MediaLinker] = None,
    ):
        self.list_builder = list_builder or ListBuilder()
        self.table_builder = table_builder or TableBuilder()
        self.highlight_builder = highlight_builder or HighlightBuilder()
        self.media_linker = media_linker or MediaLinker()

    async def build_section(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Build the top-level blocks of a section.

        The section's text and excerpt children share one top-level counter.

        Args:
            section_el: Section element
            ctx: Context with the section set

        Returns:
            Aggregated ParseResult
        """
        roots = spl_elements(section_el, c.TEXT) + spl_elements(section_el, c.EXCERPT)
        return await self._build_level(collect_blocks(roots), None, ctx)

    async def build(
        self,
        elem: etree._Element,
        ctx: IngestionContext,
        parent_block: Optional[ContentBlock] = None,
    ) -> ParseResult:
        """Build the blocks found among the children of an element.

        Args:
            elem: Element whose children are walked
            ctx: Context with the section set
            parent_block: Block the children hang under, None for top level

        Returns:
            Aggregated ParseResult
        """
        return await self._build_level(collect_blocks(child_elements(elem)), parent_block, ctx)

    async def _build_level(
        self,
        blocks: List[Tuple[etree._Element, BlockKind]],
        parent_block: Optional[ContentBlock],
        ctx: IngestionContext,
    ) -> ParseResult:
        if ctx.section is None:
            raise ContextError("Content tree requires a current section")

        result = ParseResult()
        inside_paragraph = parent_block is not None and parent_block.block_type == BlockKind.PARAGRAPH.value
        sequence = 0

        for node, kind in blocks:
            if kind is BlockKind.HIGHLIGHT:
                continue
            if kind is BlockKind.RENDERED_MEDIA and inside_paragraph:
                # Linked as inline media of the paragraph
                continue

            sequence += 1
            try:
                result.merge_from(await self._build_block(node, kind, sequence, parent_block, ctx))
            except Exception as e:
                LOGGER.error(
                    f"Failed to build {kind.value} block: {str(e)}",
                    exc_info=True,
                    extra=ctx.log_extra(sequence_number=sequence),
                )
                result.add_error(f"{kind.value} block {sequence} failed: {str(e)}")

        return result

    async def _build_block(
        self,
        node: etree._Element,
        kind: BlockKind,
        sequence: int,
        parent_block: Optional[ContentBlock],
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        content_text = None if kind.is_container else inner_markup(node)

        block, created = await ctx.store.get_or_create(
            ContentBlock,
            defaults={
                "style_code": attr(node, "styleCode"),
                "content_text": content_text,
            },
            section_id=ctx.section.id,
            parent_block_id=parent_block.id if parent_block is not None else None,
            block_type=kind.value,
            sequence_number=sequence,
            content_hash=content_hash(kind, content_text),
        )
        if created:
            result.record_created(ContentBlock.__name__)

        if kind is BlockKind.LIST:
            result.merge_from(await self.list_builder.build(node, block, ctx))
        elif kind is BlockKind.TABLE:
            result.merge_from(await self.table_builder.build(node, block, ctx))
        elif kind is BlockKind.EXCERPT:
            result.merge_from(await self.highlight_builder.build(node, ctx))

        if kind is BlockKind.RENDERED_MEDIA:
            result.merge_from(await self.media_linker.link_block(node, block, ctx, is_inline=False))
        elif spl_descendants(node, c.RENDER_MULTIMEDIA):
            result.merge_from(await self.media_linker.link_block(node, block, ctx, is_inline=True))

        if not kind.is_container:
            result.merge_from(await self.build(node, ctx, parent_block=block))

        return result
