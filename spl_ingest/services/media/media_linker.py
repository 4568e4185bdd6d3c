"""Registers observation media and links renderMultimedia references to them."""

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.core.exceptions import ContextError
from spl_ingest.database.models import ContentBlock, MediaAsset, MediaLink
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import (
    attr,
    local_name,
    spl_descendants,
    spl_element,
    spl_elements,
    text_content,
    xsi_type,
)

LOGGER = get_logger(__name__)


class MediaLinker:
    """Media assets are owned by a section and resolved within their document.

    A section's assets must be registered before its content tree is built,
    so references in that section's text can resolve. References to assets of
    sections that have not been processed yet stay dangling.
    """

    async def register_assets(self, section_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Find or create a MediaAsset for each component/observationMedia.

        Args:
            section_el: Section element
            ctx: Context with document and section set

        Returns:
            ParseResult with created counts
        """
        if ctx.section is None or ctx.document is None:
            raise ContextError("Media registration requires a document and a section")

        result = ParseResult()
        for media_el in spl_elements(section_el, c.COMPONENT, c.OBSERVATION_MEDIA):
            media_token = attr(media_el, "ID")
            if media_token is None:
                message = "observationMedia without an ID attribute skipped"
                LOGGER.warning(message, extra=ctx.log_extra())
                result.add_warning(message)
                continue

            value_el = spl_element(media_el, c.VALUE)
            _, created = await ctx.store.get_or_create(
                MediaAsset,
                defaults={
                    "document_id": ctx.document.id,
                    "description": text_content(spl_element(media_el, c.TEXT)),
                    "media_format": attr(value_el, "mediaType"),
                    "xsi_type": xsi_type(value_el),
                    "file_reference": attr(spl_element(value_el, c.REFERENCE), "value"),
                },
                section_id=ctx.section.id,
                media_token=media_token,
            )
            if created:
                result.record_created(MediaAsset.__name__)

        return result

    async def link_block(
        self,
        block_el: etree._Element,
        block: ContentBlock,
        ctx: IngestionContext,
        is_inline: bool,
    ) -> ParseResult:
        """Link the media references of a content block.

        A renderMultimedia block links itself. Any other block links every
        renderMultimedia element among its descendants as inline media.
        Positions count resolved references only.

        Args:
            block_el: Markup of the content block
            block: The persisted content block
            ctx: Context with document set
            is_inline: Whether the references are inline content

        Returns:
            ParseResult with created counts and dangling reference warnings
        """
        if ctx.document is None:
            raise ContextError("Media linking requires a document")

        if local_name(block_el) == c.RENDER_MULTIMEDIA:
            references = [block_el]
        else:
            references = spl_descendants(block_el, c.RENDER_MULTIMEDIA)

        result = ParseResult()
        position = 0
        for reference_el in references:
            media_token = attr(reference_el, "referencedObject")
            if media_token is None:
                message = "renderMultimedia without referencedObject skipped"
                LOGGER.warning(message, extra=ctx.log_extra(block_id=str(block.id)))
                result.add_warning(message)
                continue

            asset = await ctx.store.media_assets.find_in_document(ctx.document.id, media_token)
            if asset is None:
                message = f"Dangling media reference '{media_token}'"
                LOGGER.warning(message, extra=ctx.log_extra(block_id=str(block.id)))
                result.add_warning(message)
                continue

            position += 1
            _, created = await ctx.store.get_or_create(
                MediaLink,
                defaults={"is_inline": is_inline},
                content_block_id=block.id,
                media_asset_id=asset.id,
                sequence_position=position,
            )
            if created:
                result.record_created(MediaLink.__name__)

        return result
