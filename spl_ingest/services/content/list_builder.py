"""Builds list records and their items under a list content block."""

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import ContentBlock, ListItem, ListRecord
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import attr, inner_markup, spl_element, spl_elements, text_content

LOGGER = get_logger(__name__)


class ListBuilder:
    """Creates one ListRecord per list block and a ListItem per non-empty item.

    Item sequence numbers are dense over persisted items: an item whose text
    is empty once its caption is removed is skipped without consuming a
    number.
    """

    async def build(
        self,
        list_el: etree._Element,
        block: ContentBlock,
        ctx: IngestionContext,
    ) -> ParseResult:
        """Find or create the list and its items.

        Args:
            list_el: The list element
            block: Content block the list belongs to
            ctx: Current ingestion context

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        store = ctx.store

        text_list, created = await store.get_or_create(
            ListRecord,
            defaults={
                "list_type": attr(list_el, "listType"),
                "style_code": attr(list_el, "styleCode"),
            },
            content_block_id=block.id,
        )
        if created:
            result.record_created(ListRecord.__name__)

        sequence = 0
        for item_el in spl_elements(list_el, c.ITEM):
            item_text = inner_markup(item_el, exclude=(c.CAPTION,))
            if not item_text:
                LOGGER.debug("Skipping empty list item", extra=ctx.log_extra(list_id=str(text_list.id)))
                continue

            sequence += 1
            _, item_created = await store.get_or_create(
                ListItem,
                defaults={
                    "caption": text_content(spl_element(item_el, c.CAPTION)),
                    "item_text": item_text,
                },
                list_id=text_list.id,
                sequence_number=sequence,
            )
            if item_created:
                result.record_created(ListItem.__name__)

        return result
