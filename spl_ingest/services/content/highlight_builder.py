"""Collects highlighted excerpt text into HighlightSpan records."""

import hashlib

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.core.exceptions import ContextError
from spl_ingest.database.models import HighlightSpan
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import inner_markup, spl_element, spl_elements

LOGGER = get_logger(__name__)


class HighlightBuilder:
    """Creates one HighlightSpan per distinct highlight text of a section."""

    async def build(self, owner_el: etree._Element, ctx: IngestionContext) -> ParseResult:
        """Process the direct highlight children of an excerpt or section.

        Args:
            owner_el: Excerpt or section element
            ctx: Current ingestion context

        Returns:
            ParseResult with created counts and warnings for empty highlights

        Raises:
            ContextError: If no section is set on the context
        """
        if ctx.section is None:
            raise ContextError("Highlights require a current section")

        result = ParseResult()
        for highlight_el in spl_elements(owner_el, c.HIGHLIGHT):
            text_el = spl_element(highlight_el, c.TEXT)
            if text_el is None:
                message = "Highlight without a text element skipped"
                LOGGER.warning(message, extra=ctx.log_extra())
                result.add_warning(message)
                continue

            highlight_text = inner_markup(text_el)
            if not highlight_text:
                message = "Highlight with empty text skipped"
                LOGGER.warning(message, extra=ctx.log_extra())
                result.add_warning(message)
                continue

            _, created = await ctx.store.get_or_create(
                HighlightSpan,
                defaults={"highlight_text": highlight_text},
                section_id=ctx.section.id,
                text_hash=hashlib.sha256(highlight_text.encode()).hexdigest(),
            )
            if created:
                result.record_created(HighlightSpan.__name__)

        return result
