"""Classification of markup nodes into content block kinds."""

import hashlib
from typing import Optional

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.schemas.enums import BlockKind
from spl_ingest.utils.xml_helpers import local_name

_KIND_BY_ELEMENT = {
    c.PARAGRAPH: BlockKind.PARAGRAPH,
    c.LIST: BlockKind.LIST,
    c.TABLE: BlockKind.TABLE,
    c.EXCERPT: BlockKind.EXCERPT,
    c.HIGHLIGHT: BlockKind.HIGHLIGHT,
    c.RENDER_MULTIMEDIA: BlockKind.RENDERED_MEDIA,
}


def classify_block(elem: etree._Element) -> BlockKind:
    """Classify one element.

    Anything that is not a recognised content block element is GENERIC; the
    tree builder dives through generic wrappers and promotes their block
    descendants to the wrapper's level.

    Args:
        elem: Markup element

    Returns:
        The block kind
    """
    return _KIND_BY_ELEMENT.get(local_name(elem), BlockKind.GENERIC)


def is_container(elem: etree._Element) -> bool:
    """True for lists and tables, whose children are handled by their builder."""
    return classify_block(elem).is_container


def content_hash(kind: BlockKind, text: Optional[str]) -> str:
    """Dedup digest stored with a content block.

    Paragraphs are matched on their text as well as their position, every
    other kind on position alone.
    """
    if kind is not BlockKind.PARAGRAPH:
        return ""
    return hashlib.sha256((text or "").encode()).hexdigest()
