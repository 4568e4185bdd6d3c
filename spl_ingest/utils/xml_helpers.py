"""lxml helpers for navigating SPL markup.

SPL documents live in the HL7 v3 namespace. Lookups here match elements by
local name in that namespace, and also accept un-namespaced fragments.
"""

import copy
from typing import Iterable, Iterator, List, Optional

from lxml import etree

from spl_ingest.constants import SPL_NAMESPACE, XSI_NAMESPACE
from spl_ingest.core.exceptions import MarkupError


def local_name(elem: etree._Element) -> str:
    """Local tag name, or an empty string for comments and PIs."""
    if not isinstance(elem.tag, str):
        return ""
    return etree.QName(elem).localname


def _matches(elem: etree._Element, name: str) -> bool:
    return elem.tag == f"{{{SPL_NAMESPACE}}}{name}" or elem.tag == name


def child_elements(elem: etree._Element) -> Iterator[etree._Element]:
    """Element children in document order, skipping comments and PIs."""
    for child in elem:
        if isinstance(child.tag, str):
            yield child


def spl_elements(elem: Optional[etree._Element], *path: str) -> List[etree._Element]:
    """All elements reached by following a child path.

    Every step fans out over all matching children, so
    spl_elements(section, "subject", "manufacturedProduct") returns every
    manufacturedProduct of every subject.
    """
    if elem is None:
        return []
    current = [elem]
    for name in path:
        current = [child for parent in current for child in parent if _matches(child, name)]
    return current


def spl_element(elem: Optional[etree._Element], *path: str) -> Optional[etree._Element]:
    """First element reached by following a child path, or None."""
    if elem is None:
        return None
    current = elem
    for name in path:
        current = next((child for child in current if _matches(child, name)), None)
        if current is None:
            return None
    return current


def spl_descendants(elem: etree._Element, name: str) -> List[etree._Element]:
    """Descendants (not including elem) with the given local name."""
    return [d for d in elem.iterdescendants() if isinstance(d.tag, str) and _matches(d, name)]


def attr(elem: Optional[etree._Element], name: str) -> Optional[str]:
    """Stripped attribute value, None when absent or blank."""
    if elem is None:
        return None
    value = elem.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def xsi_type(elem: Optional[etree._Element]) -> Optional[str]:
    return attr(elem, f"{{{XSI_NAMESPACE}}}type")


def text_content(elem: Optional[etree._Element]) -> Optional[str]:
    """All descendant text joined and stripped, None when blank."""
    if elem is None:
        return None
    text = "".join(elem.itertext()).strip()
    return text or None


def _strip_namespaces(elem: etree._Element) -> None:
    for node in elem.iter():
        if isinstance(node.tag, str) and node.tag.startswith("{"):
            node.tag = etree.QName(node).localname
    etree.cleanup_namespaces(elem)


def inner_markup(
    elem: Optional[etree._Element],
    exclude: Iterable[str] = (),
) -> Optional[str]:
    """Inner markup of an element with namespaces removed.

    Args:
        elem: Element to serialize
        exclude: Local names of direct children to drop. Text following a
            dropped child is kept.

    Returns:
        Stripped markup, or None when nothing but whitespace remains
    """
    if elem is None:
        return None

    clone = copy.deepcopy(elem)
    excluded = set(exclude)
    for child in list(child_elements(clone)):
        if local_name(child) in excluded:
            _remove_keep_tail(child)

    _strip_namespaces(clone)
    parts = [clone.text or ""]
    for child in clone:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))

    markup = "".join(parts).strip()
    return markup or None


def _remove_keep_tail(child: etree._Element) -> None:
    parent = child.getparent()
    tail = child.tail or ""
    previous = child.getprevious()
    if tail:
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(child)


def parse_spl_xml(data: bytes) -> etree._Element:
    """Parse SPL bytes into a root element.

    Raises:
        MarkupError: If the bytes are not well-formed XML
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        return etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise MarkupError(f"Malformed SPL markup: {e}", original_error=e)
