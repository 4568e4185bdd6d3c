import pytest
from lxml import etree

from conftest import spl_fragment
from spl_ingest.core.exceptions import MarkupError
from spl_ingest.utils.xml_helpers import (
    attr,
    inner_markup,
    local_name,
    parse_spl_xml,
    spl_element,
    spl_elements,
    text_content,
    xsi_type,
)


class TestNavigation:
    """Element lookup by local name."""

    def test_spl_elements_fans_out_over_every_step(self):
        section = spl_fragment(
            "<subject><a>1</a><a>2</a></subject>"
            "<subject><a>3</a></subject>"
        )
        values = [text_content(e) for e in spl_elements(section, "subject", "a")]
        assert values == ["1", "2", "3"]

    def test_spl_element_returns_first_match_or_none(self):
        section = spl_fragment("<code code='A'/><code code='B'/>")
        assert attr(spl_element(section, "code"), "code") == "A"
        assert spl_element(section, "title") is None
        assert spl_element(None, "code") is None

    def test_unnamespaced_markup_is_accepted(self):
        section = etree.fromstring("<section><title>Plain</title></section>")
        assert text_content(spl_element(section, "title")) == "Plain"

    def test_local_name_ignores_comments(self):
        section = spl_fragment("<!-- note --><title/>")
        assert [local_name(child) for child in section] == ["", "title"]


class TestAttributes:

    def test_attr_strips_and_blanks_to_none(self):
        elem = spl_fragment("", tag="code")
        elem.set("code", "  C123 ")
        elem.set("empty", "   ")
        assert attr(elem, "code") == "C123"
        assert attr(elem, "empty") is None
        assert attr(elem, "missing") is None
        assert attr(None, "code") is None

    def test_xsi_type(self):
        section = spl_fragment('<value xsi:type="CV" code="EA"/>')
        assert xsi_type(spl_element(section, "value")) == "CV"


class TestInnerMarkup:
    """Serialization of element content."""

    def test_namespaces_are_removed(self):
        paragraph = spl_element(spl_fragment("<paragraph>Take <content styleCode='bold'>once</content> daily</paragraph>"), "paragraph")
        assert inner_markup(paragraph) == 'Take <content styleCode="bold">once</content> daily'

    def test_excluded_child_keeps_following_text(self):
        item = spl_element(spl_fragment("<item><caption>a.</caption> Headache</item>"), "item")
        assert inner_markup(item, exclude=("caption",)) == "Headache"

    def test_excluded_child_between_siblings(self):
        item = spl_element(
            spl_fragment("<item><content>x</content><caption>b.</caption> tail</item>"),
            "item",
        )
        assert inner_markup(item, exclude=("caption",)) == "<content>x</content> tail"

    def test_exclusion_does_not_modify_source(self):
        section = spl_fragment("<item><caption>a.</caption>Text</item>")
        item = spl_element(section, "item")
        inner_markup(item, exclude=("caption",))
        assert spl_element(item, "caption") is not None

    def test_whitespace_only_is_none(self):
        item = spl_element(spl_fragment("<item>   </item>"), "item")
        assert inner_markup(item) is None
        assert inner_markup(None) is None


class TestParse:

    def test_parse_spl_xml(self):
        root = parse_spl_xml(b'<document xmlns="urn:hl7-org:v3"><title>T</title></document>')
        assert local_name(root) == "document"

    def test_malformed_markup_raises_markup_error(self):
        with pytest.raises(MarkupError, match="Malformed SPL markup"):
            parse_spl_xml(b"<document><title></document>")
