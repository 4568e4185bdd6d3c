import hashlib

import pytest

from conftest import spl_fragment
from spl_ingest.schemas.enums import BlockKind
from spl_ingest.services.content.block_classifier import classify_block, content_hash, is_container
from spl_ingest.services.content.content_tree_builder import collect_blocks
from spl_ingest.utils.xml_helpers import spl_element


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("paragraph", BlockKind.PARAGRAPH),
        ("list", BlockKind.LIST),
        ("table", BlockKind.TABLE),
        ("excerpt", BlockKind.EXCERPT),
        ("highlight", BlockKind.HIGHLIGHT),
        ("renderMultimedia", BlockKind.RENDERED_MEDIA),
        ("content", BlockKind.GENERIC),
        ("sup", BlockKind.GENERIC),
    ],
)
def test_classify_block(tag, expected):
    elem = spl_element(spl_fragment(f"<{tag}/>"), tag)
    assert classify_block(elem) is expected


def test_only_lists_and_tables_are_containers():
    section = spl_fragment("<list/><table/><paragraph/>")
    assert [is_container(child) for child in section] == [True, True, False]


def test_content_hash_applies_to_paragraphs_only():
    assert content_hash(BlockKind.PARAGRAPH, "Dose") == hashlib.sha256(b"Dose").hexdigest()
    assert content_hash(BlockKind.PARAGRAPH, None) == hashlib.sha256(b"").hexdigest()
    assert content_hash(BlockKind.TABLE, "Dose") == ""
    assert content_hash(BlockKind.RENDERED_MEDIA, None) == ""


def test_collect_blocks_promotes_blocks_out_of_generic_wrappers():
    text = spl_element(
        spl_fragment(
            "<text><paragraph>A</paragraph>"
            "<content><paragraph>B</paragraph><span><list/></span></content>"
            "<paragraph>C</paragraph></text>"
        ),
        "text",
    )
    kinds = [kind for _, kind in collect_blocks(text)]
    assert kinds == [BlockKind.PARAGRAPH, BlockKind.PARAGRAPH, BlockKind.LIST, BlockKind.PARAGRAPH]
