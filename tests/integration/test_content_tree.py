"""Content tree reconstruction against a real (SQLite) store."""

import pytest

from conftest import spl_fragment
from spl_ingest.database.models import (
    ContentBlock,
    HighlightSpan,
    ListItem,
    ListRecord,
    MediaAsset,
    MediaLink,
    TableCell,
    TableColumn,
    TableRecord,
    TableRow,
)
from spl_ingest.core.exceptions import ContextError
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.services.content.content_tree_builder import ContentTreeBuilder
from spl_ingest.services.content.highlight_builder import HighlightBuilder
from spl_ingest.services.media.media_linker import MediaLinker


@pytest.fixture
def builder():
    return ContentTreeBuilder()


async def top_level(ctx):
    return await ctx.store.content_blocks.children(ctx.section.id, None)


class TestSequencing:
    """Sibling numbering within a parent."""

    @pytest.mark.asyncio
    async def test_top_level_blocks_are_densely_numbered(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text>"
            "<paragraph>Take one tablet.</paragraph>"
            "<content styleCode='bold'><paragraph>Wrapped paragraph.</paragraph></content>"
            "<list><item>Only item</item></list>"
            "<paragraph>Last paragraph.</paragraph>"
            "</text>"
        )

        result = await builder.build_section(section_el, section_ctx)

        assert result.success
        blocks = await top_level(section_ctx)
        assert [b.sequence_number for b in blocks] == [1, 2, 3, 4]
        assert [b.block_type for b in blocks] == ["Paragraph", "Paragraph", "List", "Paragraph"]
        assert blocks[1].content_text == "Wrapped paragraph."

    @pytest.mark.asyncio
    async def test_numbering_restarts_under_each_parent(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text><paragraph>Intro</paragraph>"
            "<excerpt><paragraph>Inner one</paragraph><paragraph>Inner two</paragraph></excerpt>"
            "</text>"
        )

        await builder.build_section(section_el, section_ctx)

        excerpt = (await top_level(section_ctx))[1]
        assert excerpt.block_type == "Excerpt"
        children = await section_ctx.store.content_blocks.children(section_ctx.section.id, excerpt.id)
        assert [(c.sequence_number, c.content_text) for c in children] == [(1, "Inner one"), (2, "Inner two")]

    @pytest.mark.asyncio
    async def test_text_and_excerpt_share_the_top_level_counter(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text><paragraph>Body</paragraph></text>"
            "<excerpt><highlight><text><paragraph>Key point</paragraph></text></highlight></excerpt>"
        )

        await builder.build_section(section_el, section_ctx)

        blocks = await top_level(section_ctx)
        assert [(b.block_type, b.sequence_number) for b in blocks] == [("Paragraph", 1), ("Excerpt", 2)]

    @pytest.mark.asyncio
    async def test_requires_a_section(self, builder, section_ctx):
        no_section = IngestionContext(
            store=section_ctx.store,
            document=section_ctx.document,
            structured_body=section_ctx.structured_body,
        )

        with pytest.raises(ContextError):
            await builder.build_section(spl_fragment("<text><paragraph>x</paragraph></text>"), no_section)


class TestLists:

    @pytest.mark.asyncio
    async def test_empty_items_do_not_consume_numbers(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text><list listType='ordered' styleCode='Disc'>"
            "<item>First</item>"
            "<item>   </item>"
            "<item><caption>b.</caption></item>"
            "<item><caption>c.</caption>Second</item>"
            "</list></text>"
        )

        await builder.build_section(section_el, section_ctx)

        store = section_ctx.store
        block = (await top_level(section_ctx))[0]
        assert block.block_type == "List"
        assert block.content_text is None

        text_list = await store.find(ListRecord, content_block_id=block.id)
        assert text_list.list_type == "ordered"
        assert text_list.style_code == "Disc"

        items = await store.repository(ListItem).find_all(order_by="sequence_number", list_id=text_list.id)
        assert [(i.sequence_number, i.item_text, i.caption) for i in items] == [
            (1, "First", None),
            (2, "Second", "c."),
        ]

    @pytest.mark.asyncio
    async def test_captioned_ordered_list(self, builder, section_ctx):
        section_el = spl_fragment(
            '<text><list listType="ordered">'
            "<item><caption>1</caption>First</item><item>  </item><item>Second</item>"
            "</list></text>"
        )

        result = await builder.build_section(section_el, section_ctx)

        assert result.created[ListRecord.__name__] == 1
        items = await section_ctx.store.repository(ListItem).find_all(order_by="sequence_number")
        assert [(i.sequence_number, i.item_text) for i in items] == [(1, "First"), (2, "Second")]
        assert items[0].caption == "1"

    @pytest.mark.asyncio
    async def test_list_children_are_not_content_blocks(self, builder, section_ctx):
        section_el = spl_fragment("<text><list><item><paragraph>Nested</paragraph></item></list></text>")

        await builder.build_section(section_el, section_ctx)

        assert await section_ctx.store.count(ContentBlock) == 1


class TestTables:

    @pytest.mark.asyncio
    async def test_rows_directly_under_table_are_body_rows(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text><table width='100%'>"
            "<tr><td>10 mg</td><td>Once daily</td></tr>"
            "<tr><td colspan='2'>Titrate</td></tr>"
            "</table></text>"
        )

        await builder.build_section(section_el, section_ctx)

        store = section_ctx.store
        block = (await top_level(section_ctx))[0]
        table = await store.find(TableRecord, content_block_id=block.id)
        assert table.has_header is False
        assert table.has_footer is False
        assert table.width == "100%"

        rows = await store.repository(TableRow).find_all(order_by="sequence_number", table_id=table.id)
        assert [(r.row_group, r.sequence_number) for r in rows] == [("Body", 1), ("Body", 2)]

        cells = await store.repository(TableCell).find_all(order_by="sequence_number", row_id=rows[1].id)
        assert len(cells) == 1
        assert cells[0].cell_text == "Titrate"
        assert cells[0].col_span == 2
        assert cells[0].row_span is None

    @pytest.mark.asyncio
    async def test_full_table_structure(self, builder, section_ctx):
        section_el = spl_fragment(
            "<text><table ID='T1'>"
            "<caption>Table 1: <content styleCode='bold'>Adverse reactions</content></caption>"
            "<colgroup align='left'><col width='30%'/><col align='center'/></colgroup>"
            "<col width='10%'/>"
            "<thead><tr><th>Reaction</th><th>Drug</th><th>Placebo</th></tr></thead>"
            "<tfoot><tr><td>n = 100</td></tr></tfoot>"
            "<tbody><tr><td>Nausea</td><td>12%</td><td>4%</td></tr></tbody>"
            "<tbody><tr><th>Headache</th><td>8%</td><td>7%</td></tr></tbody>"
            "</table></text>"
        )

        result = await builder.build_section(section_el, section_ctx)
        assert result.success

        store = section_ctx.store
        table = await store.find(TableRecord, content_block_id=(await top_level(section_ctx))[0].id)
        assert table.has_header and table.has_footer
        assert table.table_link_id == "T1"
        assert table.caption == 'Table 1: <content styleCode="bold">Adverse reactions</content>'

        columns = await store.repository(TableColumn).find_all(order_by="sequence_number", table_id=table.id)
        assert [(c.sequence_number, c.colgroup_sequence, c.align) for c in columns] == [
            (1, 1, "left"),
            (2, 1, "center"),
            (3, None, None),
        ]

        rows = await store.repository(TableRow).find_all(table_id=table.id)
        assert sorted((r.row_group, r.sequence_number) for r in rows) == [
            ("Body", 1),
            ("Body", 2),
            ("Footer", 1),
            ("Header", 1),
        ]

        second_body = next(r for r in rows if r.row_group == "Body" and r.sequence_number == 2)
        cells = await store.repository(TableCell).find_all(order_by="sequence_number", row_id=second_body.id)
        assert [(c.cell_kind, c.cell_text) for c in cells] == [
            ("Header", "Headache"),
            ("Data", "8%"),
            ("Data", "7%"),
        ]

        assert result.created[TableCell.__name__] == 10


class TestHighlights:

    @pytest.mark.asyncio
    async def test_identical_highlights_collapse(self, builder, section_ctx):
        section_el = spl_fragment(
            "<excerpt>"
            "<highlight><text><paragraph>Risk of serious infections.</paragraph></text></highlight>"
            "<highlight><text><paragraph>Risk of serious infections.</paragraph></text></highlight>"
            "<highlight><text><paragraph>Monitor liver tests.</paragraph></text></highlight>"
            "</excerpt>"
        )

        await builder.build_section(section_el, section_ctx)
        await builder.build_section(section_el, section_ctx)

        spans = await section_ctx.store.repository(HighlightSpan).find_all(section_id=section_ctx.section.id)
        assert sorted(s.highlight_text for s in spans) == [
            "<paragraph>Monitor liver tests.</paragraph>",
            "<paragraph>Risk of serious infections.</paragraph>",
        ]

    @pytest.mark.asyncio
    async def test_highlights_never_become_blocks(self, builder, section_ctx):
        section_el = spl_fragment(
            "<excerpt><highlight><text><paragraph>Boxed</paragraph></text></highlight></excerpt>"
        )

        await builder.build_section(section_el, section_ctx)

        blocks = await section_ctx.store.repository(ContentBlock).find_all(section_id=section_ctx.section.id)
        assert [b.block_type for b in blocks] == ["Excerpt"]

    @pytest.mark.asyncio
    async def test_empty_highlight_warns(self, section_ctx):
        excerpt = spl_fragment("<highlight><text>  </text></highlight><highlight/>", tag="excerpt")

        result = await HighlightBuilder().build(excerpt, section_ctx)

        assert result.success
        assert len(result.warnings) == 2
        assert await section_ctx.store.count(HighlightSpan) == 0


class TestMedia:

    MEDIA = (
        "<component><observationMedia ID='MM1'>"
        "<text>Structural formula</text>"
        "<value xsi:type='ED' mediaType='image/jpeg'><reference value='formula.jpg'/></value>"
        "</observationMedia></component>"
    )

    @pytest.mark.asyncio
    async def test_dangling_reference_warns_without_link(self, builder, section_ctx):
        section_el = spl_fragment("<text><renderMultimedia referencedObject='MM9'/></text>")

        result = await builder.build_section(section_el, section_ctx)

        assert result.success
        assert any("MM9" in w for w in result.warnings)
        blocks = await top_level(section_ctx)
        assert [b.block_type for b in blocks] == ["RenderMultimedia"]
        assert await section_ctx.store.count(MediaLink) == 0

    @pytest.mark.asyncio
    async def test_block_and_inline_media_links(self, builder, section_ctx):
        section_el = spl_fragment(
            self.MEDIA
            + "<text>"
            "<paragraph>See figure <renderMultimedia referencedObject='MM1'/></paragraph>"
            "<renderMultimedia referencedObject='MM1'/>"
            "</text>"
        )

        await MediaLinker().register_assets(section_el, section_ctx)
        result = await builder.build_section(section_el, section_ctx)

        assert result.success
        store = section_ctx.store
        asset = await store.find(MediaAsset, section_id=section_ctx.section.id, media_token="MM1")
        assert asset.media_format == "image/jpeg"
        assert asset.xsi_type == "ED"
        assert asset.file_reference == "formula.jpg"
        assert asset.description == "Structural formula"

        paragraph, media_block = await top_level(section_ctx)
        assert media_block.block_type == "RenderMultimedia"
        assert media_block.sequence_number == 2
        # the paragraph's own renderMultimedia is not a child block
        assert await store.content_blocks.children(section_ctx.section.id, paragraph.id) == []

        inline = await store.find(MediaLink, content_block_id=paragraph.id, media_asset_id=asset.id, sequence_position=1)
        assert inline.is_inline is True
        block_link = await store.find(MediaLink, content_block_id=media_block.id, media_asset_id=asset.id, sequence_position=1)
        assert block_link.is_inline is False


class TestIdempotence:

    SECTION = (
        "<text>"
        "<paragraph>Dosage is <content styleCode='italics'>weight based</content>.</paragraph>"
        "<list><item>One</item><item>Two</item></list>"
        "<table><thead><tr><th>Weight</th></tr></thead><tbody><tr><td>10 kg</td></tr></tbody></table>"
        "</text>"
        "<excerpt><highlight><text><paragraph>Weight based dosing</paragraph></text></highlight></excerpt>"
    )

    @pytest.mark.asyncio
    async def test_second_pass_creates_nothing(self, builder, section_ctx):
        section_el = spl_fragment(self.SECTION)

        first = await builder.build_section(section_el, section_ctx)
        tree_after_first = await section_ctx.store.content_blocks.load_tree(section_ctx.section.id)

        second = await builder.build_section(section_el, section_ctx)
        tree_after_second = await section_ctx.store.content_blocks.load_tree(section_ctx.section.id)

        assert first.total_created > 0
        assert second.success
        assert second.total_created == 0
        assert tree_after_second == tree_after_first
