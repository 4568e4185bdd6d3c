"""Builds table records, columns, rows and cells under a table content block."""

from typing import List, Optional, Tuple

from lxml import etree

from spl_ingest import constants as c
from spl_ingest.database.models import ContentBlock, TableCell, TableColumn, TableRecord, TableRow
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.enums import CellKind, RowGroup
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import (
    attr,
    child_elements,
    inner_markup,
    local_name,
    spl_element,
    spl_elements,
)

LOGGER = get_logger(__name__)


def parse_span(value: Optional[str]) -> Optional[int]:
    """Row/column span as a positive integer, None when absent or invalid."""
    try:
        span = int(value)
    except (TypeError, ValueError):
        return None
    return span if span > 0 else None


class TableBuilder:
    """Creates the record structure of one table.

    Columns share one table-wide counter. Rows are numbered per row group
    (Header, Body, Footer), and the th/td cells of a row share one counter in
    document order.
    """

    async def build(
        self,
        table_el: etree._Element,
        block: ContentBlock,
        ctx: IngestionContext,
    ) -> ParseResult:
        """Find or create the table and all of its children.

        Args:
            table_el: The table element
            block: Content block the table belongs to
            ctx: Current ingestion context

        Returns:
            ParseResult with created counts
        """
        result = ParseResult()
        thead = spl_element(table_el, c.THEAD)
        tfoot = spl_element(table_el, c.TFOOT)

        table, created = await ctx.store.get_or_create(
            TableRecord,
            defaults={
                "width": attr(table_el, "width"),
                "caption": inner_markup(spl_element(table_el, c.CAPTION)),
                "table_link_id": attr(table_el, "ID"),
                "has_header": thead is not None,
                "has_footer": tfoot is not None,
            },
            content_block_id=block.id,
        )
        if created:
            result.record_created(TableRecord.__name__)

        result.merge_from(await self._build_columns(table_el, table, ctx))

        for row_group, group_elements in self._row_groups(table_el, thead, tfoot):
            result.merge_from(await self._build_rows(group_elements, row_group, table, ctx))

        return result

    def _row_groups(
        self,
        table_el: etree._Element,
        thead: Optional[etree._Element],
        tfoot: Optional[etree._Element],
    ) -> List[Tuple[RowGroup, List[etree._Element]]]:
        bodies = spl_elements(table_el, c.TBODY)
        if not bodies and spl_elements(table_el, c.TR):
            # Rows placed directly under the table are body rows
            bodies = [table_el]

        groups = []
        if thead is not None:
            groups.append((RowGroup.HEADER, [thead]))
        if bodies:
            groups.append((RowGroup.BODY, bodies))
        if tfoot is not None:
            groups.append((RowGroup.FOOTER, [tfoot]))
        return groups

    async def _build_columns(
        self,
        table_el: etree._Element,
        table: TableRecord,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        sequence = 0

        for colgroup_sequence, colgroup in enumerate(spl_elements(table_el, c.COLGROUP), start=1):
            for col in spl_elements(colgroup, c.COL):
                sequence += 1
                if await self._create_column(table, sequence, col, ctx, colgroup, colgroup_sequence):
                    result.record_created(TableColumn.__name__)

        for col in spl_elements(table_el, c.COL):
            sequence += 1
            if await self._create_column(table, sequence, col, ctx):
                result.record_created(TableColumn.__name__)

        return result

    async def _create_column(
        self,
        table: TableRecord,
        sequence: int,
        col: etree._Element,
        ctx: IngestionContext,
        colgroup: Optional[etree._Element] = None,
        colgroup_sequence: Optional[int] = None,
    ) -> bool:
        _, created = await ctx.store.get_or_create(
            TableColumn,
            defaults={
                "colgroup_sequence": colgroup_sequence,
                "width": attr(col, "width"),
                "align": attr(col, "align") or attr(colgroup, "align"),
                "valign": attr(col, "valign") or attr(colgroup, "valign"),
                "style_code": attr(col, "styleCode"),
                "colgroup_style_code": attr(colgroup, "styleCode"),
                "colgroup_align": attr(colgroup, "align"),
                "colgroup_valign": attr(colgroup, "valign"),
            },
            table_id=table.id,
            sequence_number=sequence,
        )
        return created

    async def _build_rows(
        self,
        group_elements: List[etree._Element],
        row_group: RowGroup,
        table: TableRecord,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        sequence = 0

        for group_el in group_elements:
            for tr in spl_elements(group_el, c.TR):
                sequence += 1
                row, created = await ctx.store.get_or_create(
                    TableRow,
                    defaults={"style_code": attr(tr, "styleCode")},
                    table_id=table.id,
                    row_group=row_group.value,
                    sequence_number=sequence,
                )
                if created:
                    result.record_created(TableRow.__name__)
                result.merge_from(await self._build_cells(tr, row, ctx))

        return result

    async def _build_cells(
        self,
        tr: etree._Element,
        row: TableRow,
        ctx: IngestionContext,
    ) -> ParseResult:
        result = ParseResult()
        sequence = 0

        for cell_el in child_elements(tr):
            name = local_name(cell_el)
            if name not in (c.TH, c.TD):
                continue

            sequence += 1
            _, created = await ctx.store.get_or_create(
                TableCell,
                defaults={
                    "cell_kind": (CellKind.HEADER if name == c.TH else CellKind.DATA).value,
                    "cell_text": inner_markup(cell_el) or "",
                    "row_span": parse_span(attr(cell_el, "rowspan")),
                    "col_span": parse_span(attr(cell_el, "colspan")),
                    "align": attr(cell_el, "align"),
                    "valign": attr(cell_el, "valign"),
                    "style_code": attr(cell_el, "styleCode"),
                },
                row_id=row.id,
                sequence_number=sequence,
            )
            if created:
                result.record_created(TableCell.__name__)

        return result
