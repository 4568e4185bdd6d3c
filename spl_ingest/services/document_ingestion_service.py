"""Document-level entry point: header, structured body and top-level sections."""

from typing import Callable, Optional

from lxml import etree
from sqlalchemy.ext.asyncio import AsyncSession

from spl_ingest import constants as c
from spl_ingest.core.config import IngestionSettings, settings
from spl_ingest.core.exceptions import MarkupError
from spl_ingest.database.models import Document, StructuredBody
from spl_ingest.repositories.natural_key_store import NaturalKeyStore
from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.index_resolver import IndexResolver
from spl_ingest.services.section_orchestrator import SectionOrchestrator, normalize_guid
from spl_ingest.utils.logging import get_logger
from spl_ingest.utils.xml_helpers import attr, parse_spl_xml, spl_element, spl_elements, text_content

LOGGER = get_logger(__name__)


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class DocumentIngestionService:
    """Ingests one SPL document through a single session.

    The session should be created with expire_on_commit=False: records
    loaded before a per-section commit are still read afterwards.

    Attributes:
        store: Natural-key store wrapping the session
        orchestrator: Section orchestrator
        options: Ingestion behaviour switches
    """

    def __init__(
        self,
        session: AsyncSession,
        orchestrator: Optional[SectionOrchestrator] = None,
        options: Optional[IngestionSettings] = None,
    ):
        """Initialize the service.

        Args:
            session: SQLAlchemy async session
            orchestrator: Section orchestrator (default built when omitted)
            options: Ingestion settings, defaults to application settings
        """
        self.store = NaturalKeyStore(session)
        self.index_resolver = orchestrator.index_resolver if orchestrator else IndexResolver()
        self.orchestrator = orchestrator or SectionOrchestrator(index_resolver=self.index_resolver)
        self.options = options or settings.ingestion

    async def ingest_bytes(
        self,
        data: bytes,
        file_name: Optional[str] = None,
        report_progress: Optional[Callable[[str], None]] = None,
    ) -> ParseResult:
        """Parse raw SPL bytes and ingest the document.

        Malformed markup produces a failed result instead of an exception.
        """
        try:
            root = parse_spl_xml(data)
        except MarkupError as e:
            LOGGER.error(str(e), extra={"file_name": file_name})
            return ParseResult.failure(str(e))
        return await self.ingest(root, file_name=file_name, report_progress=report_progress)

    async def ingest(
        self,
        root: etree._Element,
        file_name: Optional[str] = None,
        report_progress: Optional[Callable[[str], None]] = None,
    ) -> ParseResult:
        """Ingest a parsed SPL document.

        Args:
            root: The document element
            file_name: Source file name for log correlation
            report_progress: Optional progress observer

        Returns:
            Aggregated ParseResult of all sections
        """
        ctx = IngestionContext(
            store=self.store,
            file_name=file_name,
            report_progress=report_progress,
            options=self.options,
        )
        result = ParseResult()

        try:
            document = await self._get_or_create_document(root, file_name, result)
            structured_body, created = await self.store.get_or_create(
                StructuredBody, document_id=document.id
            )
            if created:
                result.record_created(StructuredBody.__name__)
        except MarkupError as e:
            LOGGER.error(f"Document skipped: {str(e)}", extra=ctx.log_extra())
            await self.store.rollback()
            result.add_error(f"Document skipped: {str(e)}")
            return result
        except Exception as e:
            LOGGER.error(f"Error creating document: {str(e)}", exc_info=True, extra=ctx.log_extra())
            await self.store.rollback()
            result.add_error(f"Error creating document: {str(e)}")
            return result

        ctx = ctx.for_document(document, structured_body)
        ctx.progress(f"Ingesting document {document.document_guid}")
        LOGGER.info("Ingesting document", extra=ctx.log_extra(document_code=document.document_code))

        section_path = (c.COMPONENT, c.STRUCTURED_BODY, c.COMPONENT, c.SECTION)
        for section_el in spl_elements(root, *section_path):
            result.merge_from(await self.orchestrator.process(section_el, ctx))
            if self.options.commit_per_section and not await self._commit(result, ctx):
                # Rolled back: records held by the context are no longer usable
                break
        else:
            await self._commit(result, ctx)

        LOGGER.info(
            "Document ingestion completed",
            extra=ctx.log_extra(
                success=result.success,
                sections=result.sections_processed,
                records_created=result.total_created,
                warnings=len(result.warnings),
                errors=len(result.errors),
            ),
        )
        return result

    async def resolve_pending_references(self) -> ParseResult:
        """Sweep the pending reference ledger and commit the links it creates."""
        ctx = IngestionContext(store=self.store, options=self.options)
        result = await self.index_resolver.resolve_pending_references(ctx)
        await self._commit(result, ctx)
        return result

    async def _commit(self, result: ParseResult, ctx: IngestionContext) -> bool:
        try:
            await self.store.commit()
            return True
        except Exception as e:
            LOGGER.error(f"Commit failed: {str(e)}", exc_info=True, extra=ctx.log_extra())
            await self.store.rollback()
            result.add_error(f"Commit failed: {str(e)}")
            return False

    async def _get_or_create_document(
        self,
        root: etree._Element,
        file_name: Optional[str],
        result: ParseResult,
    ) -> Document:
        document_guid = normalize_guid(attr(spl_element(root, c.ID), "root"))
        code_el = spl_element(root, c.CODE)
        set_guid = attr(spl_element(root, c.SET_ID), "root")

        document, created = await self.store.get_or_create(
            Document,
            defaults={
                "document_code": attr(code_el, "code"),
                "code_system": attr(code_el, "codeSystem"),
                "display_name": attr(code_el, "displayName"),
                "title": text_content(spl_element(root, c.TITLE)),
                "effective_time": attr(spl_element(root, c.EFFECTIVE_TIME), "value"),
                "set_guid": set_guid.lower() if set_guid else None,
                "version_number": _parse_int(attr(spl_element(root, c.VERSION_NUMBER), "value")),
                "file_name": file_name,
            },
            document_guid=document_guid,
        )
        if created:
            result.record_created(Document.__name__)
        return document
