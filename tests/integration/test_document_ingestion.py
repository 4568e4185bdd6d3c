"""Whole-document ingestion through DocumentIngestionService."""

import pytest

from conftest import spl_document, spl_section
from spl_ingest.core.config import settings
from spl_ingest.database.models import (
    ContentBlock,
    Document,
    MediaLink,
    ProductConceptEquivalence,
    Section,
    SectionHierarchy,
    StructuredBody,
)
from spl_ingest.services.document_ingestion_service import DocumentIngestionService

DOCUMENT_GUID = "6B0C5F0E-8A44-4B7E-9A4C-2F7A8E3D1C55"
PARENT_GUID = "11111111-2222-4333-8444-555555555555"
CHILD_GUID = "66666666-7777-4888-9999-aaaaaaaaaaaa"
SIBLING_GUID = "bbbbbbbb-cccc-4ddd-8eee-ffffffffffff"

MEDIA_SECTION = (
    "<text><paragraph>Chemical structure:</paragraph>"
    "<renderMultimedia referencedObject='MM1'/></text>"
    "<component><observationMedia ID='MM1'><text>Structure</text>"
    "<value xsi:type='ED' mediaType='image/jpeg'><reference value='structure.jpg'/></value>"
    "</observationMedia></component>"
)


def label_document(guid: str = DOCUMENT_GUID) -> bytes:
    child = spl_section(
        "<text><paragraph>Adults: 10 mg once daily.</paragraph></text>",
        guid=CHILD_GUID,
        code="34068-7",
        title="2.1 Adult Dosage",
    )
    parent = spl_section(
        "<text><paragraph>Dose by indication.</paragraph></text>" + child,
        guid=PARENT_GUID,
        code="34068-7",
        title="2 DOSAGE AND ADMINISTRATION",
    )
    sibling = spl_section(MEDIA_SECTION, guid=SIBLING_GUID, code="34089-3", title="11 DESCRIPTION")
    return spl_document(parent + sibling, guid=guid)


@pytest.fixture
def service(session):
    return DocumentIngestionService(session)


class TestDocumentIngestion:

    @pytest.mark.asyncio
    async def test_ingests_header_sections_and_hierarchy(self, service, store):
        progress = []

        result = await service.ingest_bytes(
            label_document(), file_name="label.xml", report_progress=progress.append
        )

        assert result.success, result.errors
        assert result.sections_processed == 3

        document = await store.find(Document, document_guid=DOCUMENT_GUID.lower())
        assert document.document_code == "34391-3"
        assert document.title == "Test Label"
        assert document.effective_time == "20240115"
        assert document.set_guid == "a1b2c3d4-0000-4000-8000-000000000001"
        assert document.version_number == 3
        assert document.file_name == "label.xml"
        assert await store.count(StructuredBody) == 1

        body = await store.find(StructuredBody, document_id=document.id)
        parent = await store.find(Section, structured_body_id=body.id, section_guid=PARENT_GUID)
        child = await store.find(Section, structured_body_id=body.id, section_guid=CHILD_GUID)
        assert parent.title == "2 DOSAGE AND ADMINISTRATION"
        assert child.section_code == "34068-7"

        edge = await store.find(SectionHierarchy, parent_section_id=parent.id, child_section_id=child.id)
        assert edge.sequence_number == 1
        assert await store.count(SectionHierarchy) == 1

        assert progress
        assert any(DOCUMENT_GUID.lower() in message for message in progress)

    @pytest.mark.asyncio
    async def test_media_registered_before_content_tree(self, service, store):
        result = await service.ingest_bytes(label_document())

        assert result.success
        assert result.warnings == []
        assert await store.count(MediaLink) == 1

    @pytest.mark.asyncio
    async def test_reingesting_creates_nothing(self, service, store):
        first = await service.ingest_bytes(label_document())
        blocks_after_first = await store.count(ContentBlock)

        second = await service.ingest_bytes(label_document())

        assert first.total_created > 0
        assert second.success
        assert second.total_created == 0
        assert second.sections_processed == 3
        assert await store.count(ContentBlock) == blocks_after_first
        assert await store.count(Document) == 1

    @pytest.mark.asyncio
    async def test_malformed_bytes_fail_without_writes(self, service, store):
        result = await service.ingest_bytes(b"<document xmlns='urn:hl7-org:v3'><id root='x'>", file_name="broken.xml")

        assert result.success is False
        assert "Malformed" in result.errors[0]
        assert await store.count(Document) == 0

    @pytest.mark.asyncio
    async def test_document_without_guid_is_skipped(self, service, store):
        data = label_document().replace(f'<id root="{DOCUMENT_GUID}"/>'.encode(), b"")

        result = await service.ingest_bytes(data)

        assert result.success is False
        assert "Document skipped" in result.errors[0]
        assert await store.count(Section) == 0


class TestSectionIsolation:

    @pytest.mark.asyncio
    async def test_bad_section_guid_does_not_stop_siblings(self, service, store):
        data = spl_document(
            spl_section("<text><paragraph>Broken</paragraph></text>", guid="not-a-guid")
            + spl_section("<text><paragraph>Fine</paragraph></text>", guid=SIBLING_GUID)
        )

        result = await service.ingest_bytes(data)

        assert result.success is False
        assert any("not-a-guid" in error for error in result.errors)
        assert result.sections_processed == 1
        sections = await store.repository(Section).find_all()
        assert [s.section_guid for s in sections] == [SIBLING_GUID]

    @pytest.mark.asyncio
    async def test_sibling_sections_number_their_children_independently(self, service, store):
        first_children = spl_section(guid="00000000-0000-4000-8000-000000000001") + spl_section(
            guid="00000000-0000-4000-8000-000000000002"
        )
        second_children = spl_section(guid="00000000-0000-4000-8000-000000000003")
        data = spl_document(
            spl_section(first_children, guid=PARENT_GUID) + spl_section(second_children, guid=SIBLING_GUID)
        )

        result = await service.ingest_bytes(data)

        assert result.success
        edges = await store.repository(SectionHierarchy).find_all(order_by="sequence_number")
        assert sorted(e.sequence_number for e in edges) == [1, 1, 2]

    @pytest.mark.asyncio
    async def test_nesting_deeper_than_limit_is_reported(self, session, store):
        options = settings.ingestion.model_copy(update={"max_section_depth": 0})
        service = DocumentIngestionService(session, options=options)
        data = spl_document(spl_section(spl_section(guid=CHILD_GUID), guid=PARENT_GUID))

        result = await service.ingest_bytes(data)

        assert result.success is False
        assert any("nesting" in error for error in result.errors)
        assert await store.count(Section) == 1


class TestPendingSweep:

    @pytest.mark.asyncio
    async def test_sweep_links_deferred_equivalence(self, session, store):
        options = settings.ingestion.model_copy(update={"resolve_pending_on_insert": False})
        service = DocumentIngestionService(session, options=options)
        application = spl_section(
            "<subject><manufacturedProduct><manufacturedProduct>"
            "<code code='APP-9' codeSystem='2.16.840.1.113883.3.3389'/>"
            "<asEquivalentEntity><code code='C64637' codeSystem='2.16.840.1.113883.3.26.1.1'/>"
            "<definingMaterialKind><code code='ABS-9' codeSystem='2.16.840.1.113883.3.3389'/></definingMaterialKind>"
            "</asEquivalentEntity></manufacturedProduct></manufacturedProduct></subject>",
            code="48779-3",
        )
        abstract = spl_section(
            "<subject><manufacturedProduct><manufacturedProduct>"
            "<code code='ABS-9' codeSystem='2.16.840.1.113883.3.3389'/>"
            "<formCode code='C42998' codeSystem='2.16.840.1.113883.3.26.1.1'/>"
            "</manufacturedProduct></manufacturedProduct></subject>",
            code="48779-3",
        )

        await service.ingest_bytes(spl_document(application, code="71445-1"))
        await service.ingest_bytes(spl_document(abstract, code="71445-1"))
        assert await store.count(ProductConceptEquivalence) == 0

        sweep = await service.resolve_pending_references()

        assert sweep.success
        assert sweep.created == {ProductConceptEquivalence.__name__: 1}
        assert await store.count(ProductConceptEquivalence) == 1
