"""Pytest configuration and shared fixtures.

Database tests run against an in-memory SQLite database through aiosqlite.
SQLite's driver-level transaction handling is disabled so that SAVEPOINTs
issued by the natural-key store work the same way they do on PostgreSQL.
"""

import uuid
from typing import Callable, Optional

import pytest
from lxml import etree
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from spl_ingest.constants import SPL_NAMESPACE, XSI_NAMESPACE
from spl_ingest.core.config import settings
from spl_ingest.database import Base, Document, Section, StructuredBody
from spl_ingest.repositories.natural_key_store import NaturalKeyStore
from spl_ingest.schemas.context import IngestionContext

LOINC = "2.16.840.1.113883.6.1"


def spl_fragment(inner: str, tag: str = "section") -> etree._Element:
    """Parse markup wrapped in an element of the SPL namespace."""
    return etree.fromstring(
        f'<{tag} xmlns="{SPL_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}">{inner}</{tag}>'
    )


def spl_section(
    inner: str = "",
    guid: Optional[str] = None,
    code: str = "34067-9",
    title: str = "INDICATIONS AND USAGE",
) -> str:
    """Markup of a component/section with the given body."""
    guid = guid or str(uuid.uuid4())
    return (
        f'<component><section><id root="{guid}"/>'
        f'<code code="{code}" codeSystem="{LOINC}"/>'
        f"<title>{title}</title>{inner}</section></component>"
    )


def spl_document(
    sections: str,
    guid: Optional[str] = None,
    code: str = "34391-3",
    set_guid: str = "A1B2C3D4-0000-4000-8000-000000000001",
) -> bytes:
    """Complete SPL document bytes around a structured body."""
    guid = guid or str(uuid.uuid4())
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<document xmlns="{SPL_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}">'
        f'<id root="{guid}"/>'
        f'<code code="{code}" codeSystem="{LOINC}" displayName="HUMAN PRESCRIPTION DRUG LABEL"/>'
        f"<title>Test Label</title>"
        f'<effectiveTime value="20240115"/>'
        f'<setId root="{set_guid}"/>'
        f'<versionNumber value="3"/>'
        f"<component><structuredBody>{sections}</structuredBody></component>"
        f"</document>"
    ).encode("utf-8")


@pytest.fixture
async def engine():
    """In-memory SQLite engine with the full schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncSession:
    """Session configured like the application's session factory."""
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def store(session) -> NaturalKeyStore:
    return NaturalKeyStore(session)


@pytest.fixture
def make_context(store) -> Callable:
    """Factory for a context positioned on a fresh section.

    Every call creates a new document (so different calls model different
    source documents) unless a document GUID is passed explicitly.
    """

    async def _make(
        document_code: str = "34391-3",
        section_code: str = "34067-9",
        document_guid: Optional[str] = None,
        options=None,
    ) -> IngestionContext:
        document, _ = await store.get_or_create(
            Document,
            defaults={"document_code": document_code},
            document_guid=document_guid or str(uuid.uuid4()),
        )
        structured_body, _ = await store.get_or_create(StructuredBody, document_id=document.id)
        section, _ = await store.get_or_create(
            Section,
            defaults={"document_id": document.id, "section_code": section_code},
            structured_body_id=structured_body.id,
            section_guid=str(uuid.uuid4()),
        )
        ctx = IngestionContext(store=store, options=options or settings.ingestion)
        return ctx.for_document(document, structured_body).for_section(section)

    return _make


@pytest.fixture
async def section_ctx(make_context) -> IngestionContext:
    """Context on a plain labeling section."""
    return await make_context()
