"""SQLAlchemy models for the SPL ingestion tables.

Every table carries a uniqueness constraint on its natural key. The
natural-key store relies on these constraints to turn concurrent inserts of
the same logical record into a single row.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from spl_ingest.database.base import Base


class Document(Base):
    """SPL document header."""

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_guid: Mapped[str] = mapped_column(String, nullable=False)
    document_code: Mapped[str | None] = mapped_column(String, nullable=True)
    code_system: Mapped[str | None] = mapped_column(String, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    effective_time: Mapped[str | None] = mapped_column(String, nullable=True)
    set_guid: Mapped[str | None] = mapped_column(String, nullable=True)
    version_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("document_guid", name="uq_documents_guid"),
    )


class StructuredBody(Base):
    """Structured body container of a document (one per document)."""

    __tablename__ = "structured_bodies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("document_id", name="uq_structured_bodies_document"),
    )


class Section(Base):
    """A labeling section (possibly nested) of a structured body."""

    __tablename__ = "sections"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    structured_body_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("structured_bodies.id", ondelete="CASCADE"), nullable=False
    )
    section_guid: Mapped[str] = mapped_column(String, nullable=False)
    section_link_id: Mapped[str | None] = mapped_column(String, nullable=True)
    section_code: Mapped[str | None] = mapped_column(String, nullable=True)
    code_system: Mapped[str | None] = mapped_column(String, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    effective_time: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("structured_body_id", "section_guid", name="uq_sections_body_guid"),
    )


class SectionHierarchy(Base):
    """Parent/child edge between nested sections."""

    __tablename__ = "section_hierarchies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    parent_section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    child_section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("parent_section_id", "child_section_id", name="uq_section_hierarchies_edge"),
    )


class ContentBlock(Base):
    """One node of a section's content tree.

    content_text is null for containers (lists and tables). content_hash is a
    digest of the paragraph text for paragraphs and the empty string for every
    other kind, so paragraphs dedupe on text while other blocks dedupe on
    position alone.
    """

    __tablename__ = "content_blocks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    parent_block_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("content_blocks.id", ondelete="CASCADE"), nullable=True
    )
    block_type: Mapped[str] = mapped_column(String, nullable=False)
    style_code: Mapped[str | None] = mapped_column(String, nullable=True)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "section_id",
            "parent_block_id",
            "block_type",
            "sequence_number",
            "content_hash",
            name="uq_content_blocks_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("idx_content_blocks_section_parent", "section_id", "parent_block_id"),
    )


class ListRecord(Base):
    """List container, one per list content block."""

    __tablename__ = "text_lists"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    content_block_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("content_blocks.id", ondelete="CASCADE"), nullable=False
    )
    list_type: Mapped[str | None] = mapped_column(String, nullable=True)
    style_code: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("content_block_id", name="uq_text_lists_block"),
    )


class ListItem(Base):
    """A non-empty list item."""

    __tablename__ = "text_list_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("text_lists.id", ondelete="CASCADE"), nullable=False
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    caption: Mapped[str | None] = mapped_column(String, nullable=True)
    item_text: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("list_id", "sequence_number", name="uq_text_list_items_seq"),
    )


class TableRecord(Base):
    """Table container, one per table content block."""

    __tablename__ = "text_tables"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    content_block_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("content_blocks.id", ondelete="CASCADE"), nullable=False
    )
    width: Mapped[str | None] = mapped_column(String, nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    table_link_id: Mapped[str | None] = mapped_column(String, nullable=True)
    has_header: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_footer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("content_block_id", name="uq_text_tables_block"),
    )


class TableColumn(Base):
    """Column definition from col / colgroup markup."""

    __tablename__ = "text_table_columns"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    table_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("text_tables.id", ondelete="CASCADE"), nullable=False
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    colgroup_sequence: Mapped[int | None] = mapped_column(Integer, nullable=True)
    width: Mapped[str | None] = mapped_column(String, nullable=True)
    align: Mapped[str | None] = mapped_column(String, nullable=True)
    valign: Mapped[str | None] = mapped_column(String, nullable=True)
    style_code: Mapped[str | None] = mapped_column(String, nullable=True)
    colgroup_style_code: Mapped[str | None] = mapped_column(String, nullable=True)
    colgroup_align: Mapped[str | None] = mapped_column(String, nullable=True)
    colgroup_valign: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("table_id", "sequence_number", name="uq_text_table_columns_seq"),
    )


class TableRow(Base):
    """Row within a header, body or footer group."""

    __tablename__ = "text_table_rows"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    table_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("text_tables.id", ondelete="CASCADE"), nullable=False
    )
    row_group: Mapped[str] = mapped_column(String, nullable=False)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    style_code: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("table_id", "row_group", "sequence_number", name="uq_text_table_rows_seq"),
    )


class TableCell(Base):
    """Header or data cell of a row."""

    __tablename__ = "text_table_cells"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    row_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("text_table_rows.id", ondelete="CASCADE"), nullable=False
    )
    cell_kind: Mapped[str] = mapped_column(String, nullable=False)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    cell_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    row_span: Mapped[int | None] = mapped_column(Integer, nullable=True)
    col_span: Mapped[int | None] = mapped_column(Integer, nullable=True)
    align: Mapped[str | None] = mapped_column(String, nullable=True)
    valign: Mapped[str | None] = mapped_column(String, nullable=True)
    style_code: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("row_id", "sequence_number", name="uq_text_table_cells_seq"),
    )


class MediaAsset(Base):
    """Observation media registered for a section."""

    __tablename__ = "media_assets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    media_token: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_format: Mapped[str | None] = mapped_column(String, nullable=True)
    xsi_type: Mapped[str | None] = mapped_column(String, nullable=True)
    file_reference: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("section_id", "media_token", name="uq_media_assets_section_token"),
        Index("idx_media_assets_document_token", "document_id", "media_token"),
    )


class MediaLink(Base):
    """Resolved reference from a content block to a media asset."""

    __tablename__ = "media_links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    content_block_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("content_blocks.id", ondelete="CASCADE"), nullable=False
    )
    media_asset_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("media_assets.id", ondelete="CASCADE"), nullable=False
    )
    sequence_position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_inline: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint(
            "content_block_id", "media_asset_id", "sequence_position", name="uq_media_links_natural_key"
        ),
    )


class HighlightSpan(Base):
    """Highlighted excerpt text, deduplicated per owning section."""

    __tablename__ = "highlight_spans"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    highlight_text: Mapped[str] = mapped_column(Text, nullable=False)
    text_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("section_id", "text_hash", name="uq_highlight_spans_text"),
    )


class IdentifiedSubstance(Base):
    """Indexing subject: an active moiety or a pharmacologic class definition."""

    __tablename__ = "identified_substances"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    subject_kind: Mapped[str] = mapped_column(String, nullable=False)
    identifier_value: Mapped[str] = mapped_column(String, nullable=False)
    identifier_system: Mapped[str | None] = mapped_column(String, nullable=True)
    is_definition: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint(
            "section_id",
            "identifier_value",
            "identifier_system",
            name="uq_identified_substances_identifier",
            postgresql_nulls_not_distinct=True,
        ),
        Index("idx_identified_substances_identifier", "identifier_value", "identifier_system"),
    )


class PharmacologicClass(Base):
    """Globally unique pharmacologic class."""

    __tablename__ = "pharmacologic_classes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    defining_substance_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identified_substances.id", ondelete="SET NULL"), nullable=True
    )
    class_code: Mapped[str] = mapped_column(String, nullable=False)
    class_system: Mapped[str | None] = mapped_column(String, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "class_code", "class_system", name="uq_pharmacologic_classes_code", postgresql_nulls_not_distinct=True
        ),
    )


class PharmacologicClassName(Base):
    """Preferred (L) or alternate (A) name of a class."""

    __tablename__ = "pharmacologic_class_names"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pharmacologic_classes.id", ondelete="CASCADE"), nullable=False
    )
    name_value: Mapped[str] = mapped_column(String, nullable=False)
    name_use: Mapped[str] = mapped_column(String(1), nullable=False)

    __table_args__ = (
        UniqueConstraint("class_id", "name_value", "name_use", name="uq_pharmacologic_class_names"),
    )


class PharmacologicClassLink(Base):
    """Active moiety to pharmacologic class link."""

    __tablename__ = "pharmacologic_class_links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    substance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identified_substances.id", ondelete="CASCADE"), nullable=False
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pharmacologic_classes.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("substance_id", "class_id", name="uq_pharmacologic_class_links"),
    )


class PharmacologicClassHierarchy(Base):
    """Directed child to parent edge between classes."""

    __tablename__ = "pharmacologic_class_hierarchies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    child_class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pharmacologic_classes.id", ondelete="CASCADE"), nullable=False
    )
    parent_class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("pharmacologic_classes.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("child_class_id", "parent_class_id", name="uq_pharmacologic_class_hierarchy_edge"),
    )


class ProductConcept(Base):
    """Abstract or application product concept, unique by concept code."""

    __tablename__ = "product_concepts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    concept_code: Mapped[str] = mapped_column(String, nullable=False)
    concept_system: Mapped[str | None] = mapped_column(String, nullable=True)
    concept_kind: Mapped[str] = mapped_column(String, nullable=False)
    form_code: Mapped[str | None] = mapped_column(String, nullable=True)
    form_code_system: Mapped[str | None] = mapped_column(String, nullable=True)
    form_display_name: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("concept_code", name="uq_product_concepts_code"),
    )


class ProductConceptEquivalence(Base):
    """Application concept to abstract concept equivalence."""

    __tablename__ = "product_concept_equivalences"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    application_concept_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("product_concepts.id", ondelete="CASCADE"), nullable=False
    )
    abstract_concept_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("product_concepts.id", ondelete="CASCADE"), nullable=False
    )
    equivalence_code: Mapped[str | None] = mapped_column(String, nullable=True)
    equivalence_system: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "application_concept_id", "abstract_concept_id", name="uq_product_concept_equivalences"
        ),
    )


class InteractionIssue(Base):
    """Drug interaction issue of a section."""

    __tablename__ = "interaction_issues"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    interaction_code: Mapped[str] = mapped_column(String, nullable=False)
    interaction_system: Mapped[str | None] = mapped_column(String, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("section_id", "interaction_code", name="uq_interaction_issues_code"),
    )


class ContributingFactor(Base):
    """Substance contributing to an interaction issue."""

    __tablename__ = "contributing_factors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("interaction_issues.id", ondelete="CASCADE"), nullable=False
    )
    factor_substance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identified_substances.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("issue_id", "factor_substance_id", name="uq_contributing_factors"),
    )


class InteractionConsequence(Base):
    """Consequence observation of an interaction issue."""

    __tablename__ = "interaction_consequences"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("interaction_issues.id", ondelete="CASCADE"), nullable=False
    )
    consequence_type_code: Mapped[str | None] = mapped_column(String, nullable=True)
    consequence_type_system: Mapped[str | None] = mapped_column(String, nullable=True)
    consequence_type_display: Mapped[str | None] = mapped_column(String, nullable=True)
    consequence_value_code: Mapped[str] = mapped_column(String, nullable=False)
    consequence_value_system: Mapped[str | None] = mapped_column(String, nullable=True)
    consequence_value_display: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("issue_id", "consequence_value_code", name="uq_interaction_consequences_value"),
    )


class ClinicalTrialLink(Base):
    """ClinicalTrials.gov protocol reference of a section."""

    __tablename__ = "clinical_trial_links"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    nct_number: Mapped[str] = mapped_column(String(11), nullable=False)
    nct_root_oid: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("section_id", "nct_number", name="uq_clinical_trial_links_nct"),
    )


class BillingUnitIndex(Base):
    """NCPDP billing unit of a packaged product."""

    __tablename__ = "billing_unit_indexes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"), nullable=False
    )
    package_ndc: Mapped[str] = mapped_column(String, nullable=False)
    package_ndc_system: Mapped[str | None] = mapped_column(String, nullable=True)
    billing_unit_code: Mapped[str] = mapped_column(String, nullable=False)
    billing_unit_system: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("section_id", "package_ndc", name="uq_billing_unit_indexes_ndc"),
    )


class PendingReference(Base):
    """Forward reference whose target has not been ingested yet.

    source_id identifies the record holding the reference (an application
    product concept or an interaction issue). target_key and target_system
    name the record it points at.
    """

    __tablename__ = "pending_references"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    reference_kind: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    target_key: Mapped[str] = mapped_column(String, nullable=False)
    target_system: Mapped[str | None] = mapped_column(String, nullable=True)
    payload_code: Mapped[str | None] = mapped_column(String, nullable=True)
    payload_system: Mapped[str | None] = mapped_column(String, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("reference_kind", "source_id", "target_key", name="uq_pending_references"),
        Index("idx_pending_references_target", "reference_kind", "target_key"),
    )
