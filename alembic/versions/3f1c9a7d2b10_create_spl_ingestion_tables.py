"""Create SPL ingestion tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-12 10:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _pk() -> sa.Column:
    return sa.Column('id', sa.Uuid(), nullable=False)


def _fk(name: str, target: str, nullable: bool = False, ondelete: str = 'CASCADE') -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(f'{target}.id', ondelete=ondelete), nullable=nullable)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True)


def upgrade() -> None:
    """Upgrade schema."""

    # Document skeleton
    op.create_table(
        'documents',
        _pk(),
        sa.Column('document_guid', sa.String(), nullable=False),
        sa.Column('document_code', sa.String(), nullable=True),
        sa.Column('code_system', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('effective_time', sa.String(), nullable=True),
        sa.Column('set_guid', sa.String(), nullable=True),
        sa.Column('version_number', sa.Integer(), nullable=True),
        sa.Column('file_name', sa.String(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_guid', name='uq_documents_guid'),
    )
    op.create_table(
        'structured_bodies',
        _pk(),
        _fk('document_id', 'documents'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id', name='uq_structured_bodies_document'),
    )
    op.create_table(
        'sections',
        _pk(),
        _fk('document_id', 'documents'),
        _fk('structured_body_id', 'structured_bodies'),
        sa.Column('section_guid', sa.String(), nullable=False),
        sa.Column('section_link_id', sa.String(), nullable=True),
        sa.Column('section_code', sa.String(), nullable=True),
        sa.Column('code_system', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('effective_time', sa.String(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('structured_body_id', 'section_guid', name='uq_sections_body_guid'),
    )
    op.create_table(
        'section_hierarchies',
        _pk(),
        _fk('parent_section_id', 'sections'),
        _fk('child_section_id', 'sections'),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parent_section_id', 'child_section_id', name='uq_section_hierarchies_edge'),
    )

    # Content tree
    op.create_table(
        'content_blocks',
        _pk(),
        _fk('section_id', 'sections'),
        _fk('parent_block_id', 'content_blocks', nullable=True),
        sa.Column('block_type', sa.String(), nullable=False),
        sa.Column('style_code', sa.String(), nullable=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('content_text', sa.Text(), nullable=True),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'section_id', 'parent_block_id', 'block_type', 'sequence_number', 'content_hash',
            name='uq_content_blocks_natural_key',
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index('idx_content_blocks_section_parent', 'content_blocks', ['section_id', 'parent_block_id'])

    op.create_table(
        'text_lists',
        _pk(),
        _fk('content_block_id', 'content_blocks'),
        sa.Column('list_type', sa.String(), nullable=True),
        sa.Column('style_code', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_block_id', name='uq_text_lists_block'),
    )
    op.create_table(
        'text_list_items',
        _pk(),
        _fk('list_id', 'text_lists'),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('caption', sa.String(), nullable=True),
        sa.Column('item_text', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('list_id', 'sequence_number', name='uq_text_list_items_seq'),
    )

    op.create_table(
        'text_tables',
        _pk(),
        _fk('content_block_id', 'content_blocks'),
        sa.Column('width', sa.String(), nullable=True),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('table_link_id', sa.String(), nullable=True),
        sa.Column('has_header', sa.Boolean(), nullable=False),
        sa.Column('has_footer', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_block_id', name='uq_text_tables_block'),
    )
    op.create_table(
        'text_table_columns',
        _pk(),
        _fk('table_id', 'text_tables'),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('colgroup_sequence', sa.Integer(), nullable=True),
        sa.Column('width', sa.String(), nullable=True),
        sa.Column('align', sa.String(), nullable=True),
        sa.Column('valign', sa.String(), nullable=True),
        sa.Column('style_code', sa.String(), nullable=True),
        sa.Column('colgroup_style_code', sa.String(), nullable=True),
        sa.Column('colgroup_align', sa.String(), nullable=True),
        sa.Column('colgroup_valign', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_id', 'sequence_number', name='uq_text_table_columns_seq'),
    )
    op.create_table(
        'text_table_rows',
        _pk(),
        _fk('table_id', 'text_tables'),
        sa.Column('row_group', sa.String(), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('style_code', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_id', 'row_group', 'sequence_number', name='uq_text_table_rows_seq'),
    )
    op.create_table(
        'text_table_cells',
        _pk(),
        _fk('row_id', 'text_table_rows'),
        sa.Column('cell_kind', sa.String(), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('cell_text', sa.Text(), nullable=False),
        sa.Column('row_span', sa.Integer(), nullable=True),
        sa.Column('col_span', sa.Integer(), nullable=True),
        sa.Column('align', sa.String(), nullable=True),
        sa.Column('valign', sa.String(), nullable=True),
        sa.Column('style_code', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('row_id', 'sequence_number', name='uq_text_table_cells_seq'),
    )

    # Media and highlights
    op.create_table(
        'media_assets',
        _pk(),
        _fk('section_id', 'sections'),
        _fk('document_id', 'documents'),
        sa.Column('media_token', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('media_format', sa.String(), nullable=True),
        sa.Column('xsi_type', sa.String(), nullable=True),
        sa.Column('file_reference', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'media_token', name='uq_media_assets_section_token'),
    )
    op.create_index('idx_media_assets_document_token', 'media_assets', ['document_id', 'media_token'])

    op.create_table(
        'media_links',
        _pk(),
        _fk('content_block_id', 'content_blocks'),
        _fk('media_asset_id', 'media_assets'),
        sa.Column('sequence_position', sa.Integer(), nullable=False),
        sa.Column('is_inline', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'content_block_id', 'media_asset_id', 'sequence_position', name='uq_media_links_natural_key'
        ),
    )
    op.create_table(
        'highlight_spans',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('highlight_text', sa.Text(), nullable=False),
        sa.Column('text_hash', sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'text_hash', name='uq_highlight_spans_text'),
    )

    # Indexing: substances and pharmacologic classes
    op.create_table(
        'identified_substances',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('subject_kind', sa.String(), nullable=False),
        sa.Column('identifier_value', sa.String(), nullable=False),
        sa.Column('identifier_system', sa.String(), nullable=True),
        sa.Column('is_definition', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'section_id', 'identifier_value', 'identifier_system',
            name='uq_identified_substances_identifier',
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index(
        'idx_identified_substances_identifier', 'identified_substances', ['identifier_value', 'identifier_system']
    )

    op.create_table(
        'pharmacologic_classes',
        _pk(),
        _fk('defining_substance_id', 'identified_substances', nullable=True, ondelete='SET NULL'),
        sa.Column('class_code', sa.String(), nullable=False),
        sa.Column('class_system', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'class_code', 'class_system', name='uq_pharmacologic_classes_code', postgresql_nulls_not_distinct=True
        ),
    )
    op.create_table(
        'pharmacologic_class_names',
        _pk(),
        _fk('class_id', 'pharmacologic_classes'),
        sa.Column('name_value', sa.String(), nullable=False),
        sa.Column('name_use', sa.String(length=1), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_id', 'name_value', 'name_use', name='uq_pharmacologic_class_names'),
    )
    op.create_table(
        'pharmacologic_class_links',
        _pk(),
        _fk('substance_id', 'identified_substances'),
        _fk('class_id', 'pharmacologic_classes'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('substance_id', 'class_id', name='uq_pharmacologic_class_links'),
    )
    op.create_table(
        'pharmacologic_class_hierarchies',
        _pk(),
        _fk('child_class_id', 'pharmacologic_classes'),
        _fk('parent_class_id', 'pharmacologic_classes'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('child_class_id', 'parent_class_id', name='uq_pharmacologic_class_hierarchy_edge'),
    )

    # Indexing: product concepts and interactions
    op.create_table(
        'product_concepts',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('concept_code', sa.String(), nullable=False),
        sa.Column('concept_system', sa.String(), nullable=True),
        sa.Column('concept_kind', sa.String(), nullable=False),
        sa.Column('form_code', sa.String(), nullable=True),
        sa.Column('form_code_system', sa.String(), nullable=True),
        sa.Column('form_display_name', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('concept_code', name='uq_product_concepts_code'),
    )
    op.create_table(
        'product_concept_equivalences',
        _pk(),
        _fk('application_concept_id', 'product_concepts'),
        _fk('abstract_concept_id', 'product_concepts'),
        sa.Column('equivalence_code', sa.String(), nullable=True),
        sa.Column('equivalence_system', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'application_concept_id', 'abstract_concept_id', name='uq_product_concept_equivalences'
        ),
    )
    op.create_table(
        'interaction_issues',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('interaction_code', sa.String(), nullable=False),
        sa.Column('interaction_system', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'interaction_code', name='uq_interaction_issues_code'),
    )
    op.create_table(
        'contributing_factors',
        _pk(),
        _fk('issue_id', 'interaction_issues'),
        _fk('factor_substance_id', 'identified_substances'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('issue_id', 'factor_substance_id', name='uq_contributing_factors'),
    )
    op.create_table(
        'interaction_consequences',
        _pk(),
        _fk('issue_id', 'interaction_issues'),
        sa.Column('consequence_type_code', sa.String(), nullable=True),
        sa.Column('consequence_type_system', sa.String(), nullable=True),
        sa.Column('consequence_type_display', sa.String(), nullable=True),
        sa.Column('consequence_value_code', sa.String(), nullable=False),
        sa.Column('consequence_value_system', sa.String(), nullable=True),
        sa.Column('consequence_value_display', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('issue_id', 'consequence_value_code', name='uq_interaction_consequences_value'),
    )

    # Indexing: ancillary links
    op.create_table(
        'clinical_trial_links',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('nct_number', sa.String(length=11), nullable=False),
        sa.Column('nct_root_oid', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'nct_number', name='uq_clinical_trial_links_nct'),
    )
    op.create_table(
        'billing_unit_indexes',
        _pk(),
        _fk('section_id', 'sections'),
        sa.Column('package_ndc', sa.String(), nullable=False),
        sa.Column('package_ndc_system', sa.String(), nullable=True),
        sa.Column('billing_unit_code', sa.String(), nullable=False),
        sa.Column('billing_unit_system', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'package_ndc', name='uq_billing_unit_indexes_ndc'),
    )

    # Forward reference ledger
    op.create_table(
        'pending_references',
        _pk(),
        sa.Column('reference_kind', sa.String(), nullable=False),
        sa.Column('source_id', sa.Uuid(), nullable=False),
        sa.Column('target_key', sa.String(), nullable=False),
        sa.Column('target_system', sa.String(), nullable=True),
        sa.Column('payload_code', sa.String(), nullable=True),
        sa.Column('payload_system', sa.String(), nullable=True),
        sa.Column('resolved_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference_kind', 'source_id', 'target_key', name='uq_pending_references'),
    )
    op.create_index('idx_pending_references_target', 'pending_references', ['reference_kind', 'target_key'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_pending_references_target', table_name='pending_references')
    op.drop_table('pending_references')
    op.drop_table('billing_unit_indexes')
    op.drop_table('clinical_trial_links')
    op.drop_table('interaction_consequences')
    op.drop_table('contributing_factors')
    op.drop_table('interaction_issues')
    op.drop_table('product_concept_equivalences')
    op.drop_table('product_concepts')
    op.drop_table('pharmacologic_class_hierarchies')
    op.drop_table('pharmacologic_class_links')
    op.drop_table('pharmacologic_class_names')
    op.drop_table('pharmacologic_classes')
    op.drop_index('idx_identified_substances_identifier', table_name='identified_substances')
    op.drop_table('identified_substances')
    op.drop_table('highlight_spans')
    op.drop_table('media_links')
    op.drop_index('idx_media_assets_document_token', table_name='media_assets')
    op.drop_table('media_assets')
    op.drop_table('text_table_cells')
    op.drop_table('text_table_rows')
    op.drop_table('text_table_columns')
    op.drop_table('text_tables')
    op.drop_table('text_list_items')
    op.drop_table('text_lists')
    op.drop_index('idx_content_blocks_section_parent', table_name='content_blocks')
    op.drop_table('content_blocks')
    op.drop_table('section_hierarchies')
    op.drop_table('sections')
    op.drop_table('structured_bodies')
    op.drop_table('documents')
