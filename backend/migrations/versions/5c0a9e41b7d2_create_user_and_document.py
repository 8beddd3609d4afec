"""create user and document tables

Revision ID: 5c0a9e41b7d2
Revises:
Create Date: 2026-10-16 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c0a9e41b7d2'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('display_name', sa.String(length=128), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_email', 'user', ['email'], unique=True)

    if 'document' not in existing_tables:
        op.create_table(
            'document',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('collection', sa.String(length=64), nullable=False),
            sa.Column('doc_id', sa.String(length=64), nullable=False),
            sa.Column('data', sa.JSON(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
            sa.UniqueConstraint('collection', 'doc_id', name='uq_document_collection_doc_id'),
        )
        op.create_index('ix_document_collection', 'document', ['collection'])


def downgrade():
    op.drop_index('ix_document_collection', table_name='document')
    op.drop_table('document')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
