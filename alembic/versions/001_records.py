"""Add records table (document store for attendance, WFH requests and directory)

Revision ID: 001_records
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_records'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if 'records' in sa.inspect(bind).get_table_names():
        return
    # Use CURRENT_TIMESTAMP for defaults so it works on SQLite and Postgres
    op.create_table(
        'records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('collection', sa.String(), nullable=False),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('collection', 'key', name='uq_records_collection_key')
    )
    op.create_index(op.f('ix_records_id'), 'records', ['id'], unique=False)
    op.create_index(op.f('ix_records_collection'), 'records', ['collection'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_records_collection'), table_name='records')
    op.drop_index(op.f('ix_records_id'), table_name='records')
    op.drop_table('records')
