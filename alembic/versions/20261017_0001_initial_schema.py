"""Initial schema - entries, role assignments, audit log

Revision ID: 0001
Revises: 
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Entries table
    op.create_table(
        'entries',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('kind', sa.String(32), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='draft'),
        sa.Column('created_by', sa.String(255), nullable=False, index=True),
        sa.Column('reviewed_by', sa.String(255), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('published_by', sa.String(255), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_entries_kind_status', 'entries', ['kind', 'status'])

    # Role assignments table (one row per identity)
    op.create_table(
        'role_assignments',
        sa.Column('email', sa.String(255), primary_key=True),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('assigned_by', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(255), nullable=False, index=True),
        sa.Column('actor', sa.String(255), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_actor_time', 'event_logs', ['actor', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_event_logs_actor_time', table_name='event_logs')
    op.drop_index('ix_event_logs_entity', table_name='event_logs')
    op.drop_table('event_logs')
    op.drop_table('role_assignments')
    op.drop_index('ix_entries_kind_status', table_name='entries')
    op.drop_table('entries')
