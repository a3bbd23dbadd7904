"""Baseline migration - users, instructors, partnerships, enrollments, cards

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every table of the tracker, including the partial unique index that
allows at most one active enrollment per user.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade() -> None:
    # ==========================================================================
    # Identity
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'instructors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )

    # ==========================================================================
    # Partnerships (ids come from the catalog)
    # ==========================================================================
    op.create_table(
        'partnerships',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('role', sa.String(255), nullable=True),
        sa.Column('linkedin_url', sa.String(500), nullable=True),
        sa.Column('max_users', sa.Integer(), nullable=False),
        sa.Column('active_user_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # ==========================================================================
    # Enrollments
    # ==========================================================================
    op.create_table(
        'user_partnerships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('partnership_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('selections', JSON, nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['partnership_id'], ['partnerships.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'uq_one_active_partnership_per_user',
        'user_partnerships',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )
    op.create_index('ix_user_partnerships_user_status', 'user_partnerships', ['user_id', 'status'])
    op.create_index(
        'ix_user_partnerships_partnership_status', 'user_partnerships', ['partnership_id', 'status']
    )

    # ==========================================================================
    # Open-source cards
    # ==========================================================================
    op.create_table(
        'open_source_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('enrollment_id', sa.Uuid(), nullable=True),
        sa.Column('partnership_name', sa.String(255), nullable=True),
        sa.Column('criteria_type', sa.String(100), nullable=False),
        sa.Column('metric', sa.String(255), nullable=True),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('selected_extras', JSON, nullable=False),
        sa.Column('plan_fields', JSON, nullable=True),
        sa.Column('plan_responses', JSON, nullable=True),
        sa.Column('baby_step_fields', JSON, nullable=True),
        sa.Column('baby_step_responses', JSON, nullable=True),
        sa.Column('proof_of_completion', JSON, nullable=True),
        sa.Column('proof_responses', JSON, nullable=True),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('date_modified', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['enrollment_id'], ['user_partnerships.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_open_source_entries_user_modified', 'open_source_entries', ['user_id', 'date_modified']
    )
    op.create_index('ix_open_source_entries_enrollment', 'open_source_entries', ['enrollment_id'])


def downgrade() -> None:
    op.drop_index('ix_open_source_entries_enrollment', table_name='open_source_entries')
    op.drop_index('ix_open_source_entries_user_modified', table_name='open_source_entries')
    op.drop_table('open_source_entries')
    op.drop_index('ix_user_partnerships_partnership_status', table_name='user_partnerships')
    op.drop_index('ix_user_partnerships_user_status', table_name='user_partnerships')
    op.drop_index('uq_one_active_partnership_per_user', table_name='user_partnerships')
    op.drop_table('user_partnerships')
    op.drop_table('partnerships')
    op.drop_table('instructors')
    op.drop_table('users')
