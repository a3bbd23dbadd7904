"""Tracker boards and onboarding goals

Revision ID: 0002_trackers
Revises: 0001_baseline
Create Date: 2026-10-19

Adds the user's profile and goal columns, and one table per tracker board:
applications with outreach, LinkedIn outreach, in-person events, career
fairs, and LeetCode practice.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_trackers'
down_revision: Union[str, Sequence[str], None] = '0001_baseline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_COLUMNS = [
    sa.Column('school', sa.String(255), nullable=True),
    sa.Column('major', sa.String(255), nullable=True),
    sa.Column('expected_graduation_date', sa.Date(), nullable=True),
    sa.Column('months_to_secure_internship', sa.Integer(), nullable=True),
    sa.Column('commitment', sa.Integer(), nullable=True),
    sa.Column('applications_per_week', sa.Integer(), nullable=True),
    sa.Column('apps_with_outreach_per_week', sa.Integer(), nullable=True),
    sa.Column('info_interview_outreach_per_week', sa.Integer(), nullable=True),
    sa.Column('in_person_events_per_month', sa.Integer(), nullable=True),
    sa.Column('career_fairs_quota', sa.Integer(), nullable=True),
    sa.Column('onboarding_progress', sa.Integer(), server_default=sa.text('0'), nullable=False),
    sa.Column('projected_offer_date', sa.DateTime(timezone=True), nullable=True),
    sa.Column('apps_with_outreach_tracker', sa.Integer(), server_default=sa.text('0'), nullable=False),
]


def _board_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
    ]


def _board_tail() -> list:
    return [
        sa.Column('status', sa.String(40), nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('date_modified', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    # ==========================================================================
    # Onboarding profile and goals
    # ==========================================================================
    with op.batch_alter_table('users') as batch_op:
        for column in USER_COLUMNS:
            batch_op.add_column(column)

    # ==========================================================================
    # Tracker boards
    # ==========================================================================
    op.create_table(
        'applications_with_outreach',
        *_board_columns(),
        sa.Column('company', sa.String(255), nullable=False),
        sa.Column('hiring_manager', sa.String(255), nullable=True),
        sa.Column('msg_to_manager', sa.Text(), nullable=True),
        sa.Column('recruiter', sa.String(255), nullable=True),
        sa.Column('msg_to_recruiter', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_board_tail(),
    )
    op.create_index(
        'ix_applications_with_outreach_user_created',
        'applications_with_outreach',
        ['user_id', 'date_created'],
    )

    op.create_table(
        'linkedin_outreach',
        *_board_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('linkedin_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('received_referral', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        *_board_tail(),
    )
    op.create_index(
        'ix_linkedin_outreach_user_created', 'linkedin_outreach', ['user_id', 'date_created']
    )

    op.create_table(
        'in_person_events',
        *_board_columns(),
        sa.Column('event', sa.String(255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('num_people_spoken_to', sa.Integer(), nullable=True),
        sa.Column('num_linkedin_requests', sa.Integer(), nullable=True),
        sa.Column('career_fair', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('num_of_interviews', sa.Integer(), nullable=True),
        *_board_tail(),
    )
    op.create_index('ix_in_person_events_user_date', 'in_person_events', ['user_id', 'date'])

    op.create_table(
        'career_fairs',
        *_board_columns(),
        sa.Column('event', sa.String(255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_board_tail(),
    )
    op.create_index('ix_career_fairs_user_date', 'career_fairs', ['user_id', 'date'])

    op.create_table(
        'leetcode_practice',
        *_board_columns(),
        sa.Column('problem', sa.String(255), nullable=False),
        sa.Column('problem_type', sa.String(100), nullable=True),
        sa.Column('difficulty', sa.String(20), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('reflection', sa.Text(), nullable=True),
        *_board_tail(),
    )
    op.create_index(
        'ix_leetcode_practice_user_created', 'leetcode_practice', ['user_id', 'date_created']
    )


def downgrade() -> None:
    op.drop_index('ix_leetcode_practice_user_created', table_name='leetcode_practice')
    op.drop_table('leetcode_practice')
    op.drop_index('ix_career_fairs_user_date', table_name='career_fairs')
    op.drop_table('career_fairs')
    op.drop_index('ix_in_person_events_user_date', table_name='in_person_events')
    op.drop_table('in_person_events')
    op.drop_index('ix_linkedin_outreach_user_created', table_name='linkedin_outreach')
    op.drop_table('linkedin_outreach')
    op.drop_index(
        'ix_applications_with_outreach_user_created', table_name='applications_with_outreach'
    )
    op.drop_table('applications_with_outreach')

    with op.batch_alter_table('users') as batch_op:
        for column in reversed(USER_COLUMNS):
            batch_op.drop_column(column.name)
