"""create surveys, votes and follow_up_responses

Revision ID: 0001_initial_survey_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from tapvote.migrations.util import get_uuid_type, get_timestamp_default


# revision identifiers, used by Alembic.
revision: str = '0001_initial_survey_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the survey tables and the unique indexes that deduplicate votes."""
    uuid = get_uuid_type()

    op.create_table(
        'surveys',
        sa.Column('survey_id', uuid, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('follow_up_questions', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('owner_id', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.PrimaryKeyConstraint('survey_id'),
    )
    op.create_index('ix_surveys_owner_id', 'surveys', ['owner_id'], unique=False)
    op.create_index('ix_surveys_created_at', 'surveys', ['created_at'], unique=False)
    op.create_index('ix_surveys_owner_created', 'surveys', ['owner_id', 'created_at'], unique=False)

    op.create_table(
        'votes',
        sa.Column('vote_id', uuid, nullable=False),
        sa.Column('survey_id', uuid, nullable=False),
        sa.Column('response', sa.String(length=3), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.PrimaryKeyConstraint('vote_id'),
        sa.CheckConstraint("response IN ('yes', 'no')", name='ck_votes_response'),
    )
    op.create_index('ix_votes_survey_id', 'votes', ['survey_id'], unique=False)
    op.create_index('uq_votes_survey_device', 'votes', ['survey_id', 'device_id'], unique=True)

    op.create_table(
        'follow_up_responses',
        sa.Column('response_id', uuid, nullable=False),
        sa.Column('survey_id', uuid, nullable=False),
        sa.Column('vote_id', uuid, nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=get_timestamp_default()),
        sa.PrimaryKeyConstraint('response_id'),
        sa.ForeignKeyConstraint(['vote_id'], ['votes.vote_id']),
    )
    op.create_index('ix_follow_up_responses_survey_id', 'follow_up_responses', ['survey_id'], unique=False)
    op.create_index('uq_follow_up_responses_vote', 'follow_up_responses', ['vote_id'], unique=True)


def downgrade() -> None:
    """Drop the survey tables."""
    op.drop_index('uq_follow_up_responses_vote', table_name='follow_up_responses')
    op.drop_index('ix_follow_up_responses_survey_id', table_name='follow_up_responses')
    op.drop_table('follow_up_responses')

    op.drop_index('uq_votes_survey_device', table_name='votes')
    op.drop_index('ix_votes_survey_id', table_name='votes')
    op.drop_table('votes')

    op.drop_index('ix_surveys_owner_created', table_name='surveys')
    op.drop_index('ix_surveys_created_at', table_name='surveys')
    op.drop_index('ix_surveys_owner_id', table_name='surveys')
    op.drop_table('surveys')
