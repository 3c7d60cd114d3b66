"""Create event, event_instance, participant and registration tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

registration.id is AUTOINCREMENT so ids are never reused, and the
(participant_email, instance_id) pair is unique.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'event',
        sa.Column('name', sa.String(), primary_key=True),
        sa.Column('type', sa.String(), nullable=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('recurrence_pattern', sa.String(), nullable=True),
        sa.Column('default_capacity', sa.Integer(), nullable=True),
    )

    op.create_table(
        'participant',
        sa.Column('email', sa.String(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('zip', sa.String(), nullable=True),
        sa.Column('school', sa.String(), nullable=True),
        sa.Column('field_of_interest', sa.String(), nullable=True),
        sa.Column('total_donations', sa.Float(), nullable=False, server_default='0'),
    )

    op.create_table(
        'event_instance',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_name', sa.String(), sa.ForeignKey('event.name', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('registration_deadline', sa.DateTime(), nullable=True),
        sa.Column('registered_count', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_event_instance_event_name', 'event_instance', ['event_name'])
    op.create_index('ix_event_instance_start_time', 'event_instance', ['start_time'])

    op.create_table(
        'registration',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('participant_email', sa.String(), sa.ForeignKey('participant.email'), nullable=False),
        sa.Column(
            'instance_id', sa.Integer(),
            sa.ForeignKey('event_instance.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('event_name', sa.String(), nullable=False),
        sa.Column('event_start', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='Registered'),
        sa.Column('attended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('check_in_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('survey_satisfaction_score', sa.Integer(), nullable=True),
        sa.Column('survey_usefulness_score', sa.Integer(), nullable=True),
        sa.Column('survey_instructor_score', sa.Integer(), nullable=True),
        sa.Column('survey_recommendation_score', sa.Integer(), nullable=True),
        sa.Column('survey_overall_score', sa.Integer(), nullable=True),
        sa.Column('survey_comments', sa.String(), nullable=True),
        sa.Column('survey_submitted_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('participant_email', 'instance_id', name='unique_participant_instance'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_registration_participant_email', 'registration', ['participant_email'])
    op.create_index('ix_registration_instance_id', 'registration', ['instance_id'])


def downgrade() -> None:
    op.drop_index('ix_registration_instance_id', table_name='registration')
    op.drop_index('ix_registration_participant_email', table_name='registration')
    op.drop_table('registration')
    op.drop_index('ix_event_instance_start_time', table_name='event_instance')
    op.drop_index('ix_event_instance_event_name', table_name='event_instance')
    op.drop_table('event_instance')
    op.drop_table('participant')
    op.drop_table('event')
