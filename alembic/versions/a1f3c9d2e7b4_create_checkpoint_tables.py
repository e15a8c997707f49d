"""create_checkpoint_tables

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1f3c9d2e7b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('team_name', sa.String(length=200), nullable=False),
        sa.Column('team_code', sa.String(length=50), nullable=False),
        sa.Column('table_number', sa.String(length=20), nullable=True),
    )
    op.create_index('ix_teams_team_code', 'teams', ['team_code'], unique=True)

    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True, unique=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('qr_token', sa.String(length=255), nullable=False),
        sa.Column('is_inside_venue', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_scan_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('checked_in_day1', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('dietary_restrictions', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_participants_qr_token', 'participants', ['qr_token'], unique=True)

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('participant_id', sa.Integer(),
                  sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('direction', sa.String(length=5), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('staff_id', sa.String(length=64), nullable=True),
        sa.CheckConstraint("direction IN ('entry', 'exit')", name='ck_attendance_direction'),
    )
    op.create_index('idx_attendance_records_participant', 'attendance_records', ['participant_id'])
    op.create_index('idx_attendance_records_timestamp', 'attendance_records', ['timestamp'])

    op.create_table(
        'redemption_sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('session_key', sa.String(length=50), nullable=False),
        sa.Column('display_label', sa.String(length=200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_redemption_sessions_session_key', 'redemption_sessions', ['session_key'], unique=True)

    op.create_table(
        'redemptions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('participant_id', sa.Integer(),
                  sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('session_key', sa.String(length=50),
                  sa.ForeignKey('redemption_sessions.session_key', onupdate='CASCADE'), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('staff_id', sa.String(length=64), nullable=True),
        # Claim-once guarantee: must stay in place for concurrent stations
        sa.UniqueConstraint('participant_id', 'session_key', name='uq_redemption_participant_session'),
    )
    op.create_index('idx_redemptions_session', 'redemptions', ['session_key'])


def downgrade():
    op.drop_index('idx_redemptions_session', table_name='redemptions')
    op.drop_table('redemptions')
    op.drop_index('ix_redemption_sessions_session_key', table_name='redemption_sessions')
    op.drop_table('redemption_sessions')
    op.drop_index('idx_attendance_records_timestamp', table_name='attendance_records')
    op.drop_index('idx_attendance_records_participant', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_index('ix_participants_qr_token', table_name='participants')
    op.drop_table('participants')
    op.drop_index('ix_teams_team_code', table_name='teams')
    op.drop_table('teams')
