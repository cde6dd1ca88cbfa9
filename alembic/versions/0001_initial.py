"""Initial tables: users, permissions, calendar items, schedule

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), primary_key=True, comment="Internal User ID"),
        sa.Column('name', sa.String(length=128), nullable=False, comment="User display name"),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'USER', name='role', native_enum=False, length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_permissions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(length=64),
                  sa.ForeignKey('users.id', ondelete='CASCADE', name='fk_user_permissions_user_id'), nullable=False),
        sa.Column('module', sa.Enum('meetings', 'deadlines', 'schedule', name='module', native_enum=False, length=16), nullable=False),
        sa.Column('my_level', sa.Enum('NONE', 'VIEW', 'EDIT', name='permissionlevel', native_enum=False, length=8), nullable=False),
        sa.Column('all_level', sa.Enum('NONE', 'VIEW', 'EDIT', name='permissionlevel', native_enum=False, length=8), nullable=False),
        sa.UniqueConstraint('user_id', 'module', name='uq_user_permissions_user_module'),
    )
    op.create_index('ix_user_permissions_user_id', 'user_permissions', ['user_id'])

    op.create_table(
        'calendar_items',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('type', sa.Enum('MEETING', 'DEADLINE', name='calendaritemtype', native_enum=False, length=16), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('all_day', sa.Boolean(), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'CONFIRMED', 'DONE', 'CANCELED', name='itemstatus', native_enum=False, length=16), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('created_by_id', sa.String(length=64),
                  sa.ForeignKey('users.id', name='fk_calendar_items_created_by_id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_calendar_items_start_at', 'calendar_items', ['start_at'])
    op.create_index('ix_calendar_items_created_by_id', 'calendar_items', ['created_by_id'])
    op.create_index('ix_calendar_items_type_status', 'calendar_items', ['type', 'status'])

    op.create_table(
        'calendar_item_participants',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('item_id', sa.String(length=64),
                  sa.ForeignKey('calendar_items.id', ondelete='CASCADE', name='fk_participants_item_id'), nullable=False),
        sa.Column('user_id', sa.String(length=64),
                  sa.ForeignKey('users.id', ondelete='CASCADE', name='fk_participants_user_id'), nullable=False),
        sa.Column('role', sa.Enum('OWNER', 'PARTICIPANT', 'RESPONSIBLE', name='participantrole', native_enum=False, length=16), nullable=False),
        sa.Column('rsvp', sa.Enum('YES', 'NO', 'MAYBE', name='rsvpstatus', native_enum=False, length=8), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
    )
    op.create_index('ix_calendar_item_participants_item_id', 'calendar_item_participants', ['item_id'])
    op.create_index('ix_calendar_item_participants_user_id', 'calendar_item_participants', ['user_id'])

    op.create_table(
        'schedule_entries',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('user_id', sa.String(length=64),
                  sa.ForeignKey('users.id', ondelete='CASCADE', name='fk_schedule_entries_user_id'), nullable=False),
        sa.Column('start_time', sa.Integer(), nullable=False),
        sa.Column('end_time', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=True),
        sa.Column('created_by_id', sa.String(length=64),
                  sa.ForeignKey('users.id', name='fk_schedule_entries_created_by_id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'date', name='uq_schedule_entries_user_date'),
        sa.CheckConstraint('end_time > start_time', name='ck_schedule_entries_time_order'),
        sa.CheckConstraint('start_time >= 0 AND start_time < 1440', name='ck_schedule_entries_start_range'),
        sa.CheckConstraint('end_time >= 0 AND end_time < 1440', name='ck_schedule_entries_end_range'),
    )
    op.create_index('ix_schedule_entries_date', 'schedule_entries', ['date'])
    op.create_index('ix_schedule_entries_user_id', 'schedule_entries', ['user_id'])
    op.create_index('ix_schedule_entries_date_start', 'schedule_entries', ['date', 'start_time'])


def downgrade() -> None:
    op.drop_table('schedule_entries')
    op.drop_table('calendar_item_participants')
    op.drop_table('calendar_items')
    op.drop_table('user_permissions')
    op.drop_table('users')
