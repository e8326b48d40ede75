"""Initial attendance schema

Revision ID: 0001_attendance_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


revision = '0001_attendance_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('permission_overrides', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('slug'),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'org_memberships',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('organization_id', 'user_id', name='unique_org_membership'),
    )
    op.create_table(
        'small_groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('sk', sa.String(length=20), nullable=False),
        sa.Column('section', sa.String(length=20), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_small_groups_organization_id', 'small_groups', ['organization_id'])
    op.create_table(
        'small_group_leaders',
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('small_groups.id'), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
    )
    op.create_table(
        'people',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('small_groups.id'), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_people_organization_id', 'people', ['organization_id'])
    op.create_index('ix_people_group_id', 'people', ['group_id'])
    op.create_table(
        'attendance_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time_local', sa.String(length=8), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('weekday >= 0 AND weekday <= 6', name='check_schedule_weekday'),
    )
    op.create_index('ix_attendance_schedules_organization_id', 'attendance_schedules', ['organization_id'])
    op.create_table(
        'attendance_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('schedule_id', sa.Integer(), sa.ForeignKey('attendance_schedules.id'), nullable=True),
        sa.Column('event_date_local', sa.String(length=10), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('opened_at', sa.DateTime(), nullable=False),
        sa.Column('created_by_system', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('schedule_id', 'event_date_local', name='unique_schedule_event_date'),
    )
    op.create_index('ix_attendance_events_organization_id', 'attendance_events', ['organization_id'])
    op.create_index('ix_attendance_events_opened_at', 'attendance_events', ['opened_at'])
    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('attendance_events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('person_id', sa.Integer(), sa.ForeignKey('people.id'), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=True),
        sa.Column('marked_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('marked_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('event_id', 'person_id', name='unique_attendance_record'),
    )
    op.create_table(
        'attendance_guests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('attendance_events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('small_groups.id'), nullable=True),
        sa.Column('guest_name', sa.String(length=120), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=True),
        sa.Column('added_by_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_attendance_guests_event_id', 'attendance_guests', ['event_id'])
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('action_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_notifications_org_user', 'notifications', ['organization_id', 'user_id'])
    op.create_table(
        'email_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email_type', sa.String(length=50), nullable=False),
        sa.Column('recipient_email', sa.String(length=120), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('attendance_events.id', ondelete='SET NULL'), nullable=True),
        sa.Column('brevo_message_id', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade():
    op.drop_table('email_logs')
    op.drop_index('ix_notifications_org_user', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_attendance_guests_event_id', table_name='attendance_guests')
    op.drop_table('attendance_guests')
    op.drop_table('attendance_records')
    op.drop_index('ix_attendance_events_opened_at', table_name='attendance_events')
    op.drop_index('ix_attendance_events_organization_id', table_name='attendance_events')
    op.drop_table('attendance_events')
    op.drop_index('ix_attendance_schedules_organization_id', table_name='attendance_schedules')
    op.drop_table('attendance_schedules')
    op.drop_index('ix_people_group_id', table_name='people')
    op.drop_index('ix_people_organization_id', table_name='people')
    op.drop_table('people')
    op.drop_table('small_group_leaders')
    op.drop_index('ix_small_groups_organization_id', table_name='small_groups')
    op.drop_table('small_groups')
    op.drop_table('org_memberships')
    op.drop_table('users')
    op.drop_table('organizations')
