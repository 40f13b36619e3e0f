"""initial_schema

Revision ID: c4d5e6f7a8b9
Revises:
Create Date: 2026-10-19 09:00:00.000000

초기 스키마 생성: users, vacations, shift_requests, attendance, notifications.
Create the initial schema: users, vacations, shift_requests, attendance, notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'c4d5e6f7a8b9'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users — 직원 계정 (role: user | manager | admin)
    # Staff accounts with region, shift and approval status
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('number', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), server_default='user', nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('status', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('region', sa.String(100), nullable=True),
        sa.Column('title', sa.String(100), nullable=True),
        sa.Column('shift', sa.Integer(), nullable=True),
        sa.Column('contract_start_date', sa.Date(), nullable=True),
        sa.Column('profile_image_key', sa.String(500), nullable=True),
        sa.Column('push_token', sa.String(255), nullable=True),
        sa.Column('device_type', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_region', 'users', ['region'])

    # vacations — 휴가 신청 (replacement → manager → admin)
    # Vacation requests moving through the three approval stages
    op.create_table(
        'vacations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('replacement_user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(40), server_default='pending_replacement_acceptance', nullable=False),
        sa.Column('replacement_status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('manager_approver_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('admin_approver_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('admin_comment', sa.Text(), nullable=True),
        sa.Column('is_seen', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('end_date >= start_date', name='ck_vacations_date_order'),
        sa.CheckConstraint(
            'replacement_user_id IS NULL OR replacement_user_id <> user_id',
            name='ck_vacations_no_self_replacement',
        ),
    )

    # 휴가 인덱스 — Overlap lookups by owner and by replacement
    op.create_index('ix_vacations_user_dates', 'vacations', ['user_id', 'start_date', 'end_date'])
    op.create_index('ix_vacations_replacement_dates', 'vacations', ['replacement_user_id', 'start_date', 'end_date'])
    op.create_index('ix_vacations_status', 'vacations', ['status'])

    # shift_requests — 근무조 변경 신청
    # Shift change requests (pending → approved | rejected)
    op.create_table(
        'shift_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('requested_shift', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('requested_shift IN (1, 2)', name='ck_shift_requests_shift'),
    )

    # 사용자당 대기 신청 1건 — At most one pending request per user
    op.create_index(
        'uq_shift_requests_one_pending',
        'shift_requests',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # attendance — 출퇴근 기록
    # Check-in / check-out records
    op.create_table(
        'attendance',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('check_in_time', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('check_out_time', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_attendance_user_check_in', 'attendance', ['user_id', 'check_in_time'])

    # notifications — 푸시 알림 이력
    # Push notification history
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('body', sa.String(1000), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_attendance_user_check_in', table_name='attendance')
    op.drop_table('attendance')
    op.drop_index('uq_shift_requests_one_pending', table_name='shift_requests')
    op.drop_table('shift_requests')
    op.drop_index('ix_vacations_status', table_name='vacations')
    op.drop_index('ix_vacations_replacement_dates', table_name='vacations')
    op.drop_index('ix_vacations_user_dates', table_name='vacations')
    op.drop_table('vacations')
    op.drop_index('ix_users_region', table_name='users')
    op.drop_table('users')
