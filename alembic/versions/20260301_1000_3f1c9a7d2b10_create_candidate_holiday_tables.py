"""create_candidate_holiday_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-03-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7d2b10'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('ADMIN', 'SUPERVISOR', 'RECRUITER', 'USER', name='userrole')
attendance_status = sa.Enum('Present', 'Absent', 'Holiday', 'Leave', name='attendancestatus')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(100), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'holidays',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_holidays_title', 'holidays', ['title'])
    op.create_index('ix_holidays_date', 'holidays', ['date'])
    op.create_index('ix_holidays_is_active', 'holidays', ['is_active'])
    op.create_index('ix_holidays_title_date', 'holidays', ['title', 'date'])

    op.create_table(
        'candidates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(100), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_candidates_email', 'candidates', ['email'], unique=True)
    op.create_index('ix_candidates_employee_id', 'candidates', ['employee_id'])

    # Holidays a candidate observes; deleting either side drops the link
    op.create_table(
        'candidate_holidays',
        sa.Column('candidate_id', sa.String(36), sa.ForeignKey('candidates.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('holiday_id', sa.String(36), sa.ForeignKey('holidays.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'candidate_groups',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_candidate_groups_name', 'candidate_groups', ['name'])
    op.create_index('ix_candidate_groups_created_by', 'candidate_groups', ['created_by'])
    op.create_index('ix_candidate_groups_is_active', 'candidate_groups', ['is_active'])
    op.create_index('ix_candidate_groups_name_active', 'candidate_groups', ['name', 'is_active'])
    op.create_index('ix_candidate_groups_creator_active', 'candidate_groups', ['created_by', 'is_active'])

    op.create_table(
        'candidate_group_members',
        sa.Column('group_id', sa.String(36), sa.ForeignKey('candidate_groups.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('candidate_id', sa.String(36), sa.ForeignKey('candidates.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('added_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'candidate_group_holidays',
        sa.Column('group_id', sa.String(36), sa.ForeignKey('candidate_groups.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('holiday_id', sa.String(36), sa.ForeignKey('holidays.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'attendance',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('candidate_id', sa.String(36), sa.ForeignKey('candidates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_email', sa.String(100), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('day', sa.String(10), nullable=True),
        sa.Column('punch_in', sa.DateTime(), nullable=False),
        sa.Column('punch_out', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('status', attendance_status, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('candidate_id', 'date', name='uq_attendance_candidate_date'),
    )
    op.create_index('ix_attendance_candidate_id', 'attendance', ['candidate_id'])
    op.create_index('ix_attendance_candidate_email', 'attendance', ['candidate_email'])
    op.create_index('ix_attendance_date', 'attendance', ['date'])
    op.create_index('ix_attendance_status', 'attendance', ['status'])


def downgrade() -> None:
    op.drop_table('attendance')
    op.drop_table('candidate_group_holidays')
    op.drop_table('candidate_group_members')
    op.drop_table('candidate_groups')
    op.drop_table('candidate_holidays')
    op.drop_table('candidates')
    op.drop_table('holidays')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)
    attendance_status.drop(op.get_bind(), checkfirst=True)
