"""Create users, violations and violation_labels tables

Revision ID: 001_violation_tables
Revises:
Create Date: 2025-06-01

Initial schema for PPE violation reporting and the statistics engine.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_violation_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    user_role_enum = sa.Enum(
        'ROLE_ADMIN', 'ROLE_SAFETY_SPECIALIST', 'ROLE_EMPLOYEE',
        name='user_role_enum'
    )

    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column(
            'role',
            user_role_enum,
            nullable=False,
            index=True,
            comment="Only ROLE_EMPLOYEE users can be the subject of a violation"
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'violations',
        sa.Column('violation_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('image_url', sa.String(500), nullable=False),
        sa.Column(
            'employee_id',
            sa.Integer(),
            sa.ForeignKey('users.user_id'),
            nullable=False,
            comment="Employee caught without the required equipment"
        ),
        sa.Column(
            'reported_by_id',
            sa.Integer(),
            sa.ForeignKey('users.user_id'),
            nullable=False,
            comment="User who submitted the report"
        ),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column(
            'timestamp',
            sa.DateTime(),
            nullable=False,
            comment="Naive local time in REPORTING_TIMEZONE"
        ),
    )

    # Monthly / weekly windows and per-employee windows
    op.create_index('idx_violations_timestamp', 'violations', ['timestamp'])
    op.create_index('idx_violations_employee_timestamp', 'violations', ['employee_id', 'timestamp'])

    op.create_table(
        'violation_labels',
        sa.Column('label_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'violation_id',
            sa.Integer(),
            sa.ForeignKey('violations.violation_id', ondelete='CASCADE'),
            nullable=False,
            index=True
        ),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column(
            'position',
            sa.Integer(),
            nullable=False,
            server_default='0',
            comment="Order of the label within the submitted report"
        ),
    )
    op.create_index('idx_violation_labels_label', 'violation_labels', ['label'])


def downgrade() -> None:
    op.drop_table('violation_labels')
    op.drop_table('violations')
    op.drop_table('users')
    sa.Enum(name='user_role_enum').drop(op.get_bind(), checkfirst=True)
