"""Create profile setup and reason tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

ACCOUNT_ROLES = (
    'Volunteer', 'Mentor', 'Manager', 'Assistant Manager', 'Core Team', 'Administrator', 'Owner'
)


def upgrade() -> None:
    """Create projects, accounts, invitation tokens and reasons."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
    op.execute(
        "CREATE TYPE account_role AS ENUM (" + ", ".join(f"'{r}'" for r in ACCOUNT_ROLES) + ")"
    )

    op.create_table(
        'projects',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('project_name', sa.String(255), nullable=False),
        sa.Column('category', sa.String(100), nullable=False, server_default='Unspecified'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )
    op.create_index('idx_projects_name', 'projects', ['project_name'], unique=True)

    op.create_table(
        'accounts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', postgresql.ENUM(*ACCOUNT_ROLES, name='account_role', create_type=False), nullable=False, server_default='Volunteer'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('job_title', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('weekly_committed_hours', sa.Float, nullable=False, server_default='0'),
        sa.Column('collaboration_preference', sa.String(255), nullable=True),
        sa.Column('time_zone', sa.String(64), nullable=False, server_default='America/Los_Angeles'),
        sa.Column('location', postgresql.JSON, nullable=True),
        sa.Column('privacy_settings', postgresql.JSON, nullable=False),
        sa.Column('permissions', postgresql.JSON, nullable=False),
        sa.Column('bio', sa.Text, nullable=False, server_default=''),
        sa.Column('bio_posted', sa.String(32), nullable=False, server_default='default'),
        sa.Column('personal_links', postgresql.JSON, nullable=False),
        sa.Column('admin_links', postgresql.JSON, nullable=False),
        sa.Column('weekly_summaries', postgresql.JSON, nullable=False),
        sa.Column('weekly_summaries_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('weekly_summary_option', sa.String(32), nullable=False, server_default='Required'),
        sa.Column('media_url', sa.String(1024), nullable=False, server_default=''),
        sa.Column('team_code', sa.String(16), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )
    op.create_index('idx_accounts_email', 'accounts', ['email'], unique=True)

    op.create_table(
        'account_projects',
        sa.Column('account_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('accounts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True),
    )

    # One live token per email; the unique index turns concurrent issuance
    # for the same address into a constraint violation.
    op.create_table(
        'invitation_tokens',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('expiration', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )
    op.create_index('idx_invitation_tokens_token', 'invitation_tokens', ['token'], unique=True)
    op.create_index('idx_invitation_tokens_email', 'invitation_tokens', ['email'], unique=True)

    op.create_table(
        'reasons',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('uuid_generate_v4()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.UniqueConstraint('user_id', 'date', name='uq_reasons_user_date'),
        sa.CheckConstraint('LENGTH(reason) > 0', name='reason_not_empty'),
    )
    op.create_index('idx_reasons_user_id', 'reasons', ['user_id'])


def downgrade() -> None:
    """Drop profile setup and reason tables."""
    op.drop_table('reasons')
    op.drop_table('invitation_tokens')
    op.drop_table('account_projects')
    op.drop_table('accounts')
    op.drop_table('projects')
    op.execute('DROP TYPE IF EXISTS account_role')
