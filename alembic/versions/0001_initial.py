"""initial relational tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(256), nullable=True),
        sa.Column('mailgun_api_key', sa.String(256), nullable=True),
        sa.Column('sending_domain', sa.String(256), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_accounts_mailgun_api_key', 'accounts', ['mailgun_api_key'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('external_id', sa.String(128), nullable=True),
        sa.Column('audiences', sa.JSON(), nullable=False),
        sa.Column('attributes', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_customers_owner_id', 'customers', ['owner_id'])
    op.create_index('ix_customers_created_at', 'customers', ['created_at'])
    op.create_index('ix_customer_external_owner', 'customers', ['external_id', 'owner_id'])

    op.create_table(
        'customer_keys',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(256), nullable=False),
        sa.Column('type', sa.String(16), nullable=False),
        sa.Column('is_array', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_customer_keys_name', 'customer_keys', ['name'], unique=True)

    op.create_table(
        'databases',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(128), nullable=True),
        sa.Column('db_type', sa.String(32), nullable=False),
        sa.Column('frequency_number', sa.Integer(), nullable=False),
        sa.Column('frequency_unit', sa.String(16), nullable=False),
        sa.Column('last_sync', sa.DateTime(), nullable=True),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('databricks_host', sa.String(256), nullable=True),
        sa.Column('databricks_path', sa.String(256), nullable=True),
        sa.Column('databricks_token', sa.String(256), nullable=True),
    )
    op.create_index('ix_databases_db_type', 'databases', ['db_type'])

    op.create_table(
        'integrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('database_id', sa.Integer(), sa.ForeignKey('databases.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_integrations_owner_id', 'integrations', ['owner_id'])

    op.create_table(
        'sendgrid_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('audience_id', sa.String(64), nullable=False),
        sa.Column('customer_id', sa.String(64), nullable=False),
        sa.Column('message_id', sa.String(256), nullable=False),
        sa.Column('event', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('sendgrid_events')
    op.drop_index('ix_integrations_owner_id', table_name='integrations')
    op.drop_table('integrations')
    op.drop_index('ix_databases_db_type', table_name='databases')
    op.drop_table('databases')
    op.drop_index('ix_customer_keys_name', table_name='customer_keys')
    op.drop_table('customer_keys')
    op.drop_index('ix_customer_external_owner', table_name='customers')
    op.drop_index('ix_customers_created_at', table_name='customers')
    op.drop_index('ix_customers_owner_id', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_accounts_mailgun_api_key', table_name='accounts')
    op.drop_table('accounts')
