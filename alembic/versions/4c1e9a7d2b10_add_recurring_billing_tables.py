"""add_recurring_billing_tables

Revision ID: 4c1e9a7d2b10
Revises:
Create Date: 2025-11-20 09:14:02.418733

Adds the tables read and written by recurring payment processing.

Tables:
- tenants: Merchants, with optional per-tenant iPOS Transact credentials
- customer_profiles: Customers and their stored card tokens
- recurring_subscriptions: Recurring billing agreements and failure accounting
- payment_logs: Append-only audit trail, one row per charge attempt
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c1e9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add recurring billing tables with indexes and constraints."""

    op.create_table(
        'tenants',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(), nullable=False),

        # iPOS Transact credentials (fall back to global settings when null)
        sa.Column('gateway_auth_token', sa.String(512), nullable=True),
        sa.Column('gateway_merchant_id', sa.String(32), nullable=True),
        sa.Column('gateway_test_mode', sa.Boolean(), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tenants_id'), 'tenants', ['id'], unique=False)
    op.create_index(op.f('ix_tenants_name'), 'tenants', ['name'], unique=False)

    op.create_table(
        'customer_profiles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('tenant_id', sa.BigInteger(), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),

        # Stored card token
        sa.Column('payment_token', sa.String(512), nullable=True),
        sa.Column('token_status', sa.String(20), nullable=False, server_default='inactive'),
        sa.Column('card_last4', sa.String(4), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_customer_profiles_id'), 'customer_profiles', ['id'], unique=False)
    op.create_index(op.f('ix_customer_profiles_tenant_id'), 'customer_profiles', ['tenant_id'], unique=False)
    op.create_index('idx_customer_profile_tenant_email', 'customer_profiles', ['tenant_id', 'email'], unique=False)

    op.create_table(
        'recurring_subscriptions',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('tenant_id', sa.BigInteger(), nullable=False),
        sa.Column('customer_id', sa.BigInteger(), nullable=False),

        # Charge terms
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('billing_cycle', sa.String(20), nullable=False),
        sa.Column('billing_day', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),

        # Schedule
        sa.Column('next_charge_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_charge_date', sa.DateTime(timezone=True), nullable=True),

        # Failure accounting
        sa.Column('failed_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_failure_reason', sa.Text(), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['customer_id'], ['customer_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_recurring_subscription_amount_positive'),
        sa.CheckConstraint('failed_attempts >= 0', name='ck_recurring_subscription_failed_attempts'),
        sa.CheckConstraint(
            'billing_day IS NULL OR (billing_day >= 1 AND billing_day <= 31)',
            name='ck_recurring_subscription_billing_day',
        ),
    )
    op.create_index(op.f('ix_recurring_subscriptions_id'), 'recurring_subscriptions', ['id'], unique=False)
    op.create_index(op.f('ix_recurring_subscriptions_tenant_id'), 'recurring_subscriptions', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_recurring_subscriptions_customer_id'), 'recurring_subscriptions', ['customer_id'], unique=False)
    op.create_index(op.f('ix_recurring_subscriptions_status'), 'recurring_subscriptions', ['status'], unique=False)
    op.create_index('idx_recurring_subscription_due', 'recurring_subscriptions', ['status', 'next_charge_date'], unique=False)
    op.create_index('idx_recurring_subscription_tenant_status', 'recurring_subscriptions', ['tenant_id', 'status'], unique=False)

    op.create_table(
        'payment_logs',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('subscription_id', sa.BigInteger(), nullable=False),
        sa.Column('tenant_id', sa.BigInteger(), nullable=False),
        sa.Column('customer_id', sa.BigInteger(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),

        # Gateway outcome
        sa.Column('transaction_id', sa.String(255), nullable=True),
        sa.Column('auth_code', sa.String(64), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('raw_response', postgresql.JSONB(astext_type=sa.Text()), nullable=True),

        sa.Column('attempted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['subscription_id'], ['recurring_subscriptions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payment_logs_id'), 'payment_logs', ['id'], unique=False)
    op.create_index(op.f('ix_payment_logs_subscription_id'), 'payment_logs', ['subscription_id'], unique=False)
    op.create_index(op.f('ix_payment_logs_tenant_id'), 'payment_logs', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_payment_logs_customer_id'), 'payment_logs', ['customer_id'], unique=False)
    op.create_index(op.f('ix_payment_logs_status'), 'payment_logs', ['status'], unique=False)
    op.create_index('idx_payment_log_subscription_attempted', 'payment_logs', ['subscription_id', 'attempted_at'], unique=False)


def downgrade() -> None:
    """Drop recurring billing tables in dependency order."""
    op.drop_index('idx_payment_log_subscription_attempted', table_name='payment_logs')
    op.drop_index(op.f('ix_payment_logs_status'), table_name='payment_logs')
    op.drop_index(op.f('ix_payment_logs_customer_id'), table_name='payment_logs')
    op.drop_index(op.f('ix_payment_logs_tenant_id'), table_name='payment_logs')
    op.drop_index(op.f('ix_payment_logs_subscription_id'), table_name='payment_logs')
    op.drop_index(op.f('ix_payment_logs_id'), table_name='payment_logs')
    op.drop_table('payment_logs')

    op.drop_index('idx_recurring_subscription_tenant_status', table_name='recurring_subscriptions')
    op.drop_index('idx_recurring_subscription_due', table_name='recurring_subscriptions')
    op.drop_index(op.f('ix_recurring_subscriptions_status'), table_name='recurring_subscriptions')
    op.drop_index(op.f('ix_recurring_subscriptions_customer_id'), table_name='recurring_subscriptions')
    op.drop_index(op.f('ix_recurring_subscriptions_tenant_id'), table_name='recurring_subscriptions')
    op.drop_index(op.f('ix_recurring_subscriptions_id'), table_name='recurring_subscriptions')
    op.drop_table('recurring_subscriptions')

    op.drop_index('idx_customer_profile_tenant_email', table_name='customer_profiles')
    op.drop_index(op.f('ix_customer_profiles_tenant_id'), table_name='customer_profiles')
    op.drop_index(op.f('ix_customer_profiles_id'), table_name='customer_profiles')
    op.drop_table('customer_profiles')

    op.drop_index(op.f('ix_tenants_name'), table_name='tenants')
    op.drop_index(op.f('ix_tenants_id'), table_name='tenants')
    op.drop_table('tenants')
