"""init schema

Revision ID: 0001_init
Revises: 
Create Date: 2025-09-01 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email')
    )
    op.create_table('shops',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('shop_number', sa.String(length=20), nullable=False),
        sa.Column('size', sa.Numeric(10, 2), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(12, 2), nullable=False),
        sa.Column('deposit', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(length=36), nullable=True),
        sa.Column('agreement_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shop_number')
    )
    op.create_table('tenants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('business_type', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('id_proof', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('agreements',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('shop_id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('agreement_date', sa.Date(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(12, 2), nullable=False),
        sa.Column('security_deposit', sa.Numeric(12, 2), nullable=False),
        sa.Column('advance_rent', sa.Numeric(12, 2), nullable=False),
        sa.Column('agreement_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('next_due_date', sa.Date(), nullable=True),
        sa.Column('last_payment_date', sa.Date(), nullable=True),
        sa.Column('active_loan_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('loans',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('agreement_id', sa.String(length=36), nullable=False),
        sa.Column('tenant_name', sa.String(length=120), nullable=True),
        sa.Column('loan_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('interest_rate', sa.Numeric(6, 2), nullable=False),
        sa.Column('disbursed_date', sa.Date(), nullable=False),
        sa.Column('loan_duration', sa.Integer(), nullable=False),
        sa.Column('monthly_emi', sa.Numeric(12, 2), nullable=False),
        sa.Column('outstanding_balance', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_repaid', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('next_emi_date', sa.Date(), nullable=True),
        sa.Column('last_payment_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['agreement_id'], ['agreements.id']),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('loan_payments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('loan_id', sa.String(length=36), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_type', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['loan_id'], ['loans.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('rent_penalties',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('agreement_id', sa.String(length=36), nullable=False),
        sa.Column('tenant_name', sa.String(length=120), nullable=True),
        sa.Column('rent_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('penalty_rate', sa.Numeric(6, 2), nullable=False),
        sa.Column('penalty_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('penalty_paid', sa.Boolean(), nullable=False),
        sa.Column('penalty_paid_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['agreement_id'], ['agreements.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('agreement_pending_penalties',
        sa.Column('agreement_id', sa.String(length=36), nullable=False),
        sa.Column('penalty_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['agreement_id'], ['agreements.id']),
        sa.ForeignKeyConstraint(['penalty_id'], ['rent_penalties.id']),
        sa.PrimaryKeyConstraint('agreement_id', 'penalty_id')
    )
    op.create_table('transactions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('sub_category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('receipt_number', sa.String(length=40), nullable=True),
        sa.Column('donor_name', sa.String(length=120), nullable=True),
        sa.Column('donor_contact', sa.String(length=10), nullable=True),
        sa.Column('family_members', sa.Integer(), nullable=True),
        sa.Column('amount_per_person', sa.Numeric(12, 2), nullable=True),
        sa.Column('vendor', sa.String(length=120), nullable=True),
        sa.Column('payee_name', sa.String(length=120), nullable=True),
        sa.Column('payee_contact', sa.String(length=10), nullable=True),
        sa.Column('tenant_name', sa.String(length=120), nullable=True),
        sa.Column('tenant_contact', sa.String(length=10), nullable=True),
        sa.Column('agreement_id', sa.String(length=36), nullable=True),
        sa.Column('shop_number', sa.String(length=20), nullable=True),
        sa.Column('payment_method', sa.String(length=30), nullable=True),
        sa.Column('loan_id', sa.String(length=36), nullable=True),
        sa.Column('emi_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('penalty_id', sa.String(length=36), nullable=True),
        sa.Column('penalty_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('idempotency_key', sa.String(length=100), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('receipt_number'),
        sa.UniqueConstraint('idempotency_key')
    )
    op.create_index('ix_transactions_date', 'transactions', ['date'])
    op.create_index('ix_transactions_type', 'transactions', ['type'])
    op.create_index('ix_transactions_agreement_id', 'transactions', ['agreement_id'])
    op.create_table('receipt_counters',
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('kind')
    )


def downgrade():
    op.drop_table('receipt_counters')
    op.drop_index('ix_transactions_agreement_id', table_name='transactions')
    op.drop_index('ix_transactions_type', table_name='transactions')
    op.drop_index('ix_transactions_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('agreement_pending_penalties')
    op.drop_table('rent_penalties')
    op.drop_table('loan_payments')
    op.drop_table('loans')
    op.drop_table('agreements')
    op.drop_table('tenants')
    op.drop_table('shops')
    op.drop_table('users')
