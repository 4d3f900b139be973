"""create ledger tables

Revision ID: 3f9a1c2d7e10
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=True),
        sa.Column('kind', sa.String(16), nullable=False),
        sa.Column('icon', sa.String(16), nullable=True),
        sa.Column('color', sa.String(16), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_categories_owner_id', 'categories', ['owner_id'])

    op.create_table(
        'category_labels',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('language', sa.String(8), nullable=False),
        sa.Column('text', sa.String(255), nullable=False),
        sa.UniqueConstraint('category_id', 'language', name='uq_category_label_language'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('kind', sa.String(16), nullable=False),
        sa.Column('amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='TND'),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('descriptions', sa.JSON(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_transactions_owner_id', 'transactions', ['owner_id'])
    op.create_index('ix_transactions_category_id', 'transactions', ['category_id'])
    op.create_index('ix_transactions_kind', 'transactions', ['kind'])
    op.create_index('ix_transactions_occurred_at', 'transactions', ['occurred_at'])
    op.create_index(
        'ix_transactions_owner_category_occurred', 'transactions', ['owner_id', 'category_id', 'occurred_at'],
    )

    op.create_table(
        'debts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('creditor_name', sa.String(255), nullable=False),
        sa.Column('debtor_name', sa.String(255), nullable=True),
        sa.Column('debt_type', sa.String(16), nullable=False),
        sa.Column('original_amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('remaining_amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='TND'),
        sa.Column('interest_rate', sa.Numeric(precision=7, scale=4), nullable=False, server_default='0'),
        sa.Column('minimum_payment', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('payment_frequency', sa.String(16), nullable=True),
        sa.Column('debt_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('priority', sa.String(8), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('is_settled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('settlement_date', sa.Date(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('remaining_amount >= 0 AND remaining_amount <= original_amount', name='ck_debts_remaining'),
    )
    op.create_index('ix_debts_owner_id', 'debts', ['owner_id'])
    op.create_index('ix_debts_due_date', 'debts', ['due_date'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False, server_default=''),
        sa.Column('amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='TND'),
        sa.Column('period', sa.String(16), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('spent_amount', sa.Numeric(precision=20, scale=2), nullable=False, server_default='0'),
        sa.Column('alert_threshold', sa.Numeric(precision=5, scale=4), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('reconciled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_budgets_owner_id', 'budgets', ['owner_id'])
    op.create_index('ix_budgets_category_id', 'budgets', ['category_id'])
    op.create_index('ix_budgets_owner_category_active', 'budgets', ['owner_id', 'category_id', 'is_active'])

    op.create_table(
        'savings_goals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('target_amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column('current_amount', sa.Numeric(precision=20, scale=2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='TND'),
        sa.Column('target_date', sa.Date(), nullable=True),
        sa.Column('priority', sa.String(8), nullable=False, server_default='medium'),
        sa.Column('is_achieved', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('achievement_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('current_amount >= 0 AND current_amount <= target_amount', name='ck_savings_goals_current'),
    )
    op.create_index('ix_savings_goals_owner_id', 'savings_goals', ['owner_id'])


def downgrade() -> None:
    op.drop_index('ix_savings_goals_owner_id', table_name='savings_goals')
    op.drop_table('savings_goals')
    op.drop_index('ix_budgets_owner_category_active', table_name='budgets')
    op.drop_index('ix_budgets_category_id', table_name='budgets')
    op.drop_index('ix_budgets_owner_id', table_name='budgets')
    op.drop_table('budgets')
    op.drop_index('ix_debts_due_date', table_name='debts')
    op.drop_index('ix_debts_owner_id', table_name='debts')
    op.drop_table('debts')
    op.drop_index('ix_transactions_owner_category_occurred', table_name='transactions')
    op.drop_index('ix_transactions_occurred_at', table_name='transactions')
    op.drop_index('ix_transactions_kind', table_name='transactions')
    op.drop_index('ix_transactions_category_id', table_name='transactions')
    op.drop_index('ix_transactions_owner_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('category_labels')
    op.drop_index('ix_categories_owner_id', table_name='categories')
    op.drop_table('categories')
