"""create accounts, budgets, categories, transactions and user_settings tables

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-19 10:12:44.318201

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

account_type = sa.Enum('BANK', 'CASH', 'MOBILE_MONEY', 'OTHER', name='accounttype')
budget_period = sa.Enum('WEEKLY', 'MONTHLY', 'YEARLY', name='budgetperiod')
transaction_type = sa.Enum('INCOME', 'EXPENSE', name='transactiontype')
transaction_status = sa.Enum('COMPLETED', 'PENDING', 'CANCELLED', name='transactionstatus')


def upgrade() -> None:
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=True),
        sa.Column('balance', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'name', name='uq_user_account_name'),
    )
    op.create_index('idx_accounts_user', 'accounts', ['user_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('current_amount', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('period', budget_period, nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_budgets_user_dates', 'budgets', ['user_id', 'start_date', 'end_date'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category_type', transaction_type, nullable=False),
        sa.Column('sub_categories', sa.JSON, nullable=True),
        sa.Column('budget', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'name', name='uq_user_category_name'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('budget_id', sa.Integer, sa.ForeignKey('budgets.id'), nullable=True),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('status', transaction_status, nullable=True),
        sa.Column('category_name', sa.String(100), nullable=False),
        sa.Column('category_type', transaction_type, nullable=False),
        sa.Column('sub_category', sa.String(100), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_transactions_user_account', 'transactions', ['user_id', 'account_id'])
    op.create_index('idx_transactions_user_budget', 'transactions', ['user_id', 'budget_id'])

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('language', sa.String(10), nullable=True),
        sa.Column('budget_alerts', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', name='uq_user_settings_user'),
    )


def downgrade() -> None:
    op.drop_table('user_settings')
    op.drop_index('idx_transactions_user_budget', table_name='transactions')
    op.drop_index('idx_transactions_user_account', table_name='transactions')
    op.drop_index('idx_transactions_user_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('categories')
    op.drop_index('idx_budgets_user_dates', table_name='budgets')
    op.drop_table('budgets')
    op.drop_index('idx_accounts_user', table_name='accounts')
    op.drop_table('accounts')
    transaction_status.drop(op.get_bind(), checkfirst=True)
    transaction_type.drop(op.get_bind(), checkfirst=True)
    budget_period.drop(op.get_bind(), checkfirst=True)
    account_type.drop(op.get_bind(), checkfirst=True)
