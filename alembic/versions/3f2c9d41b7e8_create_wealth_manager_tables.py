"""create wealth manager tables

Revision ID: 3f2c9d41b7e8
Revises: 
Create Date: 2026-10-18 09:12:44.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2c9d41b7e8'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type = sa.Enum('BANK', 'FUND', 'PENSION', 'INSURANCE', 'OTHER', name='accounttypeenum')
fund_type = sa.Enum('STOCK', 'BOND', 'MONEY', 'MIXED', 'GOLD', 'QDII', 'OTHER', name='fundtypeenum')
fund_transaction_type = sa.Enum('BUY', 'SELL', 'DIVIDEND', 'SPLIT', name='fundtransactiontypeenum')
category_type = sa.Enum('INCOME', 'EXPENSE', name='categorytypeenum')
cashflow_type = sa.Enum('INCOME', 'EXPENSE', 'TRANSFER', name='cashflowtypeenum')
budget_period = sa.Enum('MONTHLY', name='budgetperiodenum')
goal_status = sa.Enum('ACTIVE', 'COMPLETED', 'CANCELLED', name='goalstatusenum')
investment_frequency = sa.Enum('DAILY', 'WEEKLY', 'BIWEEKLY', 'MONTHLY', name='investmentfrequencyenum')
reminder_type = sa.Enum('GOAL', 'BUDGET', 'INVESTMENT', 'INSURANCE', 'OTHER', name='remindertypeenum')


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('db_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('id', sa.Uuid, nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('email', name='uq_user_email'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'asset_accounts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', account_type, nullable=False),
        sa.Column('institution', sa.String(255), nullable=True),
        sa.Column('account_number', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('balance', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=True),
        *_audit_columns(),
    )
    op.create_index('idx_asset_accounts_user', 'asset_accounts', ['user_id'])

    op.create_table(
        'funds',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('fund_type', fund_type, nullable=True),
        sa.Column('nav', sa.DECIMAL(15, 4), nullable=True),
        sa.Column('nav_date', sa.Date, nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('code', name='uq_fund_code'),
    )
    op.create_index('idx_funds_code', 'funds', ['code'])

    op.create_table(
        'fund_holdings',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('fund_id', sa.Integer, sa.ForeignKey('funds.id'), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('asset_accounts.id'), nullable=True),
        sa.Column('shares', sa.DECIMAL(18, 6), nullable=True),
        sa.Column('cost_basis', sa.DECIMAL(18, 6), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('user_id', 'fund_id', 'account_id', name='uq_user_fund_account'),
    )
    op.create_index('idx_holdings_user', 'fund_holdings', ['user_id'])
    op.create_index('idx_holdings_fund', 'fund_holdings', ['fund_id'])

    op.create_table(
        'fund_transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('fund_id', sa.Integer, sa.ForeignKey('funds.id'), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('asset_accounts.id'), nullable=True),
        sa.Column('holding_id', sa.Integer, sa.ForeignKey('fund_holdings.id'), nullable=True),
        sa.Column('type', fund_transaction_type, nullable=False),
        sa.Column('shares', sa.DECIMAL(18, 6), nullable=True),
        sa.Column('nav', sa.DECIMAL(15, 4), nullable=True),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('fee', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_fund_transactions_user_fund_date', 'fund_transactions', ['user_id', 'fund_id', 'transaction_date'])
    op.create_index('idx_fund_transactions_holding', 'fund_transactions', ['holding_id'])
    op.create_index('idx_fund_transactions_type', 'fund_transactions', ['type'])

    op.create_table(
        'cashflow_categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', category_type, nullable=False),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('color', sa.String(7), nullable=True),
        sa.Column('is_system', sa.Boolean, nullable=True),
        sa.Column('parent_id', sa.Integer, sa.ForeignKey('cashflow_categories.id'), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_categories_user', 'cashflow_categories', ['user_id'])

    op.create_table(
        'cashflow_transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('asset_accounts.id'), nullable=True),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('cashflow_categories.id'), nullable=True),
        sa.Column('type', cashflow_type, nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('tags', sa.JSON, nullable=True),
        sa.Column('is_recurring', sa.Boolean, nullable=True),
        *_audit_columns(),
    )
    op.create_index('idx_cashflow_user_date', 'cashflow_transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_cashflow_user_category', 'cashflow_transactions', ['user_id', 'category_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('cashflow_categories.id'), nullable=True),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('period', budget_period, nullable=True),
        sa.Column('start_date', sa.Date, nullable=True),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('alert_threshold', sa.DECIMAL(3, 2), nullable=True),
        *_audit_columns(),
    )
    op.create_index('idx_budgets_user', 'budgets', ['user_id'])

    op.create_table(
        'financial_goals',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('target_amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('current_amount', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('priority', sa.Integer, nullable=True),
        sa.Column('status', goal_status, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *_audit_columns(),
    )
    op.create_index('idx_goals_user_status', 'financial_goals', ['user_id', 'status'])

    op.create_table(
        'investment_plans',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('fund_id', sa.Integer, sa.ForeignKey('funds.id'), nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('asset_accounts.id'), nullable=True),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('frequency', investment_frequency, nullable=False),
        sa.Column('day_of_month', sa.Integer, nullable=True),
        sa.Column('day_of_week', sa.Integer, nullable=True),  # 0=Sunday
        sa.Column('next_date', sa.Date, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=True),
        *_audit_columns(),
    )
    op.create_index('idx_plans_user_next_date', 'investment_plans', ['user_id', 'next_date'])

    op.create_table(
        'net_worth_snapshots',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('snapshot_date', sa.Date, nullable=False),
        sa.Column('total_assets', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('total_liabilities', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('net_worth', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('breakdown', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_snapshots_user_date', 'net_worth_snapshots', ['user_id', 'snapshot_date'])

    op.create_table(
        'reminders',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('remind_at', sa.DateTime, nullable=False),
        sa.Column('type', reminder_type, nullable=True),
        sa.Column('reference_id', sa.Integer, nullable=True),
        sa.Column('is_read', sa.Boolean, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_reminders_user_remind_at', 'reminders', ['user_id', 'remind_at'])


def downgrade() -> None:
    op.drop_table('reminders')
    op.drop_table('net_worth_snapshots')
    op.drop_table('investment_plans')
    op.drop_table('financial_goals')
    op.drop_table('budgets')
    op.drop_table('cashflow_transactions')
    op.drop_table('cashflow_categories')
    op.drop_table('fund_transactions')
    op.drop_table('fund_holdings')
    op.drop_table('funds')
    op.drop_table('asset_accounts')
    op.drop_table('users')
