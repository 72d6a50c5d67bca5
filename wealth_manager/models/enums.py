from enum import Enum


# ===== SHARED ENUMS =====
# Used by the ORM columns, the pydantic models and the calculation services.

class AccountTypeEnum(str, Enum):
    BANK = "bank"
    FUND = "fund"
    PENSION = "pension"
    INSURANCE = "insurance"
    OTHER = "other"


class FundTypeEnum(str, Enum):
    STOCK = "stock"
    BOND = "bond"
    MONEY = "money"
    MIXED = "mixed"
    GOLD = "gold"
    QDII = "qdii"
    OTHER = "other"


class FundTransactionTypeEnum(str, Enum):
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    SPLIT = "split"


class InvestmentFrequencyEnum(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class CashflowTypeEnum(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class CategoryTypeEnum(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriodEnum(str, Enum):
    MONTHLY = "monthly"


class GoalStatusEnum(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReminderTypeEnum(str, Enum):
    GOAL = "goal"
    BUDGET = "budget"
    INVESTMENT = "investment"
    INSURANCE = "insurance"
    OTHER = "other"
