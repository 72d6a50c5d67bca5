import sys
import os
import random
from argparse import ArgumentParser
from sqlalchemy.orm import Session
from datetime import date, timedelta
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wealth_manager.db.core import session_local, Base, engine, UserDB, CashflowCategoryDB, FundDB
from wealth_manager.crud import (
    crud_account,
    crud_budget,
    crud_cashflow,
    crud_fund,
    crud_goal,
    crud_investment_plan,
    crud_net_worth,
    crud_user,
)
from wealth_manager.models.account import AccountCreate
from wealth_manager.models.budget import BudgetCreate
from wealth_manager.models.cashflow import CashflowTransactionCreate, CategoryCreate
from wealth_manager.models.enums import AccountTypeEnum, CashflowTypeEnum, CategoryTypeEnum, FundTypeEnum, InvestmentFrequencyEnum
from wealth_manager.models.fund import BuyTransactionCreate, FundCreate, SellTransactionCreate
from wealth_manager.models.goal import GoalCreate
from wealth_manager.models.investment_plan import InvestmentPlanCreate
from wealth_manager.models.user import UserCreate

fake = Faker()

SYSTEM_CATEGORIES = {
    CategoryTypeEnum.INCOME: {
        "Salary": [],
        "Bonus": [],
        "Investment Income": ["Dividends", "Interest"],
        "Other Income": [],
    },
    CategoryTypeEnum.EXPENSE: {
        "Housing": ["Rent", "Utilities", "Property Fees"],
        "Food": ["Groceries", "Dining Out"],
        "Transportation": ["Public Transit", "Fuel", "Ride Share"],
        "Shopping": ["Clothing", "Electronics"],
        "Entertainment": ["Streaming", "Travel"],
        "Healthcare": [],
        "Education": [],
        "Insurance Premiums": [],
    },
}

FUND_CATALOG = [
    ("110011", "E Fund Small & Mid Cap Mixed", FundTypeEnum.MIXED, Decimal("4.8210")),
    ("000961", "Tianhong CSI 300 Index", FundTypeEnum.STOCK, Decimal("1.6034")),
    ("000286", "Yinhua Credit Bond", FundTypeEnum.BOND, Decimal("1.1275")),
    ("000198", "Tianhong Yu'ebao Money Market", FundTypeEnum.MONEY, Decimal("1.0000")),
    ("000216", "Huaan Gold ETF Feeder", FundTypeEnum.GOLD, Decimal("2.3120")),
    ("040046", "Huaan Nasdaq 100 QDII", FundTypeEnum.QDII, Decimal("5.4105")),
]


def seed_reference_data(db: Session) -> dict:
    """System categories and the fund catalog, shared by every user"""

    print("Creating system categories...")
    names = {}
    for category_type, parents in SYSTEM_CATEGORIES.items():
        for parent_name, children in parents.items():
            parent = CashflowCategoryDB(name=parent_name, type=category_type, is_system=True)
            db.add(parent)
            db.flush()
            names[parent_name] = parent
            for child_name in children:
                child = CashflowCategoryDB(name=child_name, type=category_type, is_system=True, parent_id=parent.id)
                db.add(child)
                db.flush()
                names[child_name] = child

    print("Creating fund catalog...")
    for code, name, fund_type, nav in FUND_CATALOG:
        db.add(FundDB(code=code, name=name, fund_type=fund_type, nav=nav, nav_date=date.today()))

    db.commit()
    return names


def seed_user(db: Session, categories: dict, months: int):
    user = crud_user.create_db_user(db, UserCreate(email=fake.unique.email(), display_name=fake.name()))
    print(f"--- Seeding user {user.email} (ID: {user.db_id}) ---")

    bank = crud_account.create_db_account(db, user.db_id, AccountCreate(
        name=f"{fake.company()} Checking", type=AccountTypeEnum.BANK,
        balance=Decimal(random.randint(20000, 120000)), institution=fake.company()
    ))
    crud_account.create_db_account(db, user.db_id, AccountCreate(
        name="Pension", type=AccountTypeEnum.PENSION, balance=Decimal(random.randint(50000, 300000))
    ))
    crud_account.create_db_account(db, user.db_id, AccountCreate(
        name="Life Policy Cash Value", type=AccountTypeEnum.INSURANCE, balance=Decimal(random.randint(5000, 40000))
    ))
    brokerage = crud_account.create_db_account(db, user.db_id, AccountCreate(
        name="Fund Brokerage", type=AccountTypeEnum.FUND, balance=Decimal("0")
    ))

    print("Creating cashflow transactions...")
    expense_names = ["Rent", "Utilities", "Groceries", "Dining Out", "Public Transit", "Clothing", "Streaming", "Healthcare"]
    start = date.today().replace(day=1) - timedelta(days=31 * (months - 1))
    for _ in range(months * 20):
        category = categories[random.choice(expense_names)]
        crud_cashflow.create_db_cashflow_transaction(db, user.db_id, CashflowTransactionCreate(
            account_id=bank.id, category_id=category.id, type=CashflowTypeEnum.EXPENSE,
            amount=Decimal(str(round(random.uniform(15.0, 900.0), 2))),
            description=fake.catch_phrase(),
            transaction_date=fake.date_between(start_date=start, end_date="today"),
        ))
    for offset in range(months):
        payday = (date.today().replace(day=1) - timedelta(days=31 * offset)).replace(day=10)
        if payday <= date.today():
            crud_cashflow.create_db_cashflow_transaction(db, user.db_id, CashflowTransactionCreate(
                account_id=bank.id, category_id=categories["Salary"].id, type=CashflowTypeEnum.INCOME,
                amount=Decimal(random.randint(12000, 30000)), description="Monthly salary",
                transaction_date=payday, is_recurring=True,
            ))

    print("Creating fund transactions...")
    funds = db.query(FundDB).all()
    for fund in random.sample(funds, k=3):
        buy_dates = sorted(fake.date_between(start_date="-2y", end_date="-30d") for _ in range(random.randint(2, 5)))
        for buy_date in buy_dates:
            nav = fund.nav * Decimal(str(round(random.uniform(0.85, 1.1), 4)))
            crud_fund.create_db_fund_transaction(db, user.db_id, BuyTransactionCreate(
                type="buy", fund_id=fund.id, account_id=brokerage.id, transaction_date=buy_date,
                amount=Decimal(random.randint(1000, 10000)), nav=nav, fee=Decimal("1.50"),
            ))
        if random.random() < 0.5:
            holding = crud_fund.read_db_holdings(db, user.db_id)[-1]
            crud_fund.create_db_fund_transaction(db, user.db_id, SellTransactionCreate(
                type="sell", fund_id=holding.fund_id, account_id=brokerage.id,
                transaction_date=date.today() - timedelta(days=7),
                shares=(holding.shares / 3).quantize(Decimal("0.01")),
                amount=(holding.shares / 3 * holding.fund.nav).quantize(Decimal("0.01")),
            ))

    print("Creating budgets, goals and plans...")
    crud_budget.create_db_budget(db, user.db_id, BudgetCreate(amount=Decimal("8000")))
    for name in random.sample(["Groceries", "Dining Out", "Clothing", "Streaming"], k=2):
        crud_budget.create_db_budget(db, user.db_id, BudgetCreate(
            category_id=categories[name].id, amount=Decimal(random.randint(300, 2000))
        ))

    crud_goal.create_db_goal(db, user.db_id, GoalCreate(
        name="Emergency Fund", target_amount=Decimal("60000"), current_amount=Decimal(random.randint(0, 40000)),
        deadline=date.today() + timedelta(days=365), priority=1
    ))
    crud_goal.create_db_goal(db, user.db_id, GoalCreate(
        name="Travel", target_amount=Decimal("20000"), deadline=date.today() + timedelta(days=200), priority=4
    ))

    crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=funds[0].id, account_id=brokerage.id, amount=Decimal("1000"),
        frequency=InvestmentFrequencyEnum.MONTHLY, day_of_month=random.randint(1, 28)
    ))
    crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=funds[1].id, account_id=brokerage.id, amount=Decimal("300"),
        frequency=InvestmentFrequencyEnum.WEEKLY, day_of_week=random.randint(1, 5)
    ))

    crud_net_worth.create_net_worth_snapshot(db, user.db_id)


def seed_database(users: int = 3, months: int = 6):
    """
    Fills the database with system categories, a fund catalog and sample users.
    """
    Base.metadata.create_all(bind=engine)
    db: Session = session_local()

    try:
        # Check if data exists to prevent duplicate seeding
        if db.query(UserDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample data...")
        categories = seed_reference_data(db)
        for _ in range(users):
            seed_user(db, categories, months)

        print("Successfully seeded database.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = ArgumentParser(description="Seed the database with sample data")
    parser.add_argument('--users', type=int, default=3, help='Number of sample users')
    parser.add_argument('--months', type=int, default=6, help='Months of cashflow history per user')
    args = parser.parse_args()
    seed_database(users=args.users, months=args.months)
