from sqlalchemy.orm import Session, joinedload
from typing import Optional, List
from datetime import datetime, date, time

from wealth_manager.crud.crud_account import read_db_account
from wealth_manager.crud.crud_fund import read_db_fund
from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import InvestmentPlanDB, ReminderDB, NotFoundError, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.enums import InvestmentFrequencyEnum, ReminderTypeEnum
from wealth_manager.models.investment_plan import InvestmentPlanCreate, InvestmentPlanUpdate
from wealth_manager.services.investment_scheduler import derive_anchor, first_occurrence, next_occurrence, resume_date

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def _fill_anchor(plan: InvestmentPlanDB) -> None:
    """Take missing day_of_month/day_of_week from next_date and drop the unused one."""
    frequency = InvestmentFrequencyEnum(plan.frequency)
    day_of_month, day_of_week = derive_anchor(frequency, plan.next_date) if plan.next_date else (None, None)

    if frequency == InvestmentFrequencyEnum.MONTHLY:
        plan.day_of_month = plan.day_of_month or day_of_month
        plan.day_of_week = None
    elif frequency in (InvestmentFrequencyEnum.WEEKLY, InvestmentFrequencyEnum.BIWEEKLY):
        plan.day_of_week = plan.day_of_week if plan.day_of_week is not None else day_of_week
        plan.day_of_month = None
    else:
        plan.day_of_month = None
        plan.day_of_week = None


def create_db_investment_plan(db: Session, user_id: int, plan_data: InvestmentPlanCreate,
                              today: Optional[date] = None) -> InvestmentPlanDB:
    """
    Create a recurring investment plan. Without an explicit next_date the first
    run is the earliest anchor date on or after today.
    """
    require_user(db, user_id)

    if not read_db_fund(db, plan_data.fund_id):
        raise NotFoundError(f"Fund with id {plan_data.fund_id} not found")
    if plan_data.account_id is not None and not read_db_account(db, plan_data.account_id, user_id):
        raise NotFoundError(f"Account with id {plan_data.account_id} not found")

    db_plan = InvestmentPlanDB(
        user_id=user_id,
        fund_id=plan_data.fund_id,
        account_id=plan_data.account_id,
        amount=plan_data.amount,
        frequency=InvestmentFrequencyEnum(plan_data.frequency),
        day_of_month=plan_data.day_of_month,
        day_of_week=plan_data.day_of_week,
        next_date=plan_data.next_date,
        is_active=plan_data.is_active,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )
    _fill_anchor(db_plan)
    if db_plan.next_date is None:
        db_plan.next_date = first_occurrence(db_plan, today or date.today())

    db.add(db_plan)
    commit_or_rollback(db, "Investment plan creation")
    db.refresh(db_plan)
    return db_plan


def read_db_investment_plan(db: Session, plan_id: int, user_id: int) -> Optional[InvestmentPlanDB]:
    return db.query(InvestmentPlanDB).filter(
        InvestmentPlanDB.id == plan_id,
        InvestmentPlanDB.user_id == user_id
    ).first()


def read_db_investment_plans(db: Session, user_id: int, active_only: bool = False,
                             skip: int = 0, limit: Optional[int] = 100) -> List[InvestmentPlanDB]:
    query = db.query(InvestmentPlanDB).filter(InvestmentPlanDB.user_id == user_id)
    if active_only:
        query = query.filter(InvestmentPlanDB.is_active.is_(True))
    return query.order_by(InvestmentPlanDB.next_date, InvestmentPlanDB.id).offset(skip).limit(limit).all()


def update_db_investment_plan(db: Session, plan_id: int, user_id: int, plan_updates: InvestmentPlanUpdate,
                              today: Optional[date] = None) -> InvestmentPlanDB:
    """Update a plan; a schedule change without a new next_date re-derives it from today"""

    db_plan = read_db_investment_plan(db, plan_id, user_id)
    if not db_plan:
        raise NotFoundError(f"Investment plan with id {plan_id} not found")

    update_data = plan_updates.model_dump(exclude_unset=True)
    if update_data.get('account_id') is not None and not read_db_account(db, update_data['account_id'], user_id):
        raise NotFoundError(f"Account with id {update_data['account_id']} not found")
    if update_data.get('frequency') is not None:
        update_data['frequency'] = InvestmentFrequencyEnum(update_data['frequency'])

    for field, value in update_data.items():
        setattr(db_plan, field, value)

    schedule_changed = bool({'frequency', 'day_of_month', 'day_of_week'} & update_data.keys())
    try:
        _fill_anchor(db_plan)
        if schedule_changed and 'next_date' not in update_data:
            db_plan.next_date = first_occurrence(db_plan, today or date.today())
        else:
            # Raises for a missing or out-of-range anchor
            next_occurrence(db_plan, db_plan.next_date or today or date.today())
    except ValueError as e:
        db.rollback()
        logger.warning(f"Rejected update of investment plan {plan_id}: {e}")
        raise
    db_plan.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Investment plan update")
    db.refresh(db_plan)
    return db_plan


def delete_db_investment_plan(db: Session, plan_id: int, user_id: int) -> bool:
    db_plan = read_db_investment_plan(db, plan_id, user_id)
    if not db_plan:
        raise NotFoundError(f"Investment plan with id {plan_id} not found")

    db.delete(db_plan)
    commit_or_rollback(db, "Investment plan deletion")
    return True


# ===== SCHEDULER COMMANDS =====

def advance_db_investment_plan(db: Session, plan_id: int, user_id: int) -> InvestmentPlanDB:
    """Move next_date to the occurrence after the current one."""

    db_plan = read_db_investment_plan(db, plan_id, user_id)
    if not db_plan:
        raise NotFoundError(f"Investment plan with id {plan_id} not found")
    if db_plan.next_date is None:
        raise ValueError("Investment plan has no scheduled date to advance from")

    previous = db_plan.next_date
    db_plan.next_date = next_occurrence(db_plan, previous)
    db_plan.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Investment plan advance")
    db.refresh(db_plan)
    logger.info(f"Advanced investment plan {plan_id} from {previous} to {db_plan.next_date}")
    return db_plan


def set_db_investment_plan_active(db: Session, plan_id: int, user_id: int, is_active: bool,
                                  today: Optional[date] = None) -> InvestmentPlanDB:
    """
    Pause or resume a plan. next_date is frozen while paused; resuming restarts
    from today without backfilling missed runs.
    """
    db_plan = read_db_investment_plan(db, plan_id, user_id)
    if not db_plan:
        raise NotFoundError(f"Investment plan with id {plan_id} not found")

    if is_active and not db_plan.is_active:
        db_plan.next_date = resume_date(db_plan, today or date.today())
    db_plan.is_active = is_active
    db_plan.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Investment plan status update")
    db.refresh(db_plan)
    return db_plan


def get_due_investment_plans(db: Session, today: Optional[date] = None,
                             user_id: Optional[int] = None) -> List[InvestmentPlanDB]:
    """Active plans whose next_date is today or earlier"""

    today = today or date.today()
    query = db.query(InvestmentPlanDB).options(joinedload(InvestmentPlanDB.fund)).filter(
        InvestmentPlanDB.is_active.is_(True),
        InvestmentPlanDB.next_date.is_not(None),
        InvestmentPlanDB.next_date <= today,
    )
    if user_id is not None:
        query = query.filter(InvestmentPlanDB.user_id == user_id)
    return query.order_by(InvestmentPlanDB.next_date, InvestmentPlanDB.id).all()


def process_due_investment_plans(db: Session, today: Optional[date] = None,
                                 user_id: Optional[int] = None) -> List[InvestmentPlanDB]:
    """
    For every due plan, record an investment reminder for the run and move
    next_date past today. A plan that fell several runs behind gets one reminder,
    not one per missed run. Each plan is committed on its own, and a plan whose
    schedule no longer resolves is skipped without a reminder.
    """
    today = today or date.today()
    processed = []

    for plan in get_due_investment_plans(db, today=today, user_id=user_id):
        due_date = plan.next_date
        try:
            next_date = next_occurrence(plan, due_date)
            while next_date <= today:
                next_date = next_occurrence(plan, next_date)
        except ValueError as e:
            logger.warning(f"Skipping investment plan {plan.id}: {e}")
            continue

        fund_name = plan.fund.name if plan.fund else f"fund {plan.fund_id}"

        db.add(ReminderDB(
            user_id=plan.user_id,
            title=f"Invest {plan.amount} in {fund_name}",
            description=f"Scheduled {InvestmentFrequencyEnum(plan.frequency).value} investment due {due_date.isoformat()}",
            remind_at=datetime.combine(due_date, time()),
            type=ReminderTypeEnum.INVESTMENT,
            reference_id=plan.id,
            is_read=False,
            created_at=datetime.utcnow()
        ))
        plan.next_date = next_date
        plan.updated_at = datetime.utcnow()

        commit_or_rollback(db, f"Processing investment plan {plan.id}")
        logger.info(f"Investment plan {plan.id} due {due_date}; next run {next_date}")
        processed.append(plan)

    return processed
