from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import FinancialGoalDB, NotFoundError, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.enums import GoalStatusEnum
from wealth_manager.models.goal import GoalCreate, GoalUpdate, GoalProgress, GoalStats
from wealth_manager.services.goal_projector import goal_progress, goal_stats

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_goal(db: Session, user_id: int, goal_data: GoalCreate) -> FinancialGoalDB:
    require_user(db, user_id)

    db_goal = FinancialGoalDB(
        user_id=user_id,
        name=goal_data.name,
        target_amount=goal_data.target_amount,
        current_amount=goal_data.current_amount,
        deadline=goal_data.deadline,
        category=goal_data.category,
        priority=goal_data.priority,
        status=GoalStatusEnum(goal_data.status),
        notes=goal_data.notes,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_goal)
    commit_or_rollback(db, "Goal creation")
    db.refresh(db_goal)
    return db_goal


def read_db_goal(db: Session, goal_id: int, user_id: int) -> Optional[FinancialGoalDB]:
    return db.query(FinancialGoalDB).filter(
        FinancialGoalDB.id == goal_id,
        FinancialGoalDB.user_id == user_id
    ).first()


def read_db_goals(db: Session, user_id: int, status: Optional[GoalStatusEnum] = None,
                  skip: int = 0, limit: Optional[int] = 100) -> List[FinancialGoalDB]:
    """Highest priority first, then nearest deadline"""

    query = db.query(FinancialGoalDB).filter(FinancialGoalDB.user_id == user_id)
    if status:
        query = query.filter(FinancialGoalDB.status == GoalStatusEnum(status))

    query = query.order_by(FinancialGoalDB.priority, FinancialGoalDB.deadline, FinancialGoalDB.id)
    return query.offset(skip).limit(limit).all()


def update_db_goal(db: Session, goal_id: int, user_id: int, goal_updates: GoalUpdate) -> FinancialGoalDB:
    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    update_data = goal_updates.model_dump(exclude_unset=True)
    if update_data.get('status') is not None:
        update_data['status'] = GoalStatusEnum(update_data['status'])

    for field, value in update_data.items():
        setattr(db_goal, field, value)
    db_goal.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Goal update")
    db.refresh(db_goal)
    return db_goal


def delete_db_goal(db: Session, goal_id: int, user_id: int) -> bool:
    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    db.delete(db_goal)
    commit_or_rollback(db, "Goal deletion")
    return True


def complete_db_goal(db: Session, goal_id: int, user_id: int) -> FinancialGoalDB:
    return update_db_goal(db, goal_id, user_id, GoalUpdate(status=GoalStatusEnum.COMPLETED))


def update_db_goal_progress(db: Session, goal_id: int, user_id: int, current_amount: Decimal) -> FinancialGoalDB:
    """Replace the saved amount. The goal is not completed automatically."""

    if current_amount < 0:
        raise ValueError("current_amount must not be negative")

    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    db_goal.current_amount = current_amount
    db_goal.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Goal progress update")
    db.refresh(db_goal)
    return db_goal


def contribute_to_db_goal(db: Session, goal_id: int, user_id: int, amount: Decimal) -> FinancialGoalDB:
    """Add a contribution on top of the saved amount"""

    if amount <= 0:
        raise ValueError("contribution must be positive")

    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    new_amount = (db_goal.current_amount or Decimal("0")) + amount
    logger.info(f"Goal {goal_id}: contribution {amount}, saved amount now {new_amount}")
    return update_db_goal_progress(db, goal_id, user_id, new_amount)


# ===== GOAL PROJECTOR =====

def get_goal_progress(db: Session, goal_id: int, user_id: int, today: Optional[date] = None) -> GoalProgress:
    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")
    return goal_progress(db_goal, today or date.today())


def get_active_goals_progress(db: Session, user_id: int, today: Optional[date] = None) -> List[GoalProgress]:
    today = today or date.today()
    return [goal_progress(goal, today) for goal in read_db_goals(db, user_id, GoalStatusEnum.ACTIVE, limit=None)]


def get_goal_stats(db: Session, user_id: int) -> GoalStats:
    return goal_stats(read_db_goals(db, user_id, limit=None))
