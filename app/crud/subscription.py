from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models import Plan, Subscription, SubscriptionStatus
from app.schemas.subscription import PlanCreate


# =============================================================================
# Plans
# =============================================================================

def get_plans(db: Session, active_only: bool = False) -> List[Plan]:
    query = db.query(Plan)
    if active_only:
        query = query.filter(Plan.is_active.is_(True))
    return query.order_by(Plan.name).all()


def get_plan(db: Session, plan_id: int) -> Optional[Plan]:
    return db.query(Plan).filter(Plan.id == plan_id).first()


def create_plan(db: Session, plan_data: PlanCreate) -> Plan:
    db_plan = Plan(**plan_data.model_dump())
    db.add(db_plan)
    db.flush()
    db.refresh(db_plan)
    return db_plan


# =============================================================================
# Member subscriptions
# =============================================================================

def get_subscription(db: Session, subscription_id: int) -> Optional[Subscription]:
    return (
        db.query(Subscription)
        .options(joinedload(Subscription.plan))
        .filter(Subscription.id == subscription_id)
        .first()
    )


def get_user_subscriptions(db: Session, user_id: int) -> List[Subscription]:
    return (
        db.query(Subscription)
        .options(joinedload(Subscription.plan))
        .filter(Subscription.user_id == user_id)
        .order_by(Subscription.start_date.desc())
        .all()
    )


def get_active_subscription(db: Session, user_id: int, *, for_update: bool = False) -> Optional[Subscription]:
    query = db.query(Subscription).filter(
        Subscription.user_id == user_id,
        Subscription.status == SubscriptionStatus.ACTIVE,
    )
    if for_update:
        query = query.with_for_update()
    return query.order_by(Subscription.end_date.desc()).first()


def create_subscription(
    db: Session,
    *,
    user_id: int,
    plan: Plan,
    start_date: date,
    notes: Optional[str] = None,
) -> Subscription:
    db_subscription = Subscription(
        user_id=user_id,
        plan_id=plan.id,
        start_date=start_date,
        end_date=start_date + timedelta(days=plan.duration_days),
        remaining_visits=plan.visit_quota,
        status=SubscriptionStatus.ACTIVE,
        notes=notes,
    )
    db.add(db_subscription)
    db.flush()
    db.refresh(db_subscription)
    return db_subscription
