import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import subscription as crud
from app.crud import user as user_crud
from app.database import transactional
from app.errors.booking_errors import UserNotFound
from app.errors.subscription_errors import SubscriptionNotFound, PlanNotFound, SubscriptionStateError
from app.models import Plan, Subscription, SubscriptionStatus
from app.schemas.subscription import PlanCreate, SubscriptionCreate
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    # --- Public Methods (Transactional) ---

    def create_plan(self, plan_data: PlanCreate) -> Plan:
        with transactional(self.db) as session:
            return crud.create_plan(session, plan_data)

    def list_plans(self, active_only: bool = False) -> List[Plan]:
        return crud.get_plans(self.db, active_only=active_only)

    def create_subscription(self, subscription_data: SubscriptionCreate) -> Subscription:
        """Starts a plan for a member with the plan's visit quota."""
        with transactional(self.db) as session:
            if not user_crud.get_user(session, subscription_data.user_id):
                raise UserNotFound(subscription_data.user_id)
            plan = crud.get_plan(session, subscription_data.plan_id)
            if not plan:
                raise PlanNotFound(f"Plan {subscription_data.plan_id} not found")

            start_date = subscription_data.start_date or self.clock().date()
            subscription = crud.create_subscription(
                session,
                user_id=subscription_data.user_id,
                plan=plan,
                start_date=start_date,
                notes=subscription_data.notes,
            )
            logger.info(f"Subscription {subscription.id} (plan {plan.id}) created for user {subscription_data.user_id}")
            return subscription

    def get_user_subscriptions(self, user_id: int) -> List[Subscription]:
        return crud.get_user_subscriptions(self.db, user_id)

    def suspend(self, subscription_id: int) -> Subscription:
        with transactional(self.db) as session:
            subscription = self._get_or_raise(session, subscription_id)
            if subscription.status != SubscriptionStatus.ACTIVE:
                raise SubscriptionStateError("Only an active subscription can be suspended")
            subscription.status = SubscriptionStatus.SUSPENDED
            subscription.notes = f"Suspended on {self.clock().isoformat()}"
            logger.info(f"Subscription {subscription_id} suspended")
            return subscription

    def reactivate(self, subscription_id: int) -> Subscription:
        with transactional(self.db) as session:
            subscription = self._get_or_raise(session, subscription_id)
            if subscription.status != SubscriptionStatus.SUSPENDED:
                raise SubscriptionStateError("Only a suspended subscription can be reactivated")
            subscription.status = SubscriptionStatus.ACTIVE
            subscription.notes = f"Reactivated on {self.clock().isoformat()}"
            logger.info(f"Subscription {subscription_id} reactivated")
            return subscription

    def cancel(self, subscription_id: int) -> Subscription:
        """Soft cancel: the subscription becomes inactive and ends today."""
        with transactional(self.db) as session:
            subscription = self._get_or_raise(session, subscription_id)
            if subscription.status == SubscriptionStatus.INACTIVE:
                raise SubscriptionStateError("Subscription is already cancelled")
            now = self.clock()
            subscription.status = SubscriptionStatus.INACTIVE
            subscription.end_date = now.date()
            subscription.notes = f"Cancelled on {now.isoformat()}"
            logger.info(f"Subscription {subscription_id} cancelled")
            return subscription

    def renew(self, subscription_id: int, start_date: Optional[date] = None) -> Subscription:
        """Starts a new period with the plan's duration and a fresh visit quota."""
        with transactional(self.db) as session:
            subscription = self._get_or_raise(session, subscription_id)
            active = crud.get_active_subscription(session, subscription.user_id, for_update=True)
            if active and active.id != subscription.id:
                raise SubscriptionStateError(
                    f"User {subscription.user_id} already has active subscription {active.id}"
                )
            plan = subscription.plan
            now = self.clock()
            start = start_date or now.date()

            subscription.status = SubscriptionStatus.ACTIVE
            subscription.start_date = start
            subscription.end_date = start + timedelta(days=plan.duration_days if plan else 30)
            subscription.remaining_visits = plan.visit_quota if plan else None
            subscription.notes = f"Renewed on {now.isoformat()}"
            logger.info(f"Subscription {subscription_id} renewed from {start} to {subscription.end_date}")
            return subscription

    # --- Logic shared with check-in (Non-Transactional) ---

    def get_active_subscription(self, session: Session, user_id: int, for_update: bool = False) -> Optional[Subscription]:
        return crud.get_active_subscription(session, user_id, for_update=for_update)

    def consume_visit(self, session: Session, subscription: Subscription) -> Subscription:
        """
        The only place a visit is taken off a subscription.

        Unlimited subscriptions (remaining_visits is None) are left untouched.
        The counter floors at zero; hitting zero expires the subscription.
        """
        if not subscription.has_finite_quota:
            return subscription

        subscription.remaining_visits = max(subscription.remaining_visits - 1, 0)
        logger.info(f"Visit consumed on subscription {subscription.id}. Remaining: {subscription.remaining_visits}")

        if subscription.remaining_visits == 0:
            subscription.status = SubscriptionStatus.EXPIRED
            logger.info(f"Subscription {subscription.id} expired: visit quota exhausted")

        session.add(subscription)
        session.flush()
        return subscription

    def _get_or_raise(self, session: Session, subscription_id: int) -> Subscription:
        subscription = crud.get_subscription(session, subscription_id)
        if not subscription:
            raise SubscriptionNotFound(f"Subscription {subscription_id} not found")
        return subscription
