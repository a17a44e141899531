from datetime import date, timedelta

import pytest

from app.errors.booking_errors import UserNotFound
from app.errors.subscription_errors import PlanNotFound, SubscriptionNotFound, SubscriptionStateError
from app.models import PlanTier, SubscriptionStatus
from app.schemas.subscription import PlanCreate, SubscriptionCreate
from app.services.subscription import SubscriptionService


@pytest.fixture
def subscription_service(db_session, clock):
    return SubscriptionService(db_session, clock=clock)


class TestPlans:
    def test_plan_tier_is_parsed_from_label(self, subscription_service):
        plan = subscription_service.create_plan(
            PlanCreate(name="Gold", tier="Monthly Unlimited", price=70, duration_days=30)
        )

        assert plan.tier == PlanTier.MONTHLY_UNLIMITED
        assert plan.visit_quota is None

    def test_list_active_plans(self, subscription_service, limited_plan, unlimited_plan, db_session):
        unlimited_plan.is_active = False
        db_session.commit()

        assert [p.id for p in subscription_service.list_plans(active_only=True)] == [limited_plan.id]
        assert len(subscription_service.list_plans()) == 2


class TestCreateSubscription:
    def test_period_and_quota_come_from_plan(self, subscription_service, member, limited_plan, clock):
        subscription = subscription_service.create_subscription(
            SubscriptionCreate(user_id=member.id, plan_id=limited_plan.id)
        )

        assert subscription.start_date == clock().date()
        assert subscription.end_date == clock().date() + timedelta(days=30)
        assert subscription.remaining_visits == 12
        assert subscription.status == SubscriptionStatus.ACTIVE

    def test_unknown_plan(self, subscription_service, member):
        with pytest.raises(PlanNotFound):
            subscription_service.create_subscription(SubscriptionCreate(user_id=member.id, plan_id=999))

    def test_unknown_user(self, subscription_service, limited_plan):
        with pytest.raises(UserNotFound):
            subscription_service.create_subscription(SubscriptionCreate(user_id=999, plan_id=limited_plan.id))


class TestLifecycle:
    def test_suspend_and_reactivate(self, subscription_service, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan)

        assert subscription_service.suspend(subscription.id).status == SubscriptionStatus.SUSPENDED
        assert subscription_service.reactivate(subscription.id).status == SubscriptionStatus.ACTIVE

    def test_only_active_can_be_suspended(self, subscription_service, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan, status=SubscriptionStatus.EXPIRED)

        with pytest.raises(SubscriptionStateError):
            subscription_service.suspend(subscription.id)

    def test_only_suspended_can_be_reactivated(self, subscription_service, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan)

        with pytest.raises(SubscriptionStateError):
            subscription_service.reactivate(subscription.id)

    def test_cancel_ends_today(self, subscription_service, member, limited_plan, make_subscription, clock):
        subscription = make_subscription(member, limited_plan)

        cancelled = subscription_service.cancel(subscription.id)

        assert cancelled.status == SubscriptionStatus.INACTIVE
        assert cancelled.end_date == clock().date()
        with pytest.raises(SubscriptionStateError):
            subscription_service.cancel(subscription.id)

    def test_renew_resets_period_and_quota(self, subscription_service, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan, remaining_visits=0, status=SubscriptionStatus.EXPIRED)

        renewed = subscription_service.renew(subscription.id, start_date=date(2025, 12, 1))

        assert renewed.status == SubscriptionStatus.ACTIVE
        assert renewed.start_date == date(2025, 12, 1)
        assert renewed.end_date == date(2025, 12, 31)
        assert renewed.remaining_visits == 12

    def test_renew_refused_while_another_subscription_is_active(self, subscription_service, db_session, member, limited_plan, unlimited_plan, make_subscription):
        expired = make_subscription(member, limited_plan, remaining_visits=0, status=SubscriptionStatus.EXPIRED)
        current = make_subscription(member, unlimited_plan)

        with pytest.raises(SubscriptionStateError):
            subscription_service.renew(expired.id)

        db_session.expire_all()
        assert expired.status == SubscriptionStatus.EXPIRED
        assert subscription_service.get_active_subscription(db_session, member.id).id == current.id

    def test_renew_active_subscription_extends_it(self, subscription_service, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan, remaining_visits=3)

        renewed = subscription_service.renew(subscription.id, start_date=date(2025, 12, 1))

        assert renewed.status == SubscriptionStatus.ACTIVE
        assert renewed.remaining_visits == 12

    def test_unknown_subscription(self, subscription_service):
        with pytest.raises(SubscriptionNotFound):
            subscription_service.suspend(12345)


class TestConsumeVisit:
    def test_counter_floors_at_zero(self, subscription_service, db_session, member, limited_plan, make_subscription):
        subscription = make_subscription(member, limited_plan, remaining_visits=0)

        subscription_service.consume_visit(db_session, subscription)

        assert subscription.remaining_visits == 0
        assert subscription.status == SubscriptionStatus.EXPIRED

    def test_unlimited_is_untouched(self, subscription_service, db_session, other_member, unlimited_plan, make_subscription):
        subscription = make_subscription(other_member, unlimited_plan)

        subscription_service.consume_visit(db_session, subscription)

        assert subscription.remaining_visits is None
        assert subscription.status == SubscriptionStatus.ACTIVE
