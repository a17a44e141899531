import pytest
from unittest.mock import Mock, patch, MagicMock
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from app.errors.subscription_errors import SubscriptionNotFound, SubscriptionStateError
from app.models import Plan, Subscription, SubscriptionStatus
from app.schemas.subscription import SubscriptionCreate
from app.services.subscription import SubscriptionService

NOW = datetime(2025, 11, 3, 9, 0, tzinfo=timezone.utc)


# Mock the transactional context manager
@pytest.fixture
def mock_transactional():
    with patch('app.services.subscription.transactional') as mock_transactional:
        mock_session = MagicMock(spec=Session)
        mock_transactional.return_value.__enter__.return_value = mock_session
        mock_transactional.return_value.__exit__.return_value = False
        yield mock_transactional, mock_session


@pytest.fixture
def mock_db():
    return Mock(spec=Session)


@pytest.fixture
def mock_plan():
    plan = Mock(spec=Plan)
    plan.id = 3
    plan.duration_days = 30
    plan.visit_quota = 12
    return plan


@pytest.fixture
def mock_subscription(mock_plan):
    sub = Mock(spec=Subscription)
    sub.id = 1
    sub.user_id = 7
    sub.plan = mock_plan
    sub.remaining_visits = 3
    sub.has_finite_quota = True
    sub.status = SubscriptionStatus.ACTIVE
    return sub


class TestSubscriptionService:

    # --- Test Public Methods (Transactional) ---

    @patch('app.services.subscription.user_crud')
    @patch('app.services.subscription.crud')
    def test_create_subscription(self, mock_crud, mock_user_crud, mock_transactional, mock_db, mock_plan, mock_subscription):
        mock_context, mock_session = mock_transactional
        service = SubscriptionService(mock_db, clock=lambda: NOW)
        mock_crud.get_plan.return_value = mock_plan
        mock_crud.create_subscription.return_value = mock_subscription

        result = service.create_subscription(SubscriptionCreate(user_id=7, plan_id=3))

        mock_context.assert_called_once_with(mock_db)
        mock_crud.create_subscription.assert_called_once_with(
            mock_session, user_id=7, plan=mock_plan, start_date=date(2025, 11, 3), notes=None
        )
        assert result == mock_subscription

    @patch('app.services.subscription.crud')
    def test_suspend_requires_active(self, mock_crud, mock_transactional, mock_db, mock_subscription):
        mock_subscription.status = SubscriptionStatus.EXPIRED
        mock_crud.get_subscription.return_value = mock_subscription
        service = SubscriptionService(mock_db, clock=lambda: NOW)

        with pytest.raises(SubscriptionStateError):
            service.suspend(1)

    @patch('app.services.subscription.crud')
    def test_missing_subscription(self, mock_crud, mock_transactional, mock_db):
        mock_crud.get_subscription.return_value = None
        service = SubscriptionService(mock_db)

        with pytest.raises(SubscriptionNotFound):
            service.cancel(99)

    # --- Test Logic Shared With Check-in (Non-Transactional) ---

    def test_consume_visit_decrements(self, mock_db, mock_subscription):
        session = MagicMock(spec=Session)
        service = SubscriptionService(mock_db)

        service.consume_visit(session, mock_subscription)

        assert mock_subscription.remaining_visits == 2
        assert mock_subscription.status == SubscriptionStatus.ACTIVE
        session.flush.assert_called_once()

    def test_consume_last_visit_expires(self, mock_db, mock_subscription):
        mock_subscription.remaining_visits = 1
        service = SubscriptionService(mock_db)

        service.consume_visit(MagicMock(spec=Session), mock_subscription)

        assert mock_subscription.remaining_visits == 0
        assert mock_subscription.status == SubscriptionStatus.EXPIRED

    def test_consume_visit_skips_unlimited(self, mock_db, mock_subscription):
        mock_subscription.remaining_visits = None
        mock_subscription.has_finite_quota = False
        session = MagicMock(spec=Session)
        service = SubscriptionService(mock_db)

        service.consume_visit(session, mock_subscription)

        assert mock_subscription.remaining_visits is None
        session.flush.assert_not_called()
