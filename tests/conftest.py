from datetime import datetime, timedelta, time, timezone
import itertools
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.main import app
from app.database import Base, Database, SlotLockRegistry
from app.dependencies import get_db
from app.models import (
    User,
    UserRole,
    AccountStatus,
    Plan,
    PlanTier,
    Subscription,
    SubscriptionStatus,
    Instructor,
    GymClass,
    ScheduleSlot,
    SlotStatus,
)
from app.auth.jwt_handler import create_access_token

# File database so that several sessions (and threads) see the same data
DATABASE_FILE = "test_database.db"
DATABASE_URL = f"sqlite:///./{DATABASE_FILE}"

# Monday 3 November 2025, 09:00 UTC
FROZEN_NOW = datetime(2025, 11, 3, 9, 0, tzinfo=timezone.utc)

_emails = itertools.count(1)


class FrozenClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


@pytest.fixture(scope="function")
def database():
    """
    Fresh schema for every test.
    """
    if os.path.exists(DATABASE_FILE):
        os.remove(DATABASE_FILE)

    db = Database(DATABASE_URL)
    Base.metadata.create_all(bind=db.engine)
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=db.engine)
        db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(FROZEN_NOW)


@pytest.fixture
def locks():
    return SlotLockRegistry()


@pytest.fixture
def client(database, db_session):
    """
    FastAPI test client sharing the test session through the `get_db` override.
    """
    def override_get_db():
        yield db_session

    app.state.database = database
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)
    app.state.database = None


# =============================================================================
# People
# =============================================================================

@pytest.fixture
def make_user(db_session: Session):
    """
    Factory for users with unique emails.
    """
    def _make_user(
        first_name: str = "Test",
        last_name: str = "Member",
        role: UserRole = UserRole.MEMBER,
        status: AccountStatus = AccountStatus.ACTIVE,
        membership_type: PlanTier = None,
    ) -> User:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=f"user{next(_emails)}@example.com",
            phone="0940597865",
            role=role,
            status=status,
            membership_type=membership_type,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user) -> User:
    return make_user("Ada", "Admin", role=UserRole.ADMIN)


@pytest.fixture
def reception(make_user) -> User:
    return make_user("Rita", "Reception", role=UserRole.RECEPTION)


@pytest.fixture
def member(make_user) -> User:
    return make_user("Anna", "Limited", membership_type=PlanTier.MONTHLY_LIMITED)


@pytest.fixture
def other_member(make_user) -> User:
    return make_user("Boris", "Unlimited", membership_type=PlanTier.MONTHLY_UNLIMITED)


@pytest.fixture
def inactive_member(make_user) -> User:
    return make_user("Ivan", "Inactive", status=AccountStatus.INACTIVE, membership_type=PlanTier.MONTHLY_LIMITED)


def headers_for(user: User) -> dict:
    token = create_access_token({"sub": user.email, "id": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def reception_headers(reception):
    return headers_for(reception)


@pytest.fixture
def member_headers(member):
    return headers_for(member)


# =============================================================================
# Plans and subscriptions
# =============================================================================

@pytest.fixture
def limited_plan(db_session) -> Plan:
    plan = Plan(name="Monthly Limited", tier=PlanTier.MONTHLY_LIMITED, price=40.0, duration_days=30, visit_quota=12)
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


@pytest.fixture
def unlimited_plan(db_session) -> Plan:
    plan = Plan(name="Monthly Unlimited", tier=PlanTier.MONTHLY_UNLIMITED, price=70.0, duration_days=30, visit_quota=None)
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


@pytest.fixture
def make_subscription(db_session):
    def _make_subscription(user: User, plan: Plan, remaining_visits=None, status=SubscriptionStatus.ACTIVE) -> Subscription:
        subscription = Subscription(
            user_id=user.id,
            plan_id=plan.id,
            start_date=FROZEN_NOW.date() - timedelta(days=3),
            end_date=FROZEN_NOW.date() + timedelta(days=27),
            remaining_visits=remaining_visits if remaining_visits is not None else plan.visit_quota,
            status=status,
        )
        db_session.add(subscription)
        db_session.commit()
        db_session.refresh(subscription)
        return subscription

    return _make_subscription


# =============================================================================
# Catalog and schedule
# =============================================================================

@pytest.fixture
def instructor(db_session) -> Instructor:
    instructor = Instructor(
        first_name="Sara",
        last_name="Coach",
        email="sara.coach@example.com",
        specialties=["yoga"],
        certifications=[],
        experience_years=5,
    )
    db_session.add(instructor)
    db_session.commit()
    db_session.refresh(instructor)
    return instructor


@pytest.fixture
def gym_class(db_session) -> GymClass:
    gym_class = GymClass(name="Morning Yoga", duration_minutes=60, max_capacity=20, equipment=["mat"])
    db_session.add(gym_class)
    db_session.commit()
    db_session.refresh(gym_class)
    return gym_class


@pytest.fixture
def make_slot(db_session):
    def _make_slot(
        gym_class: GymClass,
        capacity: int = 2,
        day_of_week: int = 2,
        start: time = time(9, 0),
        end: time = time(10, 0),
        instructor: Instructor = None,
        status: SlotStatus = SlotStatus.ACTIVE,
    ) -> ScheduleSlot:
        slot = ScheduleSlot(
            class_id=gym_class.id,
            instructor_id=instructor.id if instructor else None,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            capacity=capacity,
            status=status,
        )
        db_session.add(slot)
        db_session.commit()
        db_session.refresh(slot)
        return slot

    return _make_slot


@pytest.fixture
def slot(make_slot, gym_class, instructor) -> ScheduleSlot:
    """Tuesday 09:00-10:00, two seats."""
    return make_slot(gym_class, instructor=instructor)


@pytest.fixture
def auth_headers_for():
    """Bearer headers for any user."""
    return headers_for
