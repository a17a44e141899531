from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.plan import PlanTier


class UserRole(str, PyEnum):
    MEMBER = "MEMBER"
    INSTRUCTOR = "INSTRUCTOR"
    RECEPTION = "RECEPTION"
    SPARTA = "SPARTA"
    ADMIN = "ADMIN"


# Roles allowed to act on other members' bookings and to run the front desk
STAFF_ROLES = (UserRole.ADMIN, UserRole.SPARTA, UserRole.RECEPTION)


class AccountStatus(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.MEMBER)
    status = Column(Enum(AccountStatus), nullable=False, default=AccountStatus.ACTIVE)
    membership_type = Column(Enum(PlanTier), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    # Relationships
    bookings = relationship("Booking", back_populates="user")
    subscriptions = relationship("Subscription", back_populates="user")
    check_ins = relationship("CheckIn", back_populates="user", foreign_keys="CheckIn.user_id")

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email or "Member"

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
