from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Column, Integer, String, Float, Boolean, Enum

from app.database import Base


class PlanTier(str, PyEnum):
    MONTHLY_LIMITED = "monthly_limited"
    MONTHLY_UNLIMITED = "monthly_unlimited"
    SINGLE_VISIT = "single_visit"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "PlanTier":
        """
        Map a free-text membership label ("Monthly Limited", "unlimited", ...) onto a tier.

        "unlimited" is tested before "limited" since the former contains the latter.
        """
        if label is None:
            return cls.UNKNOWN
        if isinstance(label, cls):
            return label
        text = str(label).strip().lower()
        for tier in cls:
            if text == tier.value:
                return tier
        if "unlimited" in text:
            return cls.MONTHLY_UNLIMITED
        if "limited" in text:
            return cls.MONTHLY_LIMITED
        if "single" in text:
            return cls.SINGLE_VISIT
        return cls.UNKNOWN


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    tier = Column(Enum(PlanTier), nullable=False, default=PlanTier.UNKNOWN)
    price = Column(Float, nullable=False, default=0.0)
    duration_days = Column(Integer, nullable=False, default=30)
    visit_quota = Column(Integer, nullable=True)  # None = unlimited visits
    is_active = Column(Boolean, default=True)
