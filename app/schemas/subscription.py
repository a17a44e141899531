from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.plan import PlanTier
from app.models.subscription import SubscriptionStatus


class PlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tier: PlanTier
    price: float = Field(0.0, ge=0)
    duration_days: int = Field(30, ge=1)
    visit_quota: Optional[int] = Field(None, ge=1)  # None = unlimited
    is_active: bool = True

    @field_validator("tier", mode="before")
    @classmethod
    def parse_tier(cls, v):
        return PlanTier.from_label(v)


class PlanResponse(BaseModel):
    id: int
    name: str
    tier: PlanTier
    price: float
    duration_days: int
    visit_quota: Optional[int] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class SubscriptionCreate(BaseModel):
    user_id: int = Field(..., alias="userId")
    plan_id: int = Field(..., alias="planId")
    start_date: Optional[date] = Field(None, alias="startDate")
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SubscriptionRenew(BaseModel):
    start_date: Optional[date] = Field(None, alias="startDate")

    model_config = ConfigDict(populate_by_name=True)


class SubscriptionResponse(BaseModel):
    id: int
    user_id: int
    plan_id: int
    start_date: date
    end_date: date
    remaining_visits: Optional[int] = None
    status: SubscriptionStatus
    notes: Optional[str] = None
    plan: Optional[PlanResponse] = None

    model_config = ConfigDict(from_attributes=True)
